"""Export schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ExportRequest(BaseModel):
    """Ad-hoc export of caller-supplied rows."""
    
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    filename: str = Field("export", pattern=r"^[A-Za-z0-9._-]{1,100}$")
    options: Optional[Dict[str, Any]] = None


class FieldCatalogResponse(BaseModel):
    """Export fields available for a report type."""
    
    report_type: str
    title: str
    fields: List[str]
    field_types: Dict[str, str]
    statuses: List[str]
    formats: List[str]
