"""Report query schemas."""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, model_validator

ReportFormat = Literal["json", "csv", "excel", "pdf", "preview"]


class ReportQuery(BaseModel):
    """Query parameters accepted by every report endpoint."""
    
    format: ReportFormat = "json"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    theme: Optional[str] = None
    page_size: Optional[str] = None
    
    @model_validator(mode="after")
    def check_date_range(self) -> "ReportQuery":
        """Reject ranges that end before they start."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self
