"""Export endpoints for rendering caller-supplied rows."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from erp.core.config import settings
from erp.core.feature_flags import is_enabled
from erp.core.observability import trace_function
from erp.schemas.exports import ExportRequest, FieldCatalogResponse
from erp.services.exports import EXPORT_FORMATS, THEMES, ExportError, ExportOptions, ExportService
from erp.services.exports.service import get_export_service
from erp.services.reports import get_report_definition

router = APIRouter()


def export_error_to_http(error: ExportError) -> HTTPException:
    """Translate an export failure into an HTTP error."""
    status_code = 400 if error.is_client_error else 500
    return HTTPException(status_code=status_code, detail=error.to_dict())


def ensure_export_enabled(format_type: str) -> None:
    """Reject exports switched off by feature flags."""
    if not is_enabled("enable_exports"):
        raise HTTPException(status_code=403, detail="Exports are disabled")
    if format_type == "preview" and not is_enabled("enable_preview"):
        raise HTTPException(status_code=403, detail="Previews are disabled")


@router.get("/themes")
async def list_themes() -> Dict[str, Any]:
    """List the built-in export themes."""
    return {"themes": list(THEMES), "default": settings.EXPORT_DEFAULT_THEME}


@router.get("/fields/{report_type}", response_model=FieldCatalogResponse)
async def get_field_catalog(report_type: str) -> FieldCatalogResponse:
    """Return the export fields of a report type."""
    definition = get_report_definition(report_type)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown report type: {report_type}")

    return FieldCatalogResponse(
        report_type=definition.key,
        title=definition.title,
        fields=definition.fields,
        field_types=definition.field_types,
        statuses=list(definition.statuses),
        formats=list(EXPORT_FORMATS),
    )


@router.post("/{format_type}")
@trace_function("export_endpoint.create_export")
async def create_export(
    format_type: str,
    request: ExportRequest,
    export_service: ExportService = Depends(get_export_service),
) -> Response:
    """Render the posted rows as csv, excel, pdf or an HTML preview."""
    ensure_export_enabled(format_type)

    try:
        options = ExportOptions.from_dict(request.options)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid export options: {e}")

    try:
        return await export_service.handle_export(request.rows, format_type, request.filename, options)
    except ExportError as e:
        raise export_error_to_http(e)
