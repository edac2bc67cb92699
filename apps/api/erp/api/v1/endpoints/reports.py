"""Report endpoints: JSON rows or a rendered export."""

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from erp.api.v1.endpoints.exports import ensure_export_enabled, export_error_to_http
from erp.core.config import settings
from erp.core.feature_flags import is_enabled
from erp.core.observability import trace_function
from erp.schemas.reports import ReportQuery
from erp.services.exports import ExportCache, ExportError, ExportOptions, ExportService, make_cache_key
from erp.services.exports.cache import get_export_cache
from erp.services.exports.service import get_export_service
from erp.services.reports import (
    ReportFilters,
    ReportRepository,
    get_report_definition,
    get_report_repository,
)

router = APIRouter()

QUERY_ERROR_MESSAGES = {
    "format": "Invalid export format",
    "start_date": "Invalid start date format",
    "end_date": "Invalid end date format",
}


def get_report_query(
    export_format: str = Query("json", alias="format"),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    status: Optional[str] = None,
    theme: Optional[str] = None,
    page_size: Optional[str] = None,
) -> ReportQuery:
    """Validate report query parameters, answering 400 on bad input."""
    try:
        return ReportQuery(
            format=export_format,
            start_date=start_date or None,
            end_date=end_date or None,
            status=status or None,
            theme=theme,
            page_size=page_size,
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = error["loc"][0] if error["loc"] else None
        message = QUERY_ERROR_MESSAGES.get(field, error["msg"])
        raise HTTPException(status_code=400, detail=message)


@router.get("/{report_type}")
@trace_function("report_endpoint.get_report")
async def get_report(
    report_type: str,
    query: ReportQuery = Depends(get_report_query),
    repository: ReportRepository = Depends(get_report_repository),
    cache: ExportCache = Depends(get_export_cache),
    export_service: ExportService = Depends(get_export_service),
) -> Any:
    """Build a report; ``format=json`` returns rows, other formats a file."""
    definition = get_report_definition(report_type)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown report type: {report_type}")

    if query.status and query.status not in definition.statuses:
        raise HTTPException(status_code=400, detail="Invalid status value")

    if query.format != "json":
        ensure_export_enabled(query.format)

    filters = ReportFilters(
        start_date=query.start_date,
        end_date=query.end_date,
        status=query.status,
    )

    use_cache = is_enabled("enable_report_cache")
    cache_key = make_cache_key(report_type, filters.start_date, filters.end_date, filters.status)
    rows = cache.get(cache_key) if use_cache else None
    if rows is None:
        rows = await repository.fetch(report_type, filters)
        if use_cache:
            cache.set(cache_key, rows)

    if query.format == "json":
        return rows

    options = ExportOptions(
        fields=list(definition.fields),
        title=definition.title,
        subtitle=f"Generated on {date.today():%m/%d/%Y}",
        theme=query.theme or settings.EXPORT_DEFAULT_THEME,
        page_size=query.page_size or settings.EXPORT_DEFAULT_PAGE_SIZE,
        field_types=dict(definition.field_types),
    )

    try:
        return await export_service.handle_export(rows, query.format, definition.filename, options)
    except ExportError as e:
        raise export_error_to_http(e)
