"""Report export subsystem."""

from erp.services.exports.cache import (
    ExportCache,
    get_cached_data,
    make_cache_key,
    set_cached_data,
)
from erp.services.exports.charts import ChartGenerator
from erp.services.exports.errors import ExportError
from erp.services.exports.formatting import (
    FieldValue,
    format_currency,
    format_date,
    get_formatted_value,
    get_status_color,
    resolve,
    resolve_value,
)
from erp.services.exports.options import (
    EXPORT_FORMATS,
    ChartData,
    ChartDataset,
    ExportOptions,
    SheetSpec,
)
from erp.services.exports.renderers import (
    CSVExporter,
    ExcelExporter,
    PDFExporter,
    PreviewExporter,
)
from erp.services.exports.service import ExportService
from erp.services.exports.themes import THEMES, Theme, get_theme

__all__ = [
    "EXPORT_FORMATS",
    "THEMES",
    "CSVExporter",
    "ChartData",
    "ChartDataset",
    "ChartGenerator",
    "ExcelExporter",
    "ExportCache",
    "ExportError",
    "ExportOptions",
    "ExportService",
    "FieldValue",
    "PDFExporter",
    "PreviewExporter",
    "SheetSpec",
    "Theme",
    "format_currency",
    "format_date",
    "get_cached_data",
    "get_formatted_value",
    "get_status_color",
    "get_theme",
    "make_cache_key",
    "resolve",
    "resolve_value",
    "set_cached_data",
]
