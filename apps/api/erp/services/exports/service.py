"""Export dispatcher selecting a renderer by format."""

import logging
from typing import Any, Optional, Sequence

from fastapi.responses import Response

from erp.core.observability import trace_function
from erp.services.exports.charts import ChartGenerator
from erp.services.exports.errors import UNSUPPORTED_FORMAT, ExportError
from erp.services.exports.options import EXPORT_FORMATS, ExportOptions
from erp.services.exports.renderers import (
    CSVExporter,
    ExcelExporter,
    PDFExporter,
    PreviewExporter,
)

logger = logging.getLogger(__name__)


class ExportService:
    """Main export service coordinating the format renderers."""

    def __init__(self, chart_generator: Optional[ChartGenerator] = None) -> None:
        """Initialize export service."""
        self.chart_generator = chart_generator or ChartGenerator()
        self.csv_exporter = CSVExporter()
        self.excel_exporter = ExcelExporter()
        self.pdf_exporter = PDFExporter(self.chart_generator)
        self.preview_exporter = PreviewExporter(self.chart_generator)

    @staticmethod
    def is_supported(format_type: str) -> bool:
        return format_type in EXPORT_FORMATS

    @trace_function("export_service.handle_export")
    async def handle_export(
        self,
        rows: Sequence[Any],
        format_type: str,
        filename: str,
        options: ExportOptions,
    ) -> Response:
        """Render ``rows`` in ``format_type`` and return the finished response.

        Renderer failures propagate to the caller unchanged; an unknown format
        fails before any renderer runs.
        """
        if not self.is_supported(format_type):
            raise ExportError(f"Unsupported export format: {format_type}", UNSUPPORTED_FORMAT)

        options.report_progress(0, f"Starting {format_type} export")
        try:
            if format_type == "csv":
                response = self.csv_exporter.export_to_csv(rows, options.fields, filename, options.field_types)
            elif format_type == "excel":
                response = self.excel_exporter.export_to_excel(rows, options, filename)
            elif format_type == "pdf":
                response = await self.pdf_exporter.export_to_pdf(rows, options, filename)
            else:
                response = await self.preview_exporter.generate_preview(rows, options)
        except ExportError as e:
            logger.error("Error in handle_export (%s): %s", e.code, e.message)
            raise

        options.report_progress(100, "Export complete")
        return response


def get_export_service() -> ExportService:
    """FastAPI dependency."""
    return ExportService()
