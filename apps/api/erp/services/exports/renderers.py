"""Format renderers: CSV, Excel, PDF and HTML preview.

Every renderer turns a row set plus :class:`ExportOptions` into a finished
HTTP response. Cell values go through the shared field resolver so a given
``fields`` list produces the same columns in every format.
"""

import asyncio
import base64
import csv
import io
import logging
import re
from datetime import datetime
from html import escape
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from fastapi.responses import HTMLResponse, Response
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet
from reportlab.lib import colors
from reportlab.lib.pagesizes import A3, A4, A5, legal, letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from erp.core.feature_flags import is_enabled
from erp.core.observability import trace_function
from erp.services.exports.charts import ChartGenerator
from erp.services.exports.errors import (
    CSV_EXPORT_ERROR,
    EXCEL_EXPORT_ERROR,
    PDF_EXPORT_ERROR,
    PREVIEW_ERROR,
    ExportError,
)
from erp.services.exports.formatting import FieldValue, get_status_color, resolve, resolve_value
from erp.services.exports.options import ExportOptions, SheetSpec
from erp.services.exports.themes import Theme, get_theme

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

PAGE_SIZES = {
    "A3": A3,
    "A4": A4,
    "A5": A5,
    "LETTER": letter,
    "LEGAL": legal,
}

# PDF table geometry
COLUMN_ORIGIN = 50
COLUMN_WIDTH = 100
TITLE_GAP = 20
MIN_GLYPH_EM = 0.1

MAX_SHEET_TITLE = 31
_SHEET_TITLE_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")


def attachment_response(content: bytes, media_type: str, filename: str, extension: str) -> Response:
    """Build a 200 download response for ``<filename>.<extension>``."""
    return Response(
        content=content,
        status_code=200,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}.{extension}"},
    )


def column_fields(rows: Sequence[Any], fields: Optional[Sequence[str]]) -> List[str]:
    """Explicit fields, or the top-level keys of the rows in first-seen order."""
    if fields:
        return list(fields)
    columns: Dict[str, None] = {}
    for row in rows:
        if isinstance(row, dict):
            for key in row:
                columns.setdefault(str(key), None)
    return list(columns)


def is_status_field(path: str) -> bool:
    return path.rsplit(".", 1)[-1].lower() == "status"


class CSVExporter:
    """CSV export functionality."""

    @trace_function("csv_exporter.export_to_csv")
    def export_to_csv(
        self,
        rows: Sequence[Any],
        fields: Sequence[str],
        filename: str,
        field_types: Optional[Dict[str, str]] = None,
    ) -> Response:
        """Serialize ``rows`` projected onto ``fields`` as a quoted CSV download."""
        try:
            columns = column_fields(rows, fields)
            records = [[resolve(row, f, field_types) for f in columns] for row in rows]
            frame = pd.DataFrame(records, columns=columns)
            body = frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        except Exception as e:
            logger.error("Error exporting to CSV: %s", e)
            raise ExportError("Failed to export data to CSV", CSV_EXPORT_ERROR, e) from e

        return attachment_response(body.encode("utf-8"), CSV_MEDIA_TYPE, filename, "csv")


class ExcelExporter:
    """Excel export functionality."""

    @trace_function("excel_exporter.export_to_excel")
    def export_to_excel(self, rows: Sequence[Any], options: ExportOptions, filename: str) -> Response:
        """Write one worksheet per sheet spec (or a single sheet of ``rows``)."""
        try:
            content = self.build_workbook(rows, options)
        except Exception as e:
            logger.error("Error exporting to Excel: %s", e)
            raise ExportError("Failed to export data to Excel", EXCEL_EXPORT_ERROR, e) from e

        return attachment_response(content, XLSX_MEDIA_TYPE, filename, "xlsx")

    def build_workbook(self, rows: Sequence[Any], options: ExportOptions) -> bytes:
        theme = get_theme(options.theme)
        wb = Workbook()

        # Remove default sheet
        wb.remove(wb.active)

        if options.sheets:
            specs = [(sheet, column_fields(sheet.data, sheet.fields)) for sheet in options.sheets]
        else:
            single = SheetSpec(name=options.title or "Sheet1", data=list(rows))
            specs = [(single, column_fields(rows, options.fields))]

        used: set = set()
        for index, (sheet, columns) in enumerate(specs, 1):
            title = self._sheet_title(sheet.name, index, used)
            ws = wb.create_sheet(title)
            self._write_sheet(ws, sheet.data, columns, options, theme)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        return buffer.getvalue()

    def _sheet_title(self, name: str, index: int, used: set) -> str:
        title = _SHEET_TITLE_FORBIDDEN.sub("-", name or "").strip()[:MAX_SHEET_TITLE] or f"Sheet{index}"
        candidate, n = title, 1
        while candidate.lower() in used:
            suffix = f" ({n})"
            candidate = title[: MAX_SHEET_TITLE - len(suffix)] + suffix
            n += 1
        used.add(candidate.lower())
        return candidate

    def _write_sheet(
        self,
        ws: Worksheet,
        rows: Sequence[Any],
        columns: List[str],
        options: ExportOptions,
        theme: Theme,
    ) -> None:
        header_fill = PatternFill(
            start_color=theme.colors.primary.lstrip("#"),
            end_color=theme.colors.primary.lstrip("#"),
            fill_type="solid",
        )

        # Column headers
        widths = [len(name) for name in columns]
        for c_idx, name in enumerate(columns, 1):
            cell = ws.cell(row=1, column=c_idx, value=name)
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = header_fill

        for r_idx, row in enumerate(rows, 2):
            for c_idx, path in enumerate(columns, 1):
                resolved = resolve_value(row, path, options.field_types.get(path))
                cell = ws.cell(row=r_idx, column=c_idx, value=self._cell_value(resolved))
                if isinstance(cell.value, str):
                    # Row text is never a formula
                    cell.data_type = "s"
                if resolved.kind == "currency":
                    cell.number_format = '"$"#,##0.00'
                elif resolved.kind == "date":
                    cell.number_format = "mmm d, yyyy hh:mm"
                widths[c_idx - 1] = max(widths[c_idx - 1], len(resolved.display()))

        # Auto-adjust column widths
        for c_idx, width in enumerate(widths, 1):
            column_letter = ws.cell(row=1, column=c_idx).column_letter
            ws.column_dimensions[column_letter].width = min(width + 2, 50)

        ws.freeze_panes = "A2"

    @staticmethod
    def _cell_value(resolved: FieldValue) -> Any:
        if resolved.is_null:
            return None
        value = resolved.value
        if resolved.kind == "date":
            if not isinstance(value, datetime):
                return datetime(value.year, value.month, value.day)
            # Excel has no timezone support
            return value.replace(tzinfo=None)
        if resolved.kind in ("number", "currency") or isinstance(value, bool):
            return value
        return ILLEGAL_CHARACTERS_RE.sub("", str(value))


class PDFExporter:
    """PDF export functionality."""

    def __init__(self, chart_generator: Optional[ChartGenerator] = None) -> None:
        self.chart_generator = chart_generator or ChartGenerator()

    @trace_function("pdf_exporter.export_to_pdf")
    async def export_to_pdf(self, rows: Sequence[Any], options: ExportOptions, filename: str) -> Response:
        """Lay out a title block and a fixed-column table, one line per record."""
        try:
            theme = get_theme(options.theme)
            chart = await self._chart_image(options, theme)
            content = await asyncio.to_thread(self.build_document, rows, options, theme, chart)
        except Exception as e:
            logger.error("Error exporting to PDF: %s", e)
            if isinstance(e, ExportError):
                raise
            raise ExportError("Failed to export data to PDF", PDF_EXPORT_ERROR, e) from e

        return attachment_response(content, PDF_MEDIA_TYPE, filename, "pdf")

    async def _chart_image(self, options: ExportOptions, theme: Theme) -> Optional[bytes]:
        if not (options.include_charts and options.chart_data and is_enabled("enable_charts")):
            return None
        return await self.chart_generator.generate_chart_image(options, theme)

    def build_document(
        self,
        rows: Sequence[Any],
        options: ExportOptions,
        theme: Theme,
        chart: Optional[bytes] = None,
    ) -> bytes:
        page_size = PAGE_SIZES.get((options.page_size or "A4").upper())
        if page_size is None:
            logger.warning("Unknown page size %r, using A4", options.page_size)
            page_size = A4

        columns = column_fields(rows, options.fields)
        header_font = _pdf_font(theme.fonts.header)
        body_font = _pdf_font(theme.fonts.body)
        sizes, spacing = theme.sizes, theme.spacing
        page_width, page_height = page_size
        top = page_height - spacing.margin

        buffer = io.BytesIO()
        doc = canvas.Canvas(buffer, pagesize=page_size)
        doc.setTitle(options.title or "Report")
        y = top

        if options.title:
            y -= sizes.title
            doc.setFont(header_font, sizes.title)
            doc.drawCentredString(page_width / 2, y, options.title)
            y -= sizes.title * 0.4

        if options.subtitle:
            y -= sizes.subtitle
            doc.setFont(body_font, sizes.subtitle)
            doc.setFillColor(colors.HexColor(theme.colors.secondary))
            doc.drawCentredString(page_width / 2, y, options.subtitle)
            doc.setFillColor(colors.black)

        y -= TITLE_GAP

        def draw_header(y: float) -> float:
            doc.setFont(header_font, sizes.header)
            doc.setFillColor(colors.HexColor(theme.colors.primary))
            for index, field in enumerate(columns):
                doc.drawString(_column_x(index), y, _fit(field, header_font, sizes.header))
            doc.setFillColor(colors.black)
            return y - (sizes.header + spacing.header_padding)

        y = draw_header(y - sizes.header)

        total = len(rows)
        for count, item in enumerate(rows, 1):
            if y < spacing.margin:
                doc.showPage()
                y = draw_header(top - sizes.header)

            doc.setFont(body_font, sizes.body)
            for index, field in enumerate(columns):
                text = resolve(item, field, options.field_types)
                if is_status_field(field) and text:
                    doc.setFillColor(colors.HexColor(get_status_color(text, theme)))
                doc.drawString(_column_x(index), y, _fit(text, body_font, sizes.body))
                doc.setFillColor(colors.black)
            y -= spacing.row_height

            if count % 100 == 0:
                options.report_progress(int(count * 90 / total), f"Rendered {count} of {total} rows")

        if chart:
            chart_width = page_width - 2 * spacing.margin
            chart_height = chart_width / 2
            if y - chart_height < spacing.margin:
                doc.showPage()
                y = top
            doc.drawImage(
                ImageReader(io.BytesIO(chart)),
                spacing.margin,
                y - chart_height,
                width=chart_width,
                height=chart_height,
            )

        doc.save()
        buffer.seek(0)

        return buffer.getvalue()


def _column_x(index: int) -> int:
    return COLUMN_ORIGIN + index * COLUMN_WIDTH


def _pdf_font(name: str) -> str:
    """Map a theme font name to one reportlab can draw with."""
    if name in pdfmetrics.standardFonts or name in pdfmetrics.getRegisteredFontNames():
        return name
    return "Helvetica-Bold" if "bold" in name.lower() else "Helvetica"


def _fit(text: str, font: str, size: int, width: float = COLUMN_WIDTH - 5) -> str:
    """Truncate ``text`` so it stays inside one table column."""
    # Printable glyphs in the standard fonts are at least a tenth of an em wide
    clipped = text[: int(width / (size * MIN_GLYPH_EM)) + 1]
    if len(clipped) == len(text) and pdfmetrics.stringWidth(text, font, size) <= width:
        return text
    text = clipped

    # Longest prefix that still fits with the ellipsis
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if pdfmetrics.stringWidth(text[:mid] + "...", font, size) <= width:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo] + "..."


class PreviewExporter:
    """Inline HTML preview of a report."""

    def __init__(self, chart_generator: Optional[ChartGenerator] = None) -> None:
        self.chart_generator = chart_generator or ChartGenerator()

    @trace_function("preview_exporter.generate_preview")
    async def generate_preview(self, rows: Sequence[Any], options: ExportOptions) -> HTMLResponse:
        """Render a self-contained, themed HTML table."""
        try:
            theme = get_theme(options.theme)
            chart = None
            if options.include_charts and options.chart_data and is_enabled("enable_charts"):
                chart = await self.chart_generator.generate_chart_image(options, theme)
            html = self.build_html(rows, options, theme, chart)
        except Exception as e:
            logger.error("Error generating preview: %s", e)
            if isinstance(e, ExportError):
                raise
            raise ExportError("Failed to generate preview", PREVIEW_ERROR, e) from e

        return HTMLResponse(content=html, status_code=200)

    def build_html(
        self,
        rows: Sequence[Any],
        options: ExportOptions,
        theme: Theme,
        chart: Optional[bytes] = None,
    ) -> str:
        columns = column_fields(rows, options.fields)
        c = theme.colors
        parts = [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{escape(options.title or 'Report preview')}</title>",
            "<style>",
            f"body {{ font-family: {_css_font(theme.fonts.body)}; margin: 20px; }}",
            "table { border-collapse: collapse; width: 100%; }",
            f"th, td {{ border: 1px solid {c.border}; padding: 8px; text-align: left; }}",
            f"th {{ background-color: {c.primary}; color: white; }}",
            f".title {{ font-size: {theme.sizes.title}px; text-align: center; margin-bottom: 10px; }}",
            f".subtitle {{ font-size: {theme.sizes.subtitle + 2}px; text-align: center; "
            f"margin-bottom: 20px; color: {c.secondary}; }}",
            ".chart { text-align: center; margin-top: 20px; }",
            "</style>",
            "</head>",
            "<body>",
        ]

        if options.title:
            parts.append(f'<div class="title">{escape(options.title)}</div>')

        if options.subtitle:
            parts.append(f'<div class="subtitle">{escape(options.subtitle)}</div>')

        parts.append("<table><thead><tr>")
        parts.extend(f"<th>{escape(field)}</th>" for field in columns)
        parts.append("</tr></thead><tbody>")

        for item in rows:
            parts.append("<tr>")
            for field in columns:
                text = resolve(item, field, options.field_types)
                if is_status_field(field) and text:
                    color = get_status_color(text, theme)
                    parts.append(f'<td style="color: {color}">{escape(text)}</td>')
                else:
                    parts.append(f"<td>{escape(text)}</td>")
            parts.append("</tr>")

        parts.append("</tbody></table>")

        if chart:
            encoded = base64.b64encode(chart).decode("ascii")
            alt = escape(options.chart_title or "Chart")
            parts.append(f'<div class="chart"><img src="data:image/png;base64,{encoded}" alt="{alt}"></div>')

        parts.append("</body></html>")
        return "\n".join(parts)


def _css_font(name: str) -> str:
    family = name.split("-")[0]
    return f"{family}, sans-serif"
