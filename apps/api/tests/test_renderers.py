"""Test the CSV, Excel, PDF and HTML preview renderers."""

import csv
import io
import re
import time
from datetime import datetime, timezone

import pandas as pd
import pytest
from openpyxl import load_workbook
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas

from erp.core.feature_flags import set_flag
from erp.services.exports.errors import (
    CSV_EXPORT_ERROR,
    EXCEL_EXPORT_ERROR,
    PDF_EXPORT_ERROR,
    ExportError,
)
from erp.services.exports.options import ChartData, ChartDataset, ExportOptions, SheetSpec
from erp.services.exports.renderers import (
    CSVExporter,
    ExcelExporter,
    PDFExporter,
    PreviewExporter,
    _fit,
)
from erp.services.exports.themes import DARK_THEME, DEFAULT_THEME

ROWS = [
    {"id": "1", "name": "A"},
    {"id": "2", "name": "B"},
]

PAYROLL_ROWS = [
    {
        "employee": {"first_name": "Jane", "last_name": "Doe"},
        "amount": 1234.5,
        "status": "PAID",
        "pay_date": datetime(2024, 1, 31, 17, 0),
    },
    {
        "employee": {"first_name": "John", "last_name": None},
        "amount": 980,
        "status": "PENDING",
        "pay_date": None,
    },
]

PAYROLL_FIELDS = ["employee.first_name", "employee.last_name", "amount", "status", "pay_date"]


def _chart_options(**kwargs) -> ExportOptions:
    return ExportOptions(
        fields=["id", "name"],
        include_charts=True,
        chart_data=ChartData(
            labels=["Jan", "Feb"],
            datasets=[ChartDataset(label="Hours", data=[120, 140])],
        ),
        chart_title="Hours worked",
        **kwargs,
    )


def _page_count(pdf: bytes) -> int:
    return len(re.findall(rb"/Type /Page\b", pdf))


class TestCSVExporter:
    """CSV export."""

    def test_export_to_csv(self):
        response = CSVExporter().export_to_csv(ROWS, ["id", "name"], "report")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == "attachment; filename=report.csv"
        assert response.body.decode().splitlines() == ['"id","name"', '"1","A"', '"2","B"']

    def test_empty_rows_give_header_only(self):
        response = CSVExporter().export_to_csv([], ["id", "name"], "test-report")

        assert response.status_code == 200
        assert response.body.decode() == '"id","name"\n'

    def test_row_count_and_round_trip(self):
        rows = [{"id": str(i), "name": f"Guard {i}"} for i in range(5)]
        response = CSVExporter().export_to_csv(rows, ["id", "name"], "guards")

        parsed = list(csv.DictReader(io.StringIO(response.body.decode())))
        assert len(parsed) == len(rows)
        assert parsed == rows

    def test_nested_paths_use_resolver(self):
        response = CSVExporter().export_to_csv(PAYROLL_ROWS, PAYROLL_FIELDS, "payroll")

        lines = response.body.decode().splitlines()
        assert lines[0] == '"employee.first_name","employee.last_name","amount","status","pay_date"'
        assert lines[1] == '"Jane","Doe","$1,234.50","PAID","Jan 31, 2024, 17:00"'
        assert lines[2] == '"John","","$980.00","PENDING",""'

    def test_embedded_delimiters_are_quoted(self):
        rows = [{"note": 'said "hi", then left'}]
        response = CSVExporter().export_to_csv(rows, ["note"], "notes")

        parsed = list(csv.reader(io.StringIO(response.body.decode())))
        assert parsed[1] == ['said "hi", then left']

    def test_serialization_error_is_wrapped(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(pd.DataFrame, "to_csv", boom)

        with pytest.raises(ExportError) as exc_info:
            CSVExporter().export_to_csv(ROWS, ["id", "name"], "report")

        assert exc_info.value.code == CSV_EXPORT_ERROR
        assert isinstance(exc_info.value.details, RuntimeError)


class TestExcelExporter:
    """Excel export."""

    def _load(self, response):
        return load_workbook(io.BytesIO(response.body))

    def test_single_sheet_named_after_title(self):
        options = ExportOptions(fields=["id", "name"], title="Guards")
        response = ExcelExporter().export_to_excel(ROWS, options, "test-report")

        assert response.status_code == 200
        assert response.headers["content-type"] == (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response.headers["content-disposition"] == "attachment; filename=test-report.xlsx"

        wb = self._load(response)
        assert wb.sheetnames == ["Guards"]
        ws = wb["Guards"]
        assert [c.value for c in ws[1]] == ["id", "name"]
        assert [c.value for c in ws[2]] == ["1", "A"]
        assert ws.max_row == 3

    def test_default_sheet_name(self):
        response = ExcelExporter().export_to_excel(ROWS, ExportOptions(fields=["id"]), "r")
        assert self._load(response).sheetnames == ["Sheet1"]

    def test_empty_export_is_valid(self):
        response = ExcelExporter().export_to_excel([], ExportOptions(fields=[]), "empty")

        assert response.status_code == 200
        wb = self._load(response)
        assert wb.sheetnames == ["Sheet1"]

    def test_fields_default_to_row_keys(self):
        rows = [{"id": 1, "name": "A"}, {"id": 2, "site": "North"}]
        response = ExcelExporter().export_to_excel(rows, ExportOptions(), "r")

        ws = self._load(response).active
        assert [c.value for c in ws[1]] == ["id", "name", "site"]
        assert [c.value for c in ws[3]] == [2, None, "North"]

    def test_multiple_sheets_ignore_top_level_rows(self):
        options = ExportOptions(
            fields=["id", "name"],
            sheets=[
                SheetSpec(name="Sheet 1", data=ROWS),
                SheetSpec(name="Sheet 2", data=[{"code": "X"}]),
            ],
        )
        response = ExcelExporter().export_to_excel([{"ignored": True}], options, "multi")

        wb = self._load(response)
        assert wb.sheetnames == ["Sheet 1", "Sheet 2"]
        assert [c.value for c in wb["Sheet 1"][1]] == ["id", "name"]
        assert [c.value for c in wb["Sheet 2"][1]] == ["code"]
        assert wb["Sheet 2"]["A2"].value == "X"

    def test_sheet_titles_are_sanitized(self):
        options = ExportOptions(sheets=[
            SheetSpec(name="Q1/Q2: Report", data=ROWS),
            SheetSpec(name="Q1/Q2: Report", data=ROWS),
            SheetSpec(name="x" * 40, data=ROWS),
        ])
        wb = self._load(ExcelExporter().export_to_excel([], options, "r"))

        assert wb.sheetnames[0] == "Q1-Q2- Report"
        assert wb.sheetnames[1] == "Q1-Q2- Report (1)"
        assert len(wb.sheetnames[2]) == 31

    def test_native_values_and_formats(self):
        rows = [{
            "amount": 1234.5,
            "when": datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc),
            "employee": {"first_name": "Jane"},
        }]
        options = ExportOptions(fields=["amount", "when", "employee.first_name"])
        ws = self._load(ExcelExporter().export_to_excel(rows, options, "r")).active

        assert ws["A2"].value == 1234.5
        assert "$" in ws["A2"].number_format
        assert ws["B2"].value == datetime(2024, 5, 1, 8, 0)
        assert ws["C2"].value == "Jane"

    def test_header_uses_theme_color(self):
        options = ExportOptions(fields=["id"], theme="dark")
        ws = self._load(ExcelExporter().export_to_excel(ROWS, options, "r")).active

        assert ws["A1"].font.bold
        assert ws["A1"].fill.start_color.rgb.upper().endswith(DARK_THEME.colors.primary.lstrip("#").upper())

    def test_control_characters_are_stripped(self):
        rows = [{"description": "Gate\x0bbroken\x1f"}]
        options = ExportOptions(fields=["description"])
        ws = self._load(ExcelExporter().export_to_excel(rows, options, "r")).active

        assert ws["A2"].value == "Gatebroken"

    def test_text_is_not_written_as_formula(self):
        rows = [{"note": '=HYPERLINK("http://x","y")'}]
        ws = self._load(ExcelExporter().export_to_excel(rows, ExportOptions(fields=["note"]), "r")).active

        assert ws["A2"].data_type == "s"
        assert ws["A2"].value == '=HYPERLINK("http://x","y")'

    def test_error_is_wrapped(self, monkeypatch):
        def boom(self, rows, options):
            raise RuntimeError("bad workbook")

        monkeypatch.setattr(ExcelExporter, "build_workbook", boom)

        with pytest.raises(ExportError) as exc_info:
            ExcelExporter().export_to_excel(ROWS, ExportOptions(), "r")

        assert exc_info.value.code == EXCEL_EXPORT_ERROR


class TestPDFExporter:
    """PDF export."""

    @pytest.mark.asyncio
    async def test_export_to_pdf(self):
        options = ExportOptions(fields=PAYROLL_FIELDS, title="Payroll Report", subtitle="January")
        response = await PDFExporter().export_to_pdf(PAYROLL_ROWS, options, "payroll-report")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == "attachment; filename=payroll-report.pdf"
        assert response.body.startswith(b"%PDF")
        assert _page_count(response.body) == 1

    @pytest.mark.asyncio
    async def test_long_reports_break_pages(self):
        rows = [{"id": str(i), "name": f"Guard {i}"} for i in range(120)]
        response = await PDFExporter().export_to_pdf(rows, ExportOptions(fields=["id", "name"]), "guards")

        assert _page_count(response.body) > 1

    @pytest.mark.asyncio
    async def test_empty_rows(self):
        response = await PDFExporter().export_to_pdf([], ExportOptions(fields=["id"]), "empty")
        assert response.body.startswith(b"%PDF")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_size", ["A4", "letter", "LEGAL", "B9"])
    async def test_page_sizes(self, page_size):
        options = ExportOptions(fields=["id"], page_size=page_size)
        response = await PDFExporter().export_to_pdf(ROWS, options, "r")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_corporate_theme_fonts_are_mapped(self):
        options = ExportOptions(fields=["id", "name"], title="Corporate", theme="corporate")
        response = await PDFExporter().export_to_pdf(ROWS, options, "r")
        assert response.body.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_progress_is_reported_for_large_exports(self):
        events = []
        rows = [{"id": str(i)} for i in range(250)]
        options = ExportOptions(fields=["id"], on_progress=lambda p, m: events.append(p))

        await PDFExporter().export_to_pdf(rows, options, "r")

        assert events == [36, 72]

    @pytest.mark.asyncio
    async def test_chart_is_embedded(self):
        response = await PDFExporter().export_to_pdf(ROWS, _chart_options(), "chart")
        assert b"/Subtype /Image" in response.body

    @pytest.mark.asyncio
    async def test_long_cell_text_is_truncated_quickly(self):
        rows = [{"description": "x" * 20000}]
        started = time.perf_counter()
        response = await PDFExporter().export_to_pdf(rows, ExportOptions(fields=["description"]), "r")

        assert response.body.startswith(b"%PDF")
        assert time.perf_counter() - started < 2

    def test_empty_fields_use_row_keys(self, monkeypatch):
        drawn = []
        monkeypatch.setattr(
            Canvas, "drawString", lambda self, x, y, text, *args, **kwargs: drawn.append((x, text))
        )

        PDFExporter().build_document(ROWS, ExportOptions(fields=[]), DEFAULT_THEME)

        assert (50, "id") in drawn
        assert (150, "name") in drawn
        assert (150, "B") in drawn

    @pytest.mark.asyncio
    async def test_error_is_wrapped(self, monkeypatch):
        def boom(self, *args, **kwargs):
            raise RuntimeError("layout failed")

        monkeypatch.setattr(PDFExporter, "build_document", boom)

        with pytest.raises(ExportError) as exc_info:
            await PDFExporter().export_to_pdf(ROWS, ExportOptions(fields=["id"]), "r")

        assert exc_info.value.code == PDF_EXPORT_ERROR


class TestPreviewExporter:
    """HTML preview."""

    @pytest.mark.asyncio
    async def test_generate_preview(self):
        options = ExportOptions(fields=["id", "name"], title="Guards", subtitle="All sites")
        response = await PreviewExporter().generate_preview(ROWS, options)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "content-disposition" not in response.headers

        html = response.body.decode()
        assert '<div class="title">Guards</div>' in html
        assert '<div class="subtitle">All sites</div>' in html
        assert "<th>id</th>" in html
        assert "<td>A</td>" in html
        assert html.count("<tr>") == 3

    @pytest.mark.asyncio
    async def test_values_are_escaped(self):
        rows = [{"name": "<script>alert(1)</script>", "note": "Smith & Sons"}]
        options = ExportOptions(fields=["name", "note"], title="<b>Report</b>")
        html = (await PreviewExporter().generate_preview(rows, options)).body.decode()

        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "Smith &amp; Sons" in html
        assert "&lt;b&gt;Report&lt;/b&gt;" in html

    @pytest.mark.asyncio
    async def test_unknown_theme_uses_default_colors(self):
        options = ExportOptions(fields=["id"], theme="nonexistent")
        html = (await PreviewExporter().generate_preview(ROWS, options)).body.decode()

        assert f"background-color: {DEFAULT_THEME.colors.primary}" in html
        assert f"border: 1px solid {DEFAULT_THEME.colors.border}" in html

    @pytest.mark.asyncio
    async def test_dark_theme_colors(self):
        options = ExportOptions(fields=["id"], theme="dark")
        html = (await PreviewExporter().generate_preview(ROWS, options)).body.decode()

        assert f"background-color: {DARK_THEME.colors.primary}" in html

    @pytest.mark.asyncio
    async def test_status_cells_are_colored(self):
        options = ExportOptions(fields=["status"])
        html = (await PreviewExporter().generate_preview(PAYROLL_ROWS, options)).body.decode()

        assert f'<td style="color: {DEFAULT_THEME.colors.success}">PAID</td>' in html

    @pytest.mark.asyncio
    async def test_chart_is_inlined(self):
        html = (await PreviewExporter().generate_preview(ROWS, _chart_options())).body.decode()
        assert 'src="data:image/png;base64,' in html
        assert 'alt="Hours worked"' in html

    @pytest.mark.asyncio
    async def test_chart_flag_disables_chart(self):
        set_flag("enable_charts", False)
        try:
            html = (await PreviewExporter().generate_preview(ROWS, _chart_options())).body.decode()
        finally:
            set_flag("enable_charts", True)

        assert "data:image/png" not in html

    @pytest.mark.asyncio
    async def test_empty_fields_use_row_keys(self):
        html = (await PreviewExporter().generate_preview(ROWS, ExportOptions(fields=[]))).body.decode()

        assert "<th>id</th>" in html
        assert "<th>name</th>" in html
        assert "<td>B</td>" in html


class TestFit:
    """Column text truncation."""

    def test_short_text_is_unchanged(self):
        assert _fit("Guard", "Helvetica", 10) == "Guard"

    def test_long_text_gets_longest_fitting_prefix(self):
        fitted = _fit("x" * 20000, "Helvetica", 10)
        prefix = fitted[:-3]

        assert fitted.endswith("...")
        assert pdfmetrics.stringWidth(fitted, "Helvetica", 10) <= 95
        assert pdfmetrics.stringWidth(prefix + "x...", "Helvetica", 10) > 95

    def test_truncation_is_fast(self):
        started = time.perf_counter()
        for _ in range(100):
            _fit("incident report " * 2000, "Helvetica", 10)
        assert time.perf_counter() - started < 1
