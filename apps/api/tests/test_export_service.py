"""Test the export dispatcher."""

import pytest

from erp.services.exports import ExportError, ExportOptions, ExportService
from erp.services.exports.errors import PDF_EXPORT_ERROR, UNSUPPORTED_FORMAT
from erp.services.exports.renderers import CSVExporter, PDFExporter

ROWS = [{"id": "1", "name": "A"}]


@pytest.fixture
def service():
    return ExportService()


@pytest.mark.asyncio
async def test_unsupported_format_runs_no_renderer(service, monkeypatch):
    calls = []
    monkeypatch.setattr(CSVExporter, "export_to_csv", lambda *args, **kwargs: calls.append(args))

    with pytest.raises(ExportError) as exc_info:
        await service.handle_export(ROWS, "xml", "test", ExportOptions(fields=["id"]))

    assert exc_info.value.code == UNSUPPORTED_FORMAT
    assert exc_info.value.message == "Unsupported export format: xml"
    assert exc_info.value.is_client_error
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "format_type,content_type",
    [
        ("csv", "text/csv"),
        ("excel", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        ("pdf", "application/pdf"),
        ("preview", "text/html"),
    ],
)
async def test_dispatch(service, format_type, content_type):
    response = await service.handle_export(ROWS, format_type, "test", ExportOptions(fields=["id", "name"]))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(content_type)


@pytest.mark.asyncio
async def test_excel_with_no_rows(service):
    response = await service.handle_export([], "excel", "test", ExportOptions(fields=[]))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_progress_callbacks(service):
    events = []
    options = ExportOptions(fields=["id"], on_progress=lambda percent, message: events.append(percent))

    await service.handle_export(ROWS, "csv", "test", options)

    assert events == [0, 100]


@pytest.mark.asyncio
async def test_renderer_errors_propagate(service, monkeypatch):
    async def boom(self, rows, options, filename):
        raise ExportError("Failed to export data to PDF", PDF_EXPORT_ERROR)

    monkeypatch.setattr(PDFExporter, "export_to_pdf", boom)

    with pytest.raises(ExportError) as exc_info:
        await service.handle_export(ROWS, "pdf", "test", ExportOptions(fields=["id"]))

    assert exc_info.value.code == PDF_EXPORT_ERROR
    assert not exc_info.value.is_client_error


def test_is_supported():
    assert ExportService.is_supported("csv")
    assert not ExportService.is_supported("pptx")
