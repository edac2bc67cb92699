"""Export error types."""

from typing import Any, Dict, Optional

CSV_EXPORT_ERROR = "CSV_EXPORT_ERROR"
EXCEL_EXPORT_ERROR = "EXCEL_EXPORT_ERROR"
PDF_EXPORT_ERROR = "PDF_EXPORT_ERROR"
PREVIEW_ERROR = "PREVIEW_ERROR"
CHART_DATA_REQUIRED = "CHART_DATA_REQUIRED"
CHART_GENERATION_ERROR = "CHART_GENERATION_ERROR"
UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"

# Errors caused by the request rather than by rendering
CLIENT_ERROR_CODES = frozenset({UNSUPPORTED_FORMAT, CHART_DATA_REQUIRED})


class ExportError(Exception):
    """Failure raised by the export layer, tagged with a machine-readable code."""

    name = "ExportError"

    def __init__(self, message: str, code: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    @property
    def is_client_error(self) -> bool:
        return self.code in CLIENT_ERROR_CODES

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for an HTTP error body."""
        payload: Dict[str, Any] = {
            "name": self.name,
            "message": self.message,
            "code": self.code,
        }
        if self.details is not None:
            payload["details"] = str(self.details)
        return payload

    def __repr__(self) -> str:
        return f"ExportError(code={self.code!r}, message={self.message!r})"
