"""Field-path resolution and value formatting for export rows.

Rows are arbitrary nested records: plain dicts coming from the report
builders, or objects (ORM instances, dataclasses). A field path such as
``employee.user.first_name`` is walked one segment at a time, looking up a
mapping key first and an attribute second. Any missing or ``None`` segment
resolves to the null value, which renders as an empty string.

Resolution produces a tagged :class:`FieldValue` so renderers that keep
native types (the spreadsheet writer) and renderers that need display text
(CSV, PDF, HTML preview) share one lookup.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Mapping, Optional

from erp.services.exports.themes import DEFAULT_THEME, Theme

ValueKind = Literal["text", "number", "currency", "date", "null"]

_OPAQUE_TYPES = (str, bytes, int, float, Decimal, bool, list, tuple, set, frozenset, date)

STATUS_COLOR_ROLES = {
    "PRESENT": "success",
    "ABSENT": "danger",
    "LATE": "warning",
    "PENDING": "warning",
    "APPROVED": "success",
    "REJECTED": "danger",
    "PAID": "success",
    "CANCELLED": "danger",
    "OPEN": "warning",
    "IN_PROGRESS": "primary",
    "RESOLVED": "success",
    "CLOSED": "secondary",
    "AVAILABLE": "success",
    "ASSIGNED": "primary",
    "MAINTENANCE": "warning",
    "RETIRED": "danger",
    "PLANNING": "warning",
    "ACTIVE": "success",
    "COMPLETED": "success",
}


@dataclass(frozen=True)
class FieldValue:
    """A resolved field value tagged with how it should be presented."""
    kind: ValueKind
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.kind == "null"

    def display(self) -> str:
        if self.kind == "null":
            return ""
        if self.kind == "date":
            return format_date(self.value)
        if self.kind == "currency":
            return format_currency(self.value)
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


NULL_VALUE = FieldValue("null")


def format_date(value: Optional[date]) -> str:
    """Format as ``MMM D, YYYY, HH:MM`` (e.g. ``Jan 5, 2024, 09:30``)."""
    if value is None:
        return ""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return f"{value:%b} {value.day}, {value:%Y, %H:%M}"


def format_currency(amount: Optional[float]) -> str:
    """Format as US dollars (``1234.5`` -> ``$1,234.50``)."""
    if amount is None:
        return ""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _lookup(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    if isinstance(obj, _OPAQUE_TYPES):
        return None
    value = getattr(obj, key, None)
    if callable(value):
        return None
    return value


def get_path(row: Any, path: str) -> Any:
    """Walk ``path`` through ``row``; ``None`` when any segment is missing."""
    value = row
    for segment in path.split("."):
        value = _lookup(value, segment)
        if value is None:
            return None
    return value


def _parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def resolve_value(row: Any, path: str, field_type: Optional[str] = None) -> FieldValue:
    """Resolve ``path`` against ``row`` into a tagged value.

    An explicit ``field_type`` wins. Without one, dates are detected by type
    and numbers are treated as currency when the last path segment mentions
    "amount".
    """
    value = get_path(row, path)
    if value is None:
        return NULL_VALUE

    if field_type == "text":
        return FieldValue("text", value)
    if field_type == "date":
        parsed = _parse_date(value)
        return FieldValue("date", parsed) if parsed is not None else FieldValue("text", value)
    if field_type in ("currency", "number"):
        if is_number(value):
            return FieldValue(field_type, value)
        return FieldValue("text", value)

    if isinstance(value, date):
        return FieldValue("date", value)
    if is_number(value):
        if "amount" in path.rsplit(".", 1)[-1].lower():
            return FieldValue("currency", value)
        return FieldValue("number", value)
    return FieldValue("text", value)


def resolve(row: Any, path: str, field_types: Optional[Mapping[str, str]] = None) -> str:
    """Resolve ``path`` against ``row`` and return display text ("" when missing)."""
    field_type = field_types.get(path) if field_types else None
    return resolve_value(row, path, field_type).display()


get_formatted_value = resolve


def get_status_color(status: Optional[str], theme: Theme = DEFAULT_THEME) -> str:
    """Map a workflow status (PAID, OPEN, ...) to a theme color."""
    role = STATUS_COLOR_ROLES.get((status or "").upper(), "secondary")
    return getattr(theme.colors, role)
