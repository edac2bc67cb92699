"""Export option types."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Sequence, Union

from erp.core.config import settings

ExportFormat = Literal["csv", "excel", "pdf", "preview"]
ChartType = Literal["bar", "line", "pie", "doughnut"]
FieldType = Literal["text", "number", "currency", "date"]

EXPORT_FORMATS: tuple[str, ...] = ("csv", "excel", "pdf", "preview")
CHART_TYPES: tuple[str, ...] = ("bar", "line", "pie", "doughnut")

ProgressCallback = Callable[[int, str], None]


@dataclass
class ChartDataset:
    """One labelled data series of a chart."""
    label: str
    data: List[float]
    background_color: Optional[Union[str, List[str]]] = None
    border_color: Optional[str] = None
    fill: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ChartDataset":
        return cls(
            label=str(raw.get("label", "")),
            data=[float(v) for v in raw.get("data", [])],
            background_color=raw.get("background_color", raw.get("backgroundColor")),
            border_color=raw.get("border_color", raw.get("borderColor")),
            fill=bool(raw.get("fill", False)),
        )


@dataclass
class ChartData:
    """Chart labels plus datasets."""
    labels: List[str]
    datasets: List[ChartDataset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ChartData":
        return cls(
            labels=[str(label) for label in raw.get("labels", [])],
            datasets=[ChartDataset.from_dict(d) for d in raw.get("datasets", [])],
        )


@dataclass
class SheetSpec:
    """A named row set rendered as its own worksheet."""
    name: str
    data: Sequence[Any] = field(default_factory=list)
    fields: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SheetSpec":
        fields = raw.get("fields")
        return cls(
            name=str(raw.get("name", "")),
            data=list(raw.get("data") or []),
            fields=list(fields) if fields else None,
        )


@dataclass
class ExportOptions:
    """Options shared by every renderer."""
    fields: List[str] = field(default_factory=list)
    title: Optional[str] = None
    subtitle: Optional[str] = None
    theme: str = "default"
    page_size: str = "A4"
    include_charts: bool = False
    chart_type: ChartType = "bar"
    chart_data: Optional[ChartData] = None
    chart_title: Optional[str] = None
    sheets: Optional[List[SheetSpec]] = None
    field_types: Dict[str, FieldType] = field(default_factory=dict)
    on_progress: Optional[ProgressCallback] = None

    def report_progress(self, percent: int, message: str) -> None:
        if self.on_progress is not None:
            self.on_progress(percent, message)

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "ExportOptions":
        """Build options from a request payload (snake_case or camelCase keys)."""
        raw = raw or {}

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in raw:
                return raw[snake]
            return raw.get(camel, default)

        chart_data = pick("chart_data", "chartData")
        if chart_data is not None and not isinstance(chart_data, ChartData):
            chart_data = ChartData.from_dict(chart_data)

        sheets = raw.get("sheets")
        if sheets is not None:
            sheets = [
                s if isinstance(s, SheetSpec) else SheetSpec.from_dict(s)
                for s in sheets
            ]

        return cls(
            fields=list(raw.get("fields") or []),
            title=raw.get("title"),
            subtitle=raw.get("subtitle"),
            theme=raw.get("theme") or settings.EXPORT_DEFAULT_THEME,
            page_size=pick("page_size", "pageSize") or settings.EXPORT_DEFAULT_PAGE_SIZE,
            include_charts=bool(pick("include_charts", "includeCharts", False)),
            chart_type=pick("chart_type", "chartType") or "bar",
            chart_data=chart_data,
            chart_title=pick("chart_title", "chartTitle"),
            sheets=sheets,
            field_types=dict(pick("field_types", "fieldTypes") or {}),
        )
