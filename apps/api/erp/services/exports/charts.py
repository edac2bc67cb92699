"""Chart image generation for PDF and preview exports."""

import asyncio
import io
import logging
from typing import List, Optional, Union

from matplotlib.figure import Figure

from erp.core.config import settings
from erp.core.observability import trace_function
from erp.services.exports.errors import (
    CHART_DATA_REQUIRED,
    CHART_GENERATION_ERROR,
    ExportError,
)
from erp.services.exports.options import CHART_TYPES, ChartData, ExportOptions
from erp.services.exports.themes import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

DPI = 100


def _palette(theme: Theme) -> List[str]:
    c = theme.colors
    return [c.primary, c.success, c.warning, c.danger, c.secondary, c.dark]


class ChartGenerator:
    """Renders declarative chart specs to PNG bytes."""

    def __init__(
        self,
        width: int = settings.EXPORT_CHART_WIDTH,
        height: int = settings.EXPORT_CHART_HEIGHT,
    ) -> None:
        self.width = width
        self.height = height

    @trace_function("chart_generator.generate_chart_image")
    async def generate_chart_image(self, options: ExportOptions, theme: Theme = DEFAULT_THEME) -> bytes:
        """Render ``options.chart_data`` as a PNG image."""
        if not options.chart_data:
            raise ExportError("Chart data is required", CHART_DATA_REQUIRED)

        try:
            return await asyncio.to_thread(
                self._render,
                options.chart_data,
                options.chart_type or "bar",
                options.chart_title,
                theme,
            )
        except Exception as e:
            logger.error("Error generating chart: %s", e)
            raise ExportError("Failed to generate chart", CHART_GENERATION_ERROR, e) from e

    def _render(
        self,
        chart_data: ChartData,
        chart_type: str,
        title: Optional[str],
        theme: Theme,
    ) -> bytes:
        if chart_type not in CHART_TYPES:
            raise ValueError(f"Unsupported chart type: {chart_type}")

        fig = Figure(figsize=(self.width / DPI, self.height / DPI), dpi=DPI)
        ax = fig.subplots()
        palette = _palette(theme)

        if chart_type in ("pie", "doughnut"):
            self._draw_pie(ax, chart_data, palette, hole=chart_type == "doughnut")
        elif chart_type == "line":
            self._draw_lines(ax, chart_data, palette)
        else:
            self._draw_bars(ax, chart_data, palette)

        if title:
            ax.set_title(title)

        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", dpi=DPI)
        return buffer.getvalue()

    def _draw_bars(self, ax, chart_data: ChartData, palette: List[str]) -> None:
        count = max(len(chart_data.datasets), 1)
        width = 0.8 / count
        positions = range(len(chart_data.labels))

        for i, dataset in enumerate(chart_data.datasets):
            offsets = [p - 0.4 + width * (i + 0.5) for p in positions]
            ax.bar(
                offsets,
                dataset.data,
                width=width,
                label=dataset.label,
                color=_color(dataset.background_color, palette[i % len(palette)]),
                edgecolor=dataset.border_color,
            )

        ax.set_xticks(list(positions))
        ax.set_xticklabels(chart_data.labels)
        if chart_data.datasets:
            ax.legend()

    def _draw_lines(self, ax, chart_data: ChartData, palette: List[str]) -> None:
        positions = list(range(len(chart_data.labels)))

        for i, dataset in enumerate(chart_data.datasets):
            color = dataset.border_color or _color(dataset.background_color, palette[i % len(palette)])
            if isinstance(color, list):
                color = color[0]
            ax.plot(positions, dataset.data, label=dataset.label, color=color, marker="o")
            if dataset.fill:
                ax.fill_between(positions, dataset.data, alpha=0.2, color=color)

        ax.set_xticks(positions)
        ax.set_xticklabels(chart_data.labels)
        if chart_data.datasets:
            ax.legend()

    def _draw_pie(self, ax, chart_data: ChartData, palette: List[str], hole: bool) -> None:
        if not chart_data.datasets:
            return
        dataset = chart_data.datasets[0]
        colors = dataset.background_color
        if not isinstance(colors, list):
            colors = [palette[i % len(palette)] for i in range(len(dataset.data))]

        wedgeprops = {"width": 0.5} if hole else None
        ax.pie(dataset.data, labels=chart_data.labels, colors=colors, wedgeprops=wedgeprops)
        ax.set_aspect("equal")


def _color(value: Optional[Union[str, List[str]]], fallback: str) -> Union[str, List[str]]:
    return value if value else fallback
