"""
Category Breakdown Chart

DESIGN DECISION: The chart library is an injected, optional capability.
The controller is handed a renderer (or None) once at startup and checks
it explicitly when updating. Without one the page shows a status message
instead of a chart; that is a degraded mode, not an error.

The controller keeps one chart handle alive and updates it in place,
so the chart is only created once per session and torn down when the
last expense disappears.
"""

import math
from typing import Any, Callable, Optional, Protocol

import plotly.graph_objects as go

from src.models.view import ChartState, PieChartConfig


PALETTE = [
    "#536dfe",
    "#4caf50",
    "#ff9800",
    "#e91e63",
    "#9c27b0",
    "#009688",
    "#ff5722",
    "#3f51b5",
    "#8bc34a",
    "#ffc107",
]

STATUS_NO_RENDERER = "Connect to the internet to see the category breakdown chart."
STATUS_EMPTY = "Add expenses to see the category breakdown chart."
STATUS_LIVE = "Category totals update automatically."


def shade_color(color: str, percent: float) -> str:
    """Lighten a #rrggbb color by adding round(255 * percent) to each channel."""
    num = int(color.lstrip("#"), 16)
    shift = math.floor(255 * percent + 0.5)
    r = min((num >> 16) + shift, 255)
    g = min(((num >> 8) & 0xFF) + shift, 255)
    b = min((num & 0xFF) + shift, 255)
    return f"#{r:02x}{g:02x}{b:02x}"


def generate_palette(count: int) -> list[str]:
    """
    One color per category.

    The first len(PALETTE) colors are fixed; beyond that, palette colors are
    reused with an increasing tint so neighbouring slices stay distinguishable.
    """
    if count <= len(PALETTE):
        return PALETTE[:count]

    extended = list(PALETTE)
    for i in range(len(PALETTE), count):
        extended.append(shade_color(PALETTE[i % len(PALETTE)], (i / count) * 0.4))
    return extended


def calculate_percentage(value: float, values: list[float]) -> str:
    """Share of the total as a one-decimal string; "0" when the total is zero."""
    total = sum(values)
    if not total:
        return "0"
    return f"{value / total * 100:.1f}"


def format_slice_label(
    label: str,
    value: float,
    values: list[float],
    format_currency: Callable[[float], str],
) -> str:
    """Tooltip text for one slice, e.g. "Food: $10.00 (66.7%)"."""
    percentage = calculate_percentage(value, values)
    return f"{label}: {format_currency(value)} ({percentage}%)"


class PieChartRenderer(Protocol):
    """Capability: draw and redraw a labeled pie chart."""

    def create(self, config: PieChartConfig) -> Any:
        ...

    def update(self, handle: Any, config: PieChartConfig) -> Any:
        ...

    def destroy(self, handle: Any) -> None:
        ...


class PlotlyPieChartRenderer:
    """Pie chart renderer backed by a plotly Figure."""

    def __init__(self, hole: float = 0.0):
        self._hole = hole

    def _trace_kwargs(self, config: PieChartConfig) -> dict:
        return dict(
            labels=config.labels,
            values=config.values,
            marker=dict(
                colors=config.colors,
                line=dict(color=config.border_color, width=config.border_width),
            ),
            customdata=config.slice_labels,
            hovertemplate="%{customdata}<extra></extra>",
            sort=False,
        )

    def create(self, config: PieChartConfig) -> go.Figure:
        fig = go.Figure(data=[go.Pie(hole=self._hole, **self._trace_kwargs(config))])
        fig.update_layout(
            showlegend=True,
            legend=dict(orientation="h", yanchor="top", y=-0.05, xanchor="center", x=0.5),
            margin=dict(t=10, b=10, l=10, r=10),
        )
        return fig

    def update(self, handle: go.Figure, config: PieChartConfig) -> go.Figure:
        handle.update_traces(selector=dict(type="pie"), **self._trace_kwargs(config))
        return handle

    def destroy(self, handle: go.Figure) -> None:
        handle.data = []


class ChartController:
    """
    Keeps the category chart in sync with the category totals.

    Args:
        renderer: Chart capability, or None if it is unavailable
        format_currency: Used for the tooltip text
    """

    def __init__(
        self,
        renderer: Optional[PieChartRenderer],
        format_currency: Callable[[float], str],
    ):
        self._renderer = renderer
        self._format_currency = format_currency
        self._handle: Any = None

    @property
    def handle(self) -> Any:
        return self._handle

    def build_config(self, totals: dict[str, float]) -> PieChartConfig:
        labels = list(totals.keys())
        values = list(totals.values())
        return PieChartConfig(
            labels=labels,
            values=values,
            colors=generate_palette(len(labels)),
            slice_labels=[
                format_slice_label(label, value, values, self._format_currency)
                for label, value in zip(labels, values)
            ],
        )

    def update(self, totals: dict[str, float]) -> ChartState:
        """Create, update or tear down the chart for the given totals."""
        if self._renderer is None:
            return ChartState(status_message=STATUS_NO_RENDERER)

        if not totals:
            if self._handle is not None:
                self._renderer.destroy(self._handle)
                self._handle = None
            return ChartState(status_message=STATUS_EMPTY)

        config = self.build_config(totals)
        if self._handle is None:
            self._handle = self._renderer.create(config)
        else:
            self._handle = self._renderer.update(self._handle, config)

        return ChartState(status_message=STATUS_LIVE, handle=self._handle, config=config)
