"""Projection package: display data and the category chart."""

from src.projections.chart import (
    PALETTE,
    ChartController,
    PieChartRenderer,
    PlotlyPieChartRenderer,
    calculate_percentage,
    format_slice_label,
    generate_palette,
    shade_color,
)
from src.projections.projector import (
    EMPTY_TABLE_MESSAGE,
    PresentationProjector,
    format_date_for_input,
    input_date_value,
)

__all__ = [
    "PALETTE",
    "ChartController",
    "PieChartRenderer",
    "PlotlyPieChartRenderer",
    "calculate_percentage",
    "format_slice_label",
    "generate_palette",
    "shade_color",
    "EMPTY_TABLE_MESSAGE",
    "PresentationProjector",
    "format_date_for_input",
    "input_date_value",
]
