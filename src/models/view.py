"""
View Models

Render-ready data derived from the expense collection.
Nothing here is persisted; everything is re-derived after each change.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExpenseRow(BaseModel):
    """One table row, with amount and date already formatted."""

    id: str
    description: str
    category: str
    amount: float
    formatted_amount: str
    formatted_date: str = Field(
        ...,
        description="Formatted calendar date, or the raw stored string if unparseable"
    )
    is_editing: bool = Field(
        default=False,
        description="Row is the current edit target (highlighted)"
    )


class PieChartConfig(BaseModel):
    """Everything a chart renderer needs to draw the category breakdown."""

    labels: list[str] = Field(default_factory=list)
    values: list[float] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    slice_labels: list[str] = Field(
        default_factory=list,
        description="Tooltip text per slice, including its share of the total"
    )
    border_color: str = "#ffffff"
    border_width: int = 2


class ChartState(BaseModel):
    """Result of a chart update: a live handle or a status message."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_message: str
    handle: Optional[Any] = Field(
        default=None,
        description="Renderer-specific chart object (e.g. a plotly Figure)"
    )
    config: Optional[PieChartConfig] = None

    @property
    def has_chart(self) -> bool:
        return self.handle is not None


class ExpenseTrackerView(BaseModel):
    """Full set of projections for one render pass."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    rows: list[ExpenseRow] = Field(default_factory=list)
    total: float = 0.0
    formatted_total: str
    empty_message: Optional[str] = Field(
        default=None,
        description="Shown in place of the table when there are no expenses"
    )
    category_totals: dict[str, float] = Field(default_factory=dict)
    chart: Optional[ChartState] = None
