"""
Presentation Projector

Pure derivations from the expense collection to what the page shows:
table rows, the running total and per-category totals.

Nothing here mutates the collection or keeps state between calls,
so every render can simply re-project from scratch.
"""

from datetime import date
from typing import Any, Iterable, Optional

from src.config import DisplaySettings
from src.models.expense import Expense, parse_expense_date
from src.models.view import ChartState, ExpenseRow, ExpenseTrackerView
from src.validation import parse_amount


EMPTY_TABLE_MESSAGE = "No expenses yet. Add your first entry above!"


def input_date_value(value: Optional[str]) -> Optional[date]:
    """
    Calendar day a date picker should start on.

    None for empty or unparseable values; the picker then starts blank.
    """
    if not value:
        return None
    parsed = parse_expense_date(value)
    if parsed is None:
        return None
    return parsed.date()


def format_date_for_input(value: Optional[str]) -> str:
    """
    Convert a stored date to the YYYY-MM-DD form a date input expects.

    Returns "" if the value is empty or unparseable.
    """
    day = input_date_value(value)
    return day.isoformat() if day is not None else ""


def _amount_of(expense: Any) -> float:
    """Amount as a number; missing or non-numeric amounts count as zero."""
    value = parse_amount(getattr(expense, "amount", None))
    return value if value is not None else 0.0


class PresentationProjector:
    """
    Turns expenses into display data.

    Example:
        projector = PresentationProjector()
        projector.format_currency(1234.5)   # "$1,234.50"
    """

    def __init__(self, display: Optional[DisplaySettings] = None):
        self._display = display or DisplaySettings()

    @property
    def uncategorized_label(self) -> str:
        return self._display.uncategorized_label

    def format_currency(self, value: float) -> str:
        sign = "-" if value < 0 else ""
        return f"{sign}{self._display.currency_symbol}{abs(value):,.2f}"

    def format_date(self, value: str) -> str:
        """
        Format a stored date for display, e.g. "Jan 5, 2024".

        Unparseable values are shown verbatim.
        """
        parsed = parse_expense_date(value)
        if parsed is None:
            return value
        return f"{parsed:%b} {parsed.day}, {parsed.year}"

    def project_total(self, expenses: Iterable[Expense]) -> float:
        return sum((_amount_of(expense) for expense in expenses), 0.0)

    def project_category_totals(self, expenses: Iterable[Expense]) -> dict[str, float]:
        """
        Sum amounts per category.

        Categories are trimmed but not case-folded, so "Food" and "food"
        are separate buckets. Blank categories go to the uncategorized
        bucket. Keys are in first-seen order.
        """
        totals: dict[str, float] = {}
        for expense in expenses:
            key = expense.category.strip() or self.uncategorized_label
            totals[key] = totals.get(key, 0.0) + _amount_of(expense)
        return totals

    def project_rows(
        self,
        expenses: Iterable[Expense],
        editing_id: Optional[str] = None,
    ) -> list[ExpenseRow]:
        return [
            ExpenseRow(
                id=expense.id,
                description=expense.description,
                category=expense.category,
                amount=_amount_of(expense),
                formatted_amount=self.format_currency(_amount_of(expense)),
                formatted_date=self.format_date(expense.date),
                is_editing=editing_id is not None and expense.id == editing_id,
            )
            for expense in expenses
        ]

    def project_view(
        self,
        expenses: Iterable[Expense],
        editing_id: Optional[str] = None,
        chart: Optional[ChartState] = None,
    ) -> ExpenseTrackerView:
        """Build every projection for one render pass."""
        expenses = list(expenses)
        total = self.project_total(expenses)
        return ExpenseTrackerView(
            rows=self.project_rows(expenses, editing_id=editing_id),
            total=total,
            formatted_total=self.format_currency(total),
            empty_message=None if expenses else EMPTY_TABLE_MESSAGE,
            category_totals=self.project_category_totals(expenses),
            chart=chart,
        )
