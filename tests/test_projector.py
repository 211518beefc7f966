"""Tests for the presentation projector."""

from datetime import date
from types import SimpleNamespace

import pytest

from src.config import DisplaySettings
from src.models.expense import Expense
from src.projections import (
    EMPTY_TABLE_MESSAGE,
    PresentationProjector,
    format_date_for_input,
    input_date_value,
)


def make_expense(expense_id: str, category: str = "Food", amount: float = 10.0,
                 date: str = "2024-06-01") -> Expense:
    return Expense(
        id=expense_id,
        description=f"Expense {expense_id}",
        category=category,
        amount=amount,
        date=date,
    )


@pytest.fixture
def projector():
    return PresentationProjector()


class TestFormatting:
    """Tests for currency and date formatting."""

    @pytest.mark.parametrize("value,expected", [
        (0, "$0.00"),
        (12.5, "$12.50"),
        (1234.5, "$1,234.50"),
        (1000000, "$1,000,000.00"),
        (-1234.5, "-$1,234.50"),
    ])
    def test_format_currency(self, projector, value, expected):
        """Test US dollar formatting."""
        assert projector.format_currency(value) == expected

    def test_custom_currency_symbol(self):
        """Test the configured symbol is used."""
        projector = PresentationProjector(DisplaySettings(currency_symbol="€"))
        assert projector.format_currency(3) == "€3.00"

    def test_display_settings_from_environment(self, monkeypatch):
        """Test every display field is read from the environment and used."""
        monkeypatch.setenv("EXPENSE_DISPLAY_CURRENCY_SYMBOL", "£")
        monkeypatch.setenv("EXPENSE_DISPLAY_UNCATEGORIZED_LABEL", "Misc")
        projector = PresentationProjector()
        assert set(DisplaySettings.model_fields) == {"currency_symbol", "uncategorized_label"}
        assert projector.format_currency(3) == "£3.00"
        assert projector.uncategorized_label == "Misc"

    def test_format_date(self, projector):
        """Test short month, unpadded day, year."""
        assert projector.format_date("2024-01-05") == "Jan 5, 2024"
        assert projector.format_date("2024-12-25T09:00:00Z") == "Dec 25, 2024"

    def test_format_unparseable_date(self, projector):
        """Test unparseable dates are shown as stored."""
        assert projector.format_date("someday") == "someday"

    @pytest.mark.parametrize("value,expected", [
        ("2024-06-01", "2024-06-01"),
        ("2024-06-01T23:15:00Z", "2024-06-01"),
        ("not-a-date", ""),
        ("", ""),
        (None, ""),
    ])
    def test_format_date_for_input(self, value, expected):
        """Test conversion to a date input value."""
        assert format_date_for_input(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("2024-06-01", date(2024, 6, 1)),
        ("2024-06-01T23:15:00Z", date(2024, 6, 1)),
        ("not-a-date", None),
        ("", None),
    ])
    def test_input_date_value(self, value, expected):
        """Test unparseable dates leave the picker blank instead of defaulting."""
        assert input_date_value(value) == expected


class TestTotals:
    """Tests for total and per-category projections."""

    def test_total(self, projector):
        """Test the total sums every amount."""
        expenses = [make_expense("a", amount=10.25), make_expense("b", amount=4.75)]
        assert projector.project_total(expenses) == 15.0

    def test_empty_total(self, projector):
        """Test an empty collection totals zero."""
        assert projector.project_total([]) == 0.0

    def test_non_numeric_amount_counts_as_zero(self, projector):
        """Test records with unusable amounts do not break the sum."""
        expenses = [make_expense("a", amount=5), SimpleNamespace(amount="n/a")]
        assert projector.project_total(expenses) == 5.0

    def test_category_totals(self, projector):
        """Test amounts are grouped by trimmed category in first-seen order."""
        expenses = [
            make_expense("a", category="Rent", amount=800),
            make_expense("b", category="Food", amount=10),
            make_expense("c", category="  Food ", amount=5),
        ]
        totals = projector.project_category_totals(expenses)
        assert totals == {"Rent": 800.0, "Food": 15.0}
        assert list(totals) == ["Rent", "Food"]

    def test_categories_are_case_sensitive(self, projector):
        """Test "Food" and "food" are separate buckets."""
        expenses = [
            make_expense("a", category="Food", amount=1),
            make_expense("b", category="food", amount=2),
        ]
        assert projector.project_category_totals(expenses) == {"Food": 1.0, "food": 2.0}

    def test_blank_category_is_uncategorized(self, projector):
        """Test blank categories share the uncategorized bucket."""
        expenses = [
            make_expense("a", category="", amount=1),
            make_expense("b", category="   ", amount=2),
        ]
        assert projector.project_category_totals(expenses) == {"Uncategorized": 3.0}


class TestView:
    """Tests for rows and the full view."""

    def test_rows(self, projector):
        """Test row fields and the editing marker."""
        expenses = [make_expense("a", amount=1234.5), make_expense("b")]
        rows = projector.project_rows(expenses, editing_id="b")
        assert rows[0].formatted_amount == "$1,234.50"
        assert rows[0].formatted_date == "Jun 1, 2024"
        assert [row.is_editing for row in rows] == [False, True]

    def test_rows_keep_markup_as_text(self, projector):
        """Test user text is passed through untouched."""
        expense = Expense(
            id="a",
            description="<b>bold</b>",
            category="<script>",
            amount=1,
            date="2024-06-01",
        )
        row = projector.project_rows([expense])[0]
        assert row.description == "<b>bold</b>"
        assert row.category == "<script>"

    def test_empty_view(self, projector):
        """Test the empty state."""
        view = projector.project_view([])
        assert view.rows == []
        assert view.formatted_total == "$0.00"
        assert view.empty_message == EMPTY_TABLE_MESSAGE
        assert view.category_totals == {}

    def test_populated_view(self, projector):
        """Test every projection comes from the same collection."""
        expenses = [
            make_expense("a", category="Food", amount=10),
            make_expense("b", category="Rent", amount=5),
        ]
        view = projector.project_view(expenses)
        assert len(view.rows) == 2
        assert view.total == 15.0
        assert view.formatted_total == "$15.00"
        assert view.empty_message is None
        assert view.category_totals == {"Food": 10.0, "Rent": 5.0}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
