"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from src.models.expense import (
    Expense,
    ExpensePatch,
    FormValues,
    ValidationIssue,
    ValidationResult,
    new_expense_id,
    parse_expense_date,
    round_to_two,
)
from src.models.view import (
    ChartState,
    ExpenseRow,
    ExpenseTrackerView,
    PieChartConfig,
)
from src.models.diagnostics import (
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticEventType,
    DiagnosticSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpensePatch",
    "FormValues",
    "ValidationIssue",
    "ValidationResult",
    "new_expense_id",
    "parse_expense_date",
    "round_to_two",
    # View models
    "ChartState",
    "ExpenseRow",
    "ExpenseTrackerView",
    "PieChartConfig",
    # Diagnostic models
    "DiagnosticEvent",
    "DiagnosticEventBuilder",
    "DiagnosticEventType",
    "DiagnosticSeverity",
]
