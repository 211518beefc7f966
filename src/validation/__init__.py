"""Validation package."""

from src.validation.validator import (
    ExpenseFormValidator,
    is_expense_shaped,
    parse_amount,
)

__all__ = ["ExpenseFormValidator", "is_expense_shaped", "parse_amount"]
