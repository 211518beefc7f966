"""Expense store package."""

from src.store.expense_store import (
    DuplicateExpenseError,
    ExpenseStore,
    ExpenseStoreError,
    expense_sort_key,
    sort_expenses,
)

__all__ = [
    "DuplicateExpenseError",
    "ExpenseStore",
    "ExpenseStoreError",
    "expense_sort_key",
    "sort_expenses",
]
