"""
Expense Validation

Two very different kinds of checks live here:

FORM VALIDATION (strict):
- Runs before any mutation
- Every field must be filled in and the amount must be a positive number
- Failures are reported per field back to the form; nothing is constructed

SHAPE VALIDATION (permissive):
- Runs on every record read back from storage
- Only checks that the record has the right types
- Records that fail are dropped, never repaired

IMPORTANT: The storage format has no version field, so anything we do not
recognise in storage is treated as absent rather than as an error.
"""

import math
from typing import Any, Optional

from src.models.expense import FormValues, ValidationIssue, ValidationResult


REQUIRED_STRING_FIELDS = ("id", "description", "category", "date")


def parse_amount(raw: Any) -> Optional[float]:
    """
    Parse an amount from a number or numeric string.

    Returns None if the value is not a finite number. Booleans are rejected
    even though Python treats them as integers.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return None
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(value):
        return None
    return value


def is_expense_shaped(raw: Any) -> bool:
    """Check that a stored value looks like an expense record."""
    if not isinstance(raw, dict):
        return False
    if not all(isinstance(raw.get(field), str) for field in REQUIRED_STRING_FIELDS):
        return False
    return parse_amount(raw.get("amount")) is not None


class ExpenseFormValidator:
    """
    Validates expense form input before it reaches the store.

    Example:
        result = ExpenseFormValidator().validate(values)
        if not result.is_valid:
            show(result.issues)
    """

    def validate(self, values: FormValues) -> ValidationResult:
        """
        Validate one form submission.

        Checks:
        - description and category are non-empty after trimming
        - date is non-empty
        - amount parses to a finite number greater than zero

        Returns: ValidationResult with one issue per failing field
        """
        issues = []

        if not values.description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Please enter a description",
            ))

        if not values.category.strip():
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Please enter a category",
            ))

        if not values.date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Please pick a date",
            ))

        amount = parse_amount(values.amount)
        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Please enter a valid amount",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
            ))

        return ValidationResult(issues=issues)
