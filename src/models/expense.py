"""
Core Data Models for Expense Tracker

These models define the schemas for all expense data flowing through the system.
They are designed to:
1. Describe exactly what a stored expense looks like
2. Carry field-level validation feedback back to the form
3. Be serializable to the JSON blob kept in storage

DESIGN DECISION: Stored expenses are only shape-checked, never repaired.
Form input goes through the stricter ExpenseFormValidator before an
Expense is ever constructed from it.
"""

import re
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


TWO_PLACES = Decimal("0.01")

# YYYY-MM-DD, optionally followed by a time and a Z, +HH:MM or -HH:MM offset
ISO_DATE_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?"
    r"(Z|[+-]\d{2}:?\d{2})?)?",
    re.IGNORECASE | re.ASCII,
)

# Models below have a field named `date`
CalendarDate = date


def new_expense_id() -> str:
    """Generate an opaque, unique expense identifier."""
    return str(uuid4())


def round_to_two(value: float) -> float:
    """
    Round an amount to two fractional digits, half away from zero.

    The shortest repr of the float is used as the decimal starting point,
    so binary drift such as 19.005 -> 19.00499999... does not round down.
    """
    quantized = Decimal(repr(float(value))).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return float(quantized)


def parse_expense_date(value: object) -> Optional[datetime]:
    """
    Parse a stored date string.

    Accepts ISO 8601 dates and date-times (see ISO_DATE_PATTERN), with an
    optional 'Z' or UTC offset. Naive values are taken as UTC. Fractional
    seconds beyond microseconds are truncated. Returns None for anything
    else, including out-of-range fields.
    """
    if not isinstance(value, str):
        return None
    match = ISO_DATE_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, offset = match.groups()

    tz = timezone.utc
    if offset and offset.upper() != "Z":
        digits = offset[1:].replace(":", "")
        hours, minutes = int(digits[:2]), int(digits[2:])
        if minutes > 59:
            return None
        delta = timedelta(hours=hours, minutes=minutes)
        if offset[0] == "-":
            delta = -delta
        try:
            tz = timezone(delta)
        except ValueError:
            return None

    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0),
            int((fraction or "0")[:6].ljust(6, "0")),
            tzinfo=tz,
        )
    except ValueError:
        return None


# =============================================================================
# EXPENSE RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single expense entry.

    Extra keys found in storage are carried along untouched so that a
    load/persist cycle never loses data written by another version.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(
        default_factory=new_expense_id,
        description="Opaque unique identifier, immutable after creation"
    )
    description: str = Field(
        ...,
        description="What the money was spent on"
    )
    category: str = Field(
        ...,
        description="Free-form category label"
    )
    amount: float = Field(
        ...,
        description="Amount, rounded to two decimals"
    )
    date: str = Field(
        ...,
        description="ISO-like date string; may be unparseable"
    )

    @property
    def parsed_date(self) -> Optional[datetime]:
        return parse_expense_date(self.date)

    def to_storage_dict(self) -> dict:
        """Convert to the plain dict written into the storage blob."""
        return self.model_dump(mode="json")


class ExpensePatch(BaseModel):
    """
    Partial update for an existing expense.

    Only the fields that are set are merged onto the stored record.
    """

    id: str = Field(
        ...,
        description="ID of the expense to update"
    )
    description: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[str] = None

    def changes(self) -> dict:
        """Fields to merge, excluding the id."""
        return self.model_dump(exclude={"id"}, exclude_none=True)


# =============================================================================
# FORM MODELS
# =============================================================================

class FormValues(BaseModel):
    """
    Raw values collected from the expense form.

    Everything is text, exactly as the user typed it.
    """

    description: str = ""
    category: str = ""
    amount: str = ""
    date: str = ""

    @classmethod
    def defaults(cls, today: Optional[CalendarDate] = None) -> "FormValues":
        """A blank form, with the date pre-set to today."""
        return cls(date=(today or CalendarDate.today()).isoformat())


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating one form submission."""

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def issues_for(self, field: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.field == field]
