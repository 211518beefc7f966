"""
Form/Edit Controller

Translates form submits and row actions into store calls and owns the
only piece of transient UI state: which expense, if any, is being edited.

STATES:
- IDLE:          the form adds new expenses
- EDITING(id):   the form is pre-filled from one expense and updates it

TRANSITIONS:
- IDLE     --submit(valid)-->        IDLE      (store.add)
- IDLE     --start_edit(id)-->       EDITING   (form pre-filled)
- EDITING  --submit(valid)-->        IDLE      (store.update, form reset)
- EDITING  --cancel_edit-->          IDLE      (form reset, no mutation)
- EDITING  --target deleted-->       IDLE

Invalid submissions never mutate anything, in either state.
"""

from datetime import date
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from src.diagnostics import DiagnosticsLogger
from src.models.expense import (
    Expense,
    FormValues,
    ValidationIssue,
    ValidationResult,
    new_expense_id,
    round_to_two,
)
from src.projections.projector import format_date_for_input
from src.store import ExpenseStore
from src.validation import ExpenseFormValidator, parse_amount


ADD_LABEL = "Add Expense"
UPDATE_LABEL = "Update Expense"


def _amount_text(amount: float) -> str:
    """Shortest text for an amount, without a trailing ".0"."""
    text = repr(float(amount))
    return text[:-2] if text.endswith(".0") else text


class FormMode(str, Enum):
    """Whether the form adds or edits."""
    IDLE = "idle"
    EDITING = "editing"


class SubmitOutcome(BaseModel):
    """What happened to one form submission."""

    accepted: bool = Field(
        ...,
        description="Was the store mutated?"
    )
    action: Optional[str] = Field(
        default=None,
        pattern="^(added|updated)$",
        description="Which mutation was applied"
    )
    expense_id: Optional[str] = None
    validation: ValidationResult = Field(default_factory=ValidationResult)


class ExternalChangeNotice(BaseModel):
    """Result of reloading after another session changed storage."""

    key: str
    expense_count: int
    edit_conflict: bool = Field(
        default=False,
        description="The expense being edited changed underneath the open form"
    )
    edit_cancelled: bool = Field(
        default=False,
        description="The expense being edited was deleted elsewhere"
    )


class ExpenseFormController:
    """
    Mediates between the expense form and the store.

    Usage:
        controller = ExpenseFormController(store)
        outcome = controller.submit(FormValues(description="Lunch", ...))
    """

    def __init__(
        self,
        store: ExpenseStore,
        validator: Optional[ExpenseFormValidator] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = new_expense_id,
    ):
        self._store = store
        self._validator = validator or ExpenseFormValidator()
        self._diagnostics = diagnostics or DiagnosticsLogger()
        self._today = today
        self._id_factory = id_factory
        self._editing_id: Optional[str] = None
        # Stored copy of the edit target when editing began
        self._editing_original: Optional[Expense] = None
        self._form = FormValues.defaults(self._today())

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def mode(self) -> FormMode:
        return FormMode.EDITING if self._editing_id is not None else FormMode.IDLE

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    @property
    def form_values(self) -> FormValues:
        """Values the form should currently display."""
        return self._form

    @property
    def submit_label(self) -> str:
        return UPDATE_LABEL if self._editing_id is not None else ADD_LABEL

    @property
    def show_cancel(self) -> bool:
        return self._editing_id is not None

    def reset_form(self) -> None:
        """Blank the form, keeping today's date as the default."""
        self._form = FormValues.defaults(self._today())

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    def submit(self, values: FormValues) -> SubmitOutcome:
        """
        Validate and apply one form submission.

        In IDLE a new expense is added; in EDITING the edit target is updated
        and the controller returns to IDLE.
        """
        validation = self._validator.validate(values)
        if not validation.is_valid:
            self._form = values
            return SubmitOutcome(accepted=False, validation=validation)

        description = values.description.strip()
        category = values.category.strip()
        amount = round_to_two(parse_amount(values.amount))

        if self._editing_id is None:
            expense = Expense(
                id=self._id_factory(),
                description=description,
                category=category,
                amount=amount,
                date=values.date,
            )
            self._store.add(expense)
            self.reset_form()
            return SubmitOutcome(
                accepted=True,
                action="added",
                expense_id=expense.id,
                validation=validation,
            )

        expense_id = self._editing_id
        updated = self._store.update(Expense(
            id=expense_id,
            description=description,
            category=category,
            amount=amount,
            date=values.date,
        ))
        self._exit_edit_mode()

        if not updated:
            return SubmitOutcome(
                accepted=False,
                expense_id=expense_id,
                validation=ValidationResult(issues=[ValidationIssue(
                    field="id",
                    issue_type="not_found",
                    message="This expense no longer exists",
                )]),
            )
        return SubmitOutcome(
            accepted=True,
            action="updated",
            expense_id=expense_id,
            validation=validation,
        )

    def start_edit(self, expense_id: str) -> Optional[FormValues]:
        """
        Enter edit mode for an expense and pre-fill the form.

        Returns:
            The pre-filled values, or None if the expense does not exist
        """
        expense = self._store.get(expense_id)
        if expense is None:
            return None

        self._editing_id = expense.id
        self._editing_original = expense
        self._form = FormValues(
            description=expense.description,
            category=expense.category,
            amount=_amount_text(expense.amount),
            date=format_date_for_input(expense.date),
        )
        return self._form

    def cancel_edit(self) -> None:
        """Leave edit mode without touching the store."""
        self._exit_edit_mode()

    def delete(self, expense_id: str) -> bool:
        """Delete an expense; deleting the edit target also ends edit mode."""
        removed = self._store.delete(expense_id)
        if self._editing_id == expense_id:
            self._exit_edit_mode()
        return removed

    def _exit_edit_mode(self) -> None:
        self._editing_id = None
        self._editing_original = None
        self.reset_form()

    # -------------------------------------------------------------------------
    # Cross-session synchronization
    # -------------------------------------------------------------------------

    def handle_external_change(self, key: str) -> Optional[ExternalChangeNotice]:
        """
        React to another session writing storage.

        The store is reloaded wholesale (last writer wins). An open edit is
        not merged: if its target was deleted elsewhere, edit mode ends; if
        the target was changed elsewhere, edit mode stays on and the notice
        flags the conflict so the page can warn before the edit overwrites it.

        Returns:
            A notice, or None if the key is not the expense key
        """
        if key != self._store.key:
            return None

        expenses = self._store.reload()
        notice = ExternalChangeNotice(key=key, expense_count=len(expenses))

        if self._editing_id is None:
            return notice

        current = self._store.get(self._editing_id)
        if current is None:
            self._exit_edit_mode()
            notice.edit_cancelled = True
        elif current != self._editing_original:
            self._diagnostics.log_edit_conflict(key, self._editing_id)
            self._editing_original = current
            notice.edit_conflict = True
        return notice
