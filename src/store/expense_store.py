"""
Expense Store

The single source of truth for the expense collection. Every read and
write of the persisted blob goes through here.

GUARANTEES (after every public call):
- Expense ids are unique
- The collection is sorted by date, newest first; unparseable dates last
- Every record passed shape validation

DESIGN DECISION: Persistence failures do not roll back memory.
If a write is lost (quota, I/O), the in-memory collection is kept as-is,
the failure goes to the diagnostic channel, and the caller carries on.
"""

import json
from typing import Iterable, Optional, Union

from src.diagnostics import DiagnosticsLogger
from src.models.expense import Expense, ExpensePatch
from src.services.storage import KeyValueStorageInterface, StorageError
from src.validation import is_expense_shaped, parse_amount


class ExpenseStoreError(Exception):
    """Base exception for expense store operations."""
    pass


class DuplicateExpenseError(ExpenseStoreError):
    """Attempted to add an expense whose id already exists."""
    pass


def expense_sort_key(expense: Expense) -> tuple[int, float]:
    """Newest first; unparseable dates sort after every valid date."""
    parsed = expense.parsed_date
    if parsed is None:
        return (1, 0.0)
    return (0, -parsed.timestamp())


def sort_expenses(expenses: Iterable[Expense]) -> list[Expense]:
    """Stable sort, so equal keys keep their relative order."""
    return sorted(expenses, key=expense_sort_key)


class ExpenseStore:
    """
    Owns the in-memory, date-sorted expense collection.

    Usage:
        store = ExpenseStore(storage, key="expense-tracker:expenses")
        store.load()
        store.add(Expense(description="Lunch", category="Food", amount=12.5, date="2024-06-01"))
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str,
        diagnostics: Optional[DiagnosticsLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._diagnostics = diagnostics or DiagnosticsLogger()
        self._expenses: list[Expense] = []
        self._last_persist_ok = True

    @property
    def key(self) -> str:
        return self._key

    @property
    def last_persist_ok(self) -> bool:
        """False if the most recent write was lost."""
        return self._last_persist_ok

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Snapshot of the current collection, in display order."""
        return tuple(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def __contains__(self, expense_id: object) -> bool:
        return any(expense.id == expense_id for expense in self._expenses)

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> list[Expense]:
        """
        Replace the in-memory collection with what storage holds.

        Never raises. An absent, unreadable or malformed blob yields an
        empty collection; individual malformed records are dropped.

        Returns:
            The loaded collection, sorted
        """
        self._expenses = self._read()
        return list(self._expenses)

    def reload(self) -> list[Expense]:
        """Discard memory and re-read storage (another context wrote)."""
        expenses = self.load()
        self._diagnostics.log_external_change(self._key, len(expenses))
        return expenses

    def _read(self) -> list[Expense]:
        try:
            blob = self._storage.get(self._key)
        except StorageError as e:
            self._diagnostics.log_storage_read_failed(self._key, str(e))
            return []

        if not blob:
            return []

        try:
            parsed = json.loads(blob)
        except (ValueError, RecursionError) as e:
            # Deep nesting raises RecursionError, not a decode error
            self._diagnostics.log_storage_blob_malformed(self._key, str(e))
            return []

        if not isinstance(parsed, list):
            self._diagnostics.log_storage_blob_malformed(
                self._key, f"expected a JSON array, got {type(parsed).__name__}"
            )
            return []

        expenses = []
        seen_ids = set()
        for raw in parsed:
            if not is_expense_shaped(raw) or raw["id"] in seen_ids:
                continue
            seen_ids.add(raw["id"])
            expenses.append(
                Expense.model_validate({**raw, "amount": parse_amount(raw["amount"])})
            )

        dropped = len(parsed) - len(expenses)
        if dropped:
            self._diagnostics.log_records_dropped(self._key, dropped, len(expenses))
        self._diagnostics.log_storage_loaded(self._key, len(expenses))

        return sort_expenses(expenses)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, expense: Expense) -> None:
        """
        Prepend a new expense, re-sort and persist.

        Raises:
            DuplicateExpenseError: If an expense with the same id exists
        """
        if expense.id in self:
            raise DuplicateExpenseError(f"Expense {expense.id} already exists")

        self._expenses = sort_expenses([expense, *self._expenses])
        self._diagnostics.log_expense_added(self._key, expense.id)
        self.persist()

    def update(self, record: Union[Expense, ExpensePatch]) -> bool:
        """
        Merge a record onto the stored expense with the same id.

        An Expense replaces every field; an ExpensePatch only the fields it sets.
        Unknown ids are ignored.

        Returns:
            True if an expense was updated
        """
        if isinstance(record, ExpensePatch):
            changes = record.changes()
        else:
            changes = record.model_dump(exclude={"id"})

        updated = False
        merged = []
        for expense in self._expenses:
            if expense.id == record.id:
                expense = expense.model_copy(update=changes)
                updated = True
            merged.append(expense)

        if not updated:
            return False

        self._expenses = sort_expenses(merged)
        self._diagnostics.log_expense_updated(self._key, record.id, sorted(changes))
        self.persist()
        return True

    def delete(self, expense_id: str) -> bool:
        """
        Remove an expense if present, then persist.

        Returns:
            True if an expense was removed
        """
        remaining = [expense for expense in self._expenses if expense.id != expense_id]
        removed = len(remaining) != len(self._expenses)
        self._expenses = remaining
        if removed:
            self._diagnostics.log_expense_deleted(self._key, expense_id)
        self.persist()
        return removed

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def serialize(self) -> str:
        return json.dumps([expense.to_storage_dict() for expense in self._expenses])

    def persist(self) -> bool:
        """
        Write the whole collection to storage.

        Never raises and never rolls back memory.

        Returns:
            True if the write succeeded
        """
        try:
            self._storage.set(self._key, self.serialize())
        except StorageError as e:
            self._diagnostics.log_persist_failed(self._key, str(e), len(self._expenses))
            self._last_persist_ok = False
            return False
        self._last_persist_ok = True
        return True
