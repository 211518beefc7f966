"""Tests for the expense store."""

import json

import pytest

from src.diagnostics import DiagnosticsLogger
from src.models.diagnostics import DiagnosticEventType
from src.models.expense import Expense, ExpensePatch
from src.services.storage import (
    InMemoryKeyValueStorage,
    KeyValueStorageInterface,
    StorageReadError,
)
from src.store import DuplicateExpenseError, ExpenseStore, sort_expenses


KEY = "expense-tracker:expenses"


def make_expense(expense_id: str, date: str = "2024-06-01", **overrides) -> Expense:
    fields = dict(
        id=expense_id,
        description=f"Expense {expense_id}",
        category="Food",
        amount=10.0,
        date=date,
    )
    fields.update(overrides)
    return Expense(**fields)


class UnreadableStorage(InMemoryKeyValueStorage):
    """Storage whose reads always fail."""

    def get(self, key):
        raise StorageReadError("disk on fire")


@pytest.fixture
def diagnostics():
    return DiagnosticsLogger()


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(storage, diagnostics):
    return ExpenseStore(storage, key=KEY, diagnostics=diagnostics)


class TestSorting:
    """Tests for the display order."""

    def test_newest_first_invalid_last(self):
        """Test valid dates newest first, then unparseable ones."""
        expenses = [
            make_expense("a", "2024-01-01"),
            make_expense("b", "not-a-date"),
            make_expense("c", "2024-06-01"),
        ]
        assert [e.id for e in sort_expenses(expenses)] == ["c", "a", "b"]

    def test_stable_for_equal_dates(self):
        """Test equal dates keep their relative order."""
        expenses = [
            make_expense("first", "2024-06-01"),
            make_expense("second", "2024-06-01"),
            make_expense("bad-1", "??"),
            make_expense("bad-2", ""),
        ]
        assert [e.id for e in sort_expenses(expenses)] == [
            "first", "second", "bad-1", "bad-2",
        ]


class TestLoad:
    """Tests for ExpenseStore.load."""

    def test_absent_key(self, store):
        """Test an empty storage loads an empty collection."""
        assert store.load() == []
        assert len(store) == 0

    def test_malformed_json(self, store, storage, diagnostics):
        """Test an unparseable blob loads as empty and is reported."""
        storage.set(KEY, "{not json")
        assert store.load() == []
        assert diagnostics.events_of_type(DiagnosticEventType.STORAGE_BLOB_MALFORMED)

    def test_non_array_blob(self, store, storage, diagnostics):
        """Test a JSON object instead of an array loads as empty."""
        storage.set(KEY, json.dumps({"id": "a"}))
        assert store.load() == []
        assert diagnostics.events_of_type(DiagnosticEventType.STORAGE_BLOB_MALFORMED)

    def test_read_failure(self, diagnostics):
        """Test a failing backend loads as empty without raising."""
        store = ExpenseStore(UnreadableStorage(), key=KEY, diagnostics=diagnostics)
        assert store.load() == []
        assert diagnostics.events_of_type(DiagnosticEventType.STORAGE_READ_FAILED)

    def test_drops_malformed_records(self, store, storage, diagnostics):
        """Test malformed records are dropped and the rest kept."""
        storage.set(KEY, json.dumps([
            make_expense("good").to_storage_dict(),
            {"id": "no-category", "description": "x", "amount": 1, "date": "2024-01-01"},
            {"id": "bad-amount", "description": "x", "category": "y",
             "amount": "lots", "date": "2024-01-01"},
            "just a string",
        ]))
        loaded = store.load()
        assert [e.id for e in loaded] == ["good"]
        dropped = diagnostics.events_of_type(DiagnosticEventType.RECORDS_DROPPED)
        assert dropped[0].details["dropped"] == 3

    def test_deeply_nested_blob(self, store, storage, diagnostics):
        """Test runaway nesting loads as empty instead of raising."""
        storage.set(KEY, "[" * 100000 + "]" * 100000)
        assert store.load() == []
        assert diagnostics.events_of_type(DiagnosticEventType.STORAGE_BLOB_MALFORMED)

    def test_amount_too_large_for_float(self, store, storage):
        """Test an integer amount beyond float range drops only that record."""
        huge = make_expense("huge").to_storage_dict()
        huge["amount"] = 10 ** 400
        storage.set(KEY, json.dumps([huge, make_expense("ok").to_storage_dict()]))
        assert [e.id for e in store.load()] == ["ok"]

    def test_numeric_string_amount(self, store, storage):
        """Test numeric-string amounts load as numbers."""
        record = make_expense("a").to_storage_dict()
        record["amount"] = "12.50"
        storage.set(KEY, json.dumps([record]))
        assert store.load()[0].amount == 12.5

    def test_duplicate_ids_keep_first(self, store, storage):
        """Test the first record wins when ids repeat."""
        storage.set(KEY, json.dumps([
            make_expense("a", description="first").to_storage_dict(),
            make_expense("a", description="second").to_storage_dict(),
        ]))
        loaded = store.load()
        assert len(loaded) == 1
        assert loaded[0].description == "first"

    def test_load_sorts(self, store, storage):
        """Test loaded records come back in display order."""
        storage.set(KEY, json.dumps([
            make_expense("a", "2024-01-01").to_storage_dict(),
            make_expense("b", "not-a-date").to_storage_dict(),
            make_expense("c", "2024-06-01").to_storage_dict(),
        ]))
        assert [e.id for e in store.load()] == ["c", "a", "b"]

    def test_unknown_fields_survive_round_trip(self, store, storage):
        """Test extra stored keys are written back unchanged."""
        record = make_expense("a").to_storage_dict()
        record["receipt"] = "r-1"
        storage.set(KEY, json.dumps([record]))
        store.load()
        store.persist()
        assert json.loads(storage.get(KEY))[0]["receipt"] == "r-1"


class TestMutations:
    """Tests for add, update and delete."""

    def test_add_persists(self, store, storage):
        """Test add writes the whole collection."""
        store.add(make_expense("a"))
        stored = json.loads(storage.get(KEY))
        assert [r["id"] for r in stored] == ["a"]
        assert store.last_persist_ok

    def test_add_keeps_order(self, store):
        """Test adds are re-sorted by date."""
        store.add(make_expense("old", "2024-01-01"))
        store.add(make_expense("new", "2024-06-01"))
        store.add(make_expense("mid", "2024-03-01"))
        assert [e.id for e in store.expenses] == ["new", "mid", "old"]

    def test_add_duplicate_id(self, store):
        """Test adding an existing id is refused."""
        store.add(make_expense("a"))
        with pytest.raises(DuplicateExpenseError):
            store.add(make_expense("a"))
        assert len(store) == 1

    def test_update_full_record(self, store):
        """Test an Expense replaces every field."""
        store.add(make_expense("a"))
        assert store.update(make_expense("a", description="Dinner", amount=20.0)) is True
        updated = store.get("a")
        assert updated.description == "Dinner"
        assert updated.amount == 20.0

    def test_update_patch(self, store):
        """Test a patch changes only what it sets."""
        store.add(make_expense("a", description="Lunch"))
        store.update(ExpensePatch(id="a", amount=99.0))
        updated = store.get("a")
        assert updated.description == "Lunch"
        assert updated.amount == 99.0

    def test_update_resorts(self, store):
        """Test changing a date moves the record."""
        store.add(make_expense("a", "2024-01-01"))
        store.add(make_expense("b", "2024-02-01"))
        store.update(ExpensePatch(id="a", date="2024-03-01"))
        assert [e.id for e in store.expenses] == ["a", "b"]

    def test_update_unknown_id(self, store, storage):
        """Test updating a missing id changes nothing."""
        store.add(make_expense("a"))
        before = storage.get(KEY)
        assert store.update(make_expense("missing")) is False
        assert storage.get(KEY) == before

    def test_delete(self, store, storage):
        """Test delete removes and persists."""
        store.add(make_expense("a"))
        store.add(make_expense("b"))
        assert store.delete("a") is True
        assert "a" not in store
        assert [r["id"] for r in json.loads(storage.get(KEY))] == ["b"]

    def test_delete_unknown_id(self, store):
        """Test deleting a missing id is a no-op."""
        store.add(make_expense("a"))
        assert store.delete("missing") is False
        assert len(store) == 1

    def test_delete_last_writes_empty_array(self, store, storage):
        """Test deleting everything stores an empty array."""
        store.add(make_expense("a"))
        store.delete("a")
        assert storage.get(KEY) == "[]"


class TestPersistenceFailure:
    """Tests for lost writes."""

    def test_quota_keeps_memory(self, diagnostics):
        """Test a failed write keeps the in-memory change."""
        storage = InMemoryKeyValueStorage(quota_bytes=10)
        store = ExpenseStore(storage, key=KEY, diagnostics=diagnostics)

        store.add(make_expense("a"))

        assert [e.id for e in store.expenses] == ["a"]
        assert store.last_persist_ok is False
        assert storage.get(KEY) is None
        failures = diagnostics.events_of_type(DiagnosticEventType.PERSIST_FAILED)
        assert failures[0].details["count"] == 1

    def test_recovers_after_success(self, store):
        """Test last_persist_ok resets on the next good write."""
        store.add(make_expense("a"))
        assert store.last_persist_ok is True


class TestReload:
    """Tests for picking up another session's writes."""

    def test_reload_replaces_memory(self, storage, diagnostics):
        """Test reload discards memory in favour of storage."""
        area_storage = InMemoryKeyValueStorage(storage.area)
        mine = ExpenseStore(storage, key=KEY, diagnostics=diagnostics)
        theirs = ExpenseStore(area_storage, key=KEY)

        mine.add(make_expense("a"))
        theirs.load()
        theirs.add(make_expense("b", "2024-01-01"))

        assert [e.id for e in mine.reload()] == ["a", "b"]
        assert diagnostics.events_of_type(DiagnosticEventType.EXTERNAL_CHANGE_RELOADED)

    def test_serialize_is_json_array(self, store):
        """Test the blob format."""
        store.add(make_expense("a"))
        data = json.loads(store.serialize())
        assert data == [{
            "id": "a",
            "description": "Expense a",
            "category": "Food",
            "amount": 10.0,
            "date": "2024-06-01",
        }]


def test_storage_interface_is_abstract():
    """Test the interface cannot be instantiated."""
    with pytest.raises(TypeError):
        KeyValueStorageInterface()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
