"""Tests for the Store."""

import io
import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fintrack.audit import AuditLogger
from fintrack.models.transaction import Snapshot, TransactionDraft, TransactionKind
from fintrack.services.storage import (
    CorruptSnapshotError,
    InMemoryStorage,
    SnapshotStorageInterface,
    StorageError,
)
from fintrack.store import Store, create_store
from fintrack.validation import AmountParseError, InputValidationError


class FailingStorage(SnapshotStorageInterface):
    """Reads nothing and fails every write."""

    def read(self, key):
        return None

    def write(self, key, blob):
        raise StorageError("quota exceeded")


def reopen(storage, recorder=None):
    """A fresh store over the same storage, as after a restart."""
    store = Store(
        storage,
        audit_logger=AuditLogger(recorder) if recorder else None,
        key="test-key",
        default_categories=["Food", "Transport"],
    )
    store.load()
    return store


class TestLoad:
    """Tests for loading the persisted snapshot."""

    def test_defaults_without_snapshot(self, store, recorder):
        """Test that a missing snapshot keeps the defaults."""
        assert store.load() is False
        assert store.transactions == []
        assert store.categories == ["Food", "Transport"]
        assert store.goals == {}
        assert "snapshot_missing" in recorder.event_types()

    def test_corrupt_blob_is_fatal(self, storage, store, recorder):
        """Test that an unparseable blob raises."""
        storage.write("test-key", "{not json")
        with pytest.raises(CorruptSnapshotError) as exc_info:
            store.load()
        assert exc_info.value.key == "test-key"
        assert isinstance(exc_info.value, StorageError)
        assert "snapshot_corrupt" in recorder.event_types()

    def test_wrong_shape_is_fatal(self, storage, store):
        """Test that valid JSON with the wrong shape raises."""
        storage.write("test-key", "[1, 2, 3]")
        with pytest.raises(CorruptSnapshotError):
            store.load()

    def test_partial_blob_defaults_each_collection(self, storage, store):
        """Test missing keys default to empty independently."""
        storage.write("test-key", json.dumps({"goals": {"Food": 100}}))
        assert store.load() is True
        assert store.transactions == []
        assert store.categories == []
        assert store.goals == {"Food": Decimal("100")}

    def test_loads_blob_in_browser_format(self, storage, store):
        """Test a blob written by the browser application loads."""
        storage.write("test-key", json.dumps({
            "transactions": [{
                "id": 1709632800000,
                "type": "expense",
                "description": "Mercado",
                "category": "Alimentação",
                "amount": 40.5,
                "date": "2024-03-05T10:00:00.000Z",
            }],
            "categories": ["Alimentação"],
            "goals": {"Alimentação": 300, "Lazer": None},
        }))
        store.load()
        assert store.transactions[0].kind == TransactionKind.EXPENSE
        assert store.transactions[0].amount == Decimal("40.5")
        assert store.goals == {"Alimentação": Decimal("300")}

    @pytest.mark.parametrize("overrides", [
        {"amount": -5},
        {"description": "   "},
        {"category": "   "},
    ])
    def test_loads_browser_rows_that_new_input_rejects(self, storage, store, overrides):
        """Test rows the browser accepted but add_transaction would refuse still load."""
        row = {
            "id": 1709632800000,
            "type": "expense",
            "description": "Mercado",
            "category": "Alimentação",
            "amount": 40.5,
            "date": "2024-03-05T10:00:00.000Z",
        }
        row.update(overrides)
        storage.write("test-key", json.dumps({"transactions": [row], "categories": [], "goals": {}}))

        assert store.load() is True
        assert len(store.transactions) == 1
        assert store.transactions[0].id == 1709632800000

    def test_null_amount_rows_are_dropped(self, storage, store, recorder):
        """Test rows with a null amount are dropped with a warning and the rest load."""
        storage.write("test-key", json.dumps({
            "transactions": [
                {"id": 1, "type": "expense", "description": "NaN", "category": "Food",
                 "amount": None, "date": "2024-03-05T10:00:00.000Z"},
                {"id": 2, "type": "income", "description": "Pay", "category": "Salary",
                 "amount": 100, "date": "2024-03-06T10:00:00.000Z"},
            ],
        }))

        assert store.load() is True
        assert [t.id for t in store.transactions] == [2]
        assert "snapshot_rows_dropped" in recorder.event_types()
        dropped = [r for r in recorder.records if r[2]["event_type"] == "snapshot_rows_dropped"]
        assert dropped[0][0] == "warning"
        assert dropped[0][2]["details"]["transaction_ids"] == [1]

    def test_add_stays_strict_after_lenient_load(self, storage, store):
        """Test a loaded negative row does not loosen the add path."""
        storage.write("test-key", json.dumps({"transactions": [{
            "id": 1, "type": "expense", "description": "Refund", "category": "Food",
            "amount": -5, "date": "2024-03-05T10:00:00.000Z",
        }]}))
        store.load()

        with pytest.raises(AmountParseError):
            store.add_transaction("expense", "Lunch", "Food", "-5")
        assert store.add_transaction("expense", "   ", "Food", "5") is None
        assert len(store.transactions) == 1

    def test_load_replaces_in_memory_state(self, storage, store):
        """Test that load overwrites anything added before it."""
        store.add_transaction("income", "Before", "Food", "1")
        storage.write("test-key", Snapshot(categories=["Other"]).to_blob())
        store.load()
        assert store.transactions == []
        assert store.categories == ["Other"]


class TestAddTransaction:
    """Tests for adding transactions."""

    def test_add_appends_and_persists(self, store, storage):
        """Test a valid add appends one transaction and writes the snapshot."""
        txn = store.add_transaction("expense", "Lunch", "Food", "12,50")
        assert txn is not None
        assert store.transactions == [txn]
        assert txn.amount == Decimal("12.50")
        assert storage.write_count == 1
        assert Snapshot.from_blob(storage.read("test-key")).transactions == [txn]

    def test_id_and_timestamp_from_clock(self, store, clock):
        """Test the id is the clock in milliseconds and the timestamp is the clock."""
        txn = store.add_transaction(TransactionKind.INCOME, "Salary", "Food", "100")
        assert txn.id == int(clock.now.timestamp() * 1000)
        assert txn.timestamp == clock.now

    def test_count_grows_by_one_with_unique_ids(self, store):
        """Test ids stay unique even when the clock does not move."""
        for i in range(5):
            store.add_transaction("expense", f"Item {i}", "Food", "1")
        ids = [t.id for t in store.transactions]
        assert len(ids) == 5
        assert len(set(ids)) == 5
        assert ids == sorted(ids)

    def test_ids_continue_after_loaded_ids(self, storage, store, clock, make_transaction):
        """Test new ids never collide with loaded ones."""
        future_id = int(clock.now.timestamp() * 1000) + 10_000
        storage.write("test-key", Snapshot(transactions=[make_transaction(id=future_id)]).to_blob())
        store.load()
        txn = store.add_transaction("expense", "Later", "Food", "1")
        assert txn.id == future_id + 1

    @pytest.mark.parametrize("description,category,amount", [
        ("", "Food", "10"),
        ("Lunch", "", "10"),
        ("Lunch", "Food", ""),
        ("   ", "Food", "10"),
        (None, "Food", "10"),
    ])
    def test_missing_fields_are_a_silent_skip(self, store, storage, recorder, description, category, amount):
        """Test missing required input does nothing and raises nothing."""
        assert store.add_transaction("expense", description, category, amount) is None
        assert store.transactions == []
        assert storage.write_count == 0
        assert recorder.event_types() == ["transaction_skipped"]

    def test_unparseable_amount_raises(self, store, storage, recorder):
        """Test bad amount text is a recoverable error, not a NaN."""
        with pytest.raises(AmountParseError):
            store.add_transaction("expense", "Lunch", "Food", "twelve")
        assert store.transactions == []
        assert storage.write_count == 0
        assert "transaction_rejected" in recorder.event_types()

    def test_invalid_kind_raises(self, store):
        """Test an unknown kind is rejected."""
        with pytest.raises(InputValidationError):
            store.add_transaction("transfer", "Move", "Food", "10")

    def test_category_outside_set_is_allowed(self, store):
        """Test transactions may use categories not in the set."""
        txn = store.add_transaction("expense", "Cinema", "Leisure", "30")
        assert txn.category == "Leisure"
        assert "Leisure" not in store.categories

    def test_write_failure_propagates(self, recorder, clock):
        """Test storage errors reach the caller."""
        store = Store(FailingStorage(), audit_logger=AuditLogger(recorder),
                      key="k", default_categories=[], clock=clock)
        with pytest.raises(StorageError):
            store.add_transaction("expense", "Lunch", "Food", "10")


class TestSubmitDraft:
    """Tests for submitting staged form input."""

    def test_success_clears_draft(self, store):
        """Test the draft text is cleared and kind kept after a successful add."""
        draft = TransactionDraft(
            kind=TransactionKind.EXPENSE,
            description="Bus",
            category="Transport",
            amount_text="4.40",
        )
        txn = store.submit_draft(draft)
        assert txn.kind == TransactionKind.EXPENSE
        assert draft.description == ""
        assert draft.amount_text == ""
        assert draft.category == ""
        assert draft.kind == TransactionKind.EXPENSE

    def test_skip_keeps_draft(self, store):
        """Test an incomplete draft is left as typed."""
        draft = TransactionDraft(description="Bus", amount_text="4.40")
        assert store.submit_draft(draft) is None
        assert draft.description == "Bus"

    def test_parse_error_keeps_draft(self, store):
        """Test a bad amount leaves the draft for correction."""
        draft = TransactionDraft(description="Bus", category="Transport", amount_text="x")
        with pytest.raises(AmountParseError):
            store.submit_draft(draft)
        assert draft.amount_text == "x"


class TestGoalsAndCategories:
    """Tests for goals and categories."""

    def test_set_goal_overwrites(self, store, storage):
        """Test setting a goal twice keeps the last value."""
        store.set_goal("Food", "100")
        store.set_goal("Food", "150,5")
        assert store.goals == {"Food": Decimal("150.5")}
        assert storage.write_count == 2

    def test_goal_for_unknown_category(self, store):
        """Test goals are not checked against the category set."""
        assert store.set_goal("Ghost", "10") == Decimal("10")
        assert "Ghost" in store.goals
        assert [row.category for row in store.view().report] == ["Food", "Transport"]

    def test_blank_goal_clears(self, store, recorder):
        """Test blank goal text removes the goal."""
        store.set_goal("Food", "100")
        assert store.set_goal("Food", "") is None
        assert store.goals == {}
        assert "goal_cleared" in recorder.event_types()

    def test_invalid_goal_raises(self, store):
        """Test non-numeric goal text is rejected."""
        with pytest.raises(AmountParseError) as exc_info:
            store.set_goal("Food", "a lot")
        assert exc_info.value.field == "goal"
        assert store.goals == {}

    def test_add_category(self, store):
        """Test categories are appended once."""
        assert store.add_category("Leisure") is True
        assert store.add_category("Leisure") is False
        assert store.add_category("  ") is False
        assert store.categories == ["Food", "Transport", "Leisure"]


class TestPersistence:
    """Tests for the snapshot staying in sync with memory."""

    def test_round_trip_after_mutations(self, store, storage, make_transaction):
        """Test a restarted store sees exactly the committed state."""
        store.add_transaction("income", "Salary", "Food", "2000")
        store.add_transaction("expense", "Bus, return", "Transport", "4.40")
        store.set_goal("Food", "300")
        store.add_category("Leisure")

        restarted = reopen(storage)
        assert restarted.snapshot() == store.snapshot()

    def test_every_mutation_writes(self, store, storage, make_transaction):
        """Test each mutation persists once."""
        store.add_transaction("income", "Salary", "Food", "2000")
        store.set_goal("Food", "300")
        store.add_category("Leisure")
        store.replace_transactions([make_transaction()])
        assert storage.write_count == 4

    def test_replace_transactions(self, store, storage, make_transaction):
        """Test the log can only shrink by bulk replacement."""
        store.add_transaction("expense", "Lunch", "Food", "10")
        kept = make_transaction(amount="5")
        store.replace_transactions([kept])
        assert store.transactions == [kept]
        assert reopen(storage).transactions == [kept]

    def test_collections_are_copies(self, store):
        """Test callers cannot mutate state behind the store's back."""
        store.categories.append("Sneaky")
        store.goals["Sneaky"] = Decimal("1")
        assert store.categories == ["Food", "Transport"]
        assert store.goals == {}


class TestDerivedViews:
    """Tests for the store's view helpers."""

    def test_view_filters_by_month(self, store, clock):
        """Test the view reflects the month filter."""
        store.add_transaction("income", "Salary", "Food", "200")
        clock.now = datetime(2024, 4, 1, 10, 0, tzinfo=timezone.utc)
        store.add_transaction("expense", "Lunch", "Food", "50")
        store.add_transaction("expense", "Dinner", "Food", "30")

        march = store.view("2024-03")
        assert march.totals.income == Decimal("200")
        assert march.totals.expense == 0

        everything = store.view("")
        assert everything.totals.balance == Decimal("120")
        assert everything.report[0].spent == Decimal("80")
        assert store.available_months() == ["2024-03", "2024-04"]

    def test_export_csv(self, store, recorder):
        """Test exporting the filtered transactions to a stream."""
        store.add_transaction("expense", "Lunch, team", "Food", "12.5")
        buffer = io.StringIO()
        count = store.export_csv(buffer, "2024-03", tz=timezone.utc)
        assert count == 1
        assert buffer.getvalue().splitlines() == [
            "Tipo,Descrição,Valor,Categoria,Data",
            'expense,"Lunch, team",12.5,Food,05/03/2024',
        ]
        assert "export_written" in recorder.event_types()

    def test_csv_text_is_not_audited(self, store, recorder):
        """Test building download text matches the export and logs no export event."""
        store.add_transaction("expense", "Lunch, team", "Food", "12.5")
        text = store.csv_text("2024-03", tz=timezone.utc)
        assert text.splitlines()[1] == 'expense,"Lunch, team",12.5,Food,05/03/2024'
        assert "export_written" not in recorder.event_types()

    def test_export_rows_follow_month(self, store):
        """Test export rows are recomputed from current state."""
        store.add_transaction("expense", "Lunch", "Food", "12.5")
        assert list(store.export_rows("2024-04")) == []
        assert len(list(store.export_rows("2024-03"))) == 1


class TestCreateStore:
    """Tests for the store factory."""

    def test_memory_backend(self, monkeypatch):
        """Test the memory backend starts from the configured defaults."""
        monkeypatch.delenv("DEFAULT_CATEGORIES", raising=False)
        store = create_store(backend="memory")
        assert store.categories == ["Salário", "Alimentação", "Transporte", "Lazer"]

    def test_file_backend_round_trip(self, tmp_path):
        """Test state survives a restart with the file backend."""
        store = create_store(backend="file", directory=tmp_path)
        store.add_transaction("expense", "Lunch", "Alimentação", "12")
        store.set_goal("Alimentação", "300")

        restarted = create_store(backend="file", directory=tmp_path)
        assert restarted.snapshot() == store.snapshot()

    def test_unknown_backend(self):
        """Test an unknown backend name is rejected."""
        with pytest.raises(ValueError):
            create_store(backend="cloud")
