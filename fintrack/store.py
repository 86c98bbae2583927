"""
Finance Store

The single source of truth for transactions, categories and goals.

Every mutation:
1. Updates the in-memory collections
2. Writes the full snapshot to storage, synchronously
3. Emits an audit event

Storage failures are not caught here. A write that fails propagates to
the caller and the in-memory state keeps the change.

Categories, goals and transaction categories are loosely associated:
a transaction may use a category that is not in the set, and a goal
may name a category that no longer exists.
"""

from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, TextIO, Union

from pydantic import ValidationError

from fintrack.audit import AuditLogger
from fintrack.config import get_settings
from fintrack.models.audit import AuditEventBuilder
from fintrack.models.transaction import (
    FinanceView,
    Snapshot,
    Transaction,
    TransactionDraft,
    TransactionKind,
)
from fintrack.reports import derivation, export
from fintrack.services.storage import (
    CorruptSnapshotError,
    InMemoryStorage,
    JsonFileStorage,
    SnapshotStorageInterface,
)
from fintrack.validation import (
    AmountParseError,
    InputValidationError,
    is_blank,
    missing_required_fields,
    parse_amount,
)


Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Store:
    """
    Holds and persists the tracker state.

    Args:
        storage: Backend the snapshot is read from and written to
        audit_logger: Audit sink; a structlog-backed logger by default
        key: Storage key; the configured key by default
        default_categories: Categories used when no snapshot exists
        clock: Returns the current time; injected by tests
    """

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        key: Optional[str] = None,
        default_categories: Optional[Sequence[str]] = None,
        clock: Optional[Clock] = None,
    ):
        if key is None:
            key = get_settings().storage.key
        if default_categories is None:
            default_categories = get_settings().app.default_categories_list

        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._key = key
        self._clock = clock or _utcnow

        self._transactions: list[Transaction] = []
        self._categories: list[str] = list(default_categories)
        self._goals: dict[str, Decimal] = {}
        self._last_id = 0

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def key(self) -> str:
        return self._key

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def goals(self) -> dict[str, Decimal]:
        return dict(self._goals)

    def snapshot(self) -> Snapshot:
        """The current state as a persistable snapshot."""
        return Snapshot(
            transactions=list(self._transactions),
            categories=list(self._categories),
            goals=dict(self._goals),
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> bool:
        """
        Replace in-memory state with the stored snapshot.

        Returns:
            True if a snapshot was found, False if state stayed at defaults

        Raises:
            CorruptSnapshotError: If the stored blob cannot be parsed
            StorageError: If the backend cannot be read
        """
        blob = self._storage.read(self._key)
        if blob is None:
            self._audit.log(AuditEventBuilder.snapshot_missing(self._key))
            return False

        dropped: list = []
        try:
            snapshot = Snapshot.from_blob(blob, dropped=dropped)
        except ValidationError as e:
            self._audit.log(AuditEventBuilder.snapshot_corrupt(self._key, str(e)))
            raise CorruptSnapshotError(self._key, str(e)) from e

        if dropped:
            self._audit.log(AuditEventBuilder.snapshot_rows_dropped(self._key, dropped))

        self._transactions = list(snapshot.transactions)
        self._categories = list(snapshot.categories)
        self._goals = dict(snapshot.goals)
        self._last_id = max((t.id for t in self._transactions), default=0)

        self._audit.log(AuditEventBuilder.snapshot_loaded(
            key=self._key,
            transaction_count=len(self._transactions),
            category_count=len(self._categories),
            goal_count=len(self._goals),
        ))
        return True

    def _persist(self) -> None:
        blob = self.snapshot().to_blob()
        self._storage.write(self._key, blob)
        self._audit.log(AuditEventBuilder.snapshot_saved(self._key, len(blob.encode("utf-8"))))

    def _next_id(self, now: datetime) -> int:
        """Epoch milliseconds, bumped past the last id so ids never repeat."""
        candidate = int(now.timestamp() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        kind: Union[TransactionKind, str],
        description: Optional[str],
        category: Optional[str],
        amount_text: Optional[str],
    ) -> Optional[Transaction]:
        """
        Record a new transaction.

        If description, amount or category is empty, nothing happens and
        None is returned.

        Raises:
            AmountParseError: If the amount text is not a valid amount
            InputValidationError: If the kind is not income or expense
        """
        missing = missing_required_fields(
            description=description,
            amount=amount_text,
            category=category,
        )
        if missing:
            self._audit.log(AuditEventBuilder.transaction_skipped(missing))
            return None

        try:
            amount = parse_amount(amount_text)
        except AmountParseError as e:
            self._audit.log(AuditEventBuilder.transaction_rejected(
                e.field, str(amount_text), e.message,
            ))
            raise

        try:
            kind = TransactionKind(kind)
        except ValueError:
            raise InputValidationError("kind", str(kind), "expected 'income' or 'expense'")

        now = self._clock()
        transaction = Transaction(
            id=self._next_id(now),
            kind=kind,
            description=description,
            category=category,
            amount=amount,
            timestamp=now,
        )
        self._transactions.append(transaction)
        self._persist()

        self._audit.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction.id,
            kind=transaction.kind.value,
            category=transaction.category,
            amount=str(transaction.amount),
        ))
        return transaction

    def submit_draft(self, draft: TransactionDraft) -> Optional[Transaction]:
        """
        Add a transaction from staged form input.

        The draft's text fields are cleared only when the add succeeds.
        """
        transaction = self.add_transaction(
            kind=draft.kind,
            description=draft.description,
            category=draft.category,
            amount_text=draft.amount_text,
        )
        if transaction is not None:
            draft.clear()
        return transaction

    def set_goal(self, category: str, value_text: Optional[str]) -> Optional[Decimal]:
        """
        Set or overwrite the goal of a category.

        Blank text removes the goal. The category does not have to be in
        the category set.

        Returns:
            The stored goal, or None if it was removed

        Raises:
            AmountParseError: If the text is not a valid amount
        """
        if is_blank(value_text):
            self._goals.pop(category, None)
            self._persist()
            self._audit.log(AuditEventBuilder.goal_cleared(category))
            return None

        value = parse_amount(value_text, field="goal")
        self._goals[category] = value
        self._persist()
        self._audit.log(AuditEventBuilder.goal_set(category, str(value)))
        return value

    def add_category(self, name: Optional[str]) -> bool:
        """
        Append a category to the set.

        Returns:
            False if the name is blank or already present
        """
        if is_blank(name):
            return False
        name = name.strip()
        if name in self._categories:
            return False

        self._categories.append(name)
        self._persist()
        self._audit.log(AuditEventBuilder.category_added(name))
        return True

    def replace_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Swap the whole transaction log for a new one."""
        previous_count = len(self._transactions)
        self._transactions = list(transactions)
        self._last_id = max([self._last_id] + [t.id for t in self._transactions])
        self._persist()
        self._audit.log(AuditEventBuilder.transactions_replaced(
            previous_count, len(self._transactions),
        ))

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def view(self, month_key: Optional[str] = "") -> FinanceView:
        """Filtered transactions, totals and category report for a month."""
        return derivation.build_view(
            self._transactions, self._categories, self._goals, month_key,
        )

    def available_months(self) -> list[str]:
        return derivation.available_months(self._transactions)

    def export_rows(
        self,
        month_key: Optional[str] = "",
        tz: Optional[tzinfo] = None,
        date_format: Optional[str] = None,
    ) -> Iterator[list[str]]:
        """Lazy export rows for the transactions of a month."""
        if date_format is None:
            date_format = get_settings().export.date_format
        filtered = derivation.filter_by_month(self._transactions, month_key)
        return derivation.export_rows(filtered, tz=tz, date_format=date_format)

    def csv_text(self, month_key: Optional[str] = "", tz: Optional[tzinfo] = None) -> str:
        """CSV export of a month as text, for offering a download. Not audited."""
        return export.export_csv_text(self.export_rows(month_key, tz=tz))

    def export_csv(
        self,
        target: Union[str, Path, TextIO],
        month_key: Optional[str] = "",
        tz: Optional[tzinfo] = None,
    ) -> int:
        """
        Write the CSV export of a month to a path or text stream.

        Returns:
            Number of transactions exported
        """
        count = export.write_csv(self.export_rows(month_key, tz=tz), target)
        target_name = str(target) if isinstance(target, (str, Path)) else "stream"
        self._audit.log(AuditEventBuilder.export_written(count, month_key or "", target_name))
        return count


def create_store(
    backend: Optional[str] = None,
    directory: Optional[Path] = None,
    load: bool = True,
) -> Store:
    """
    Factory function to create a store wired to the configured backend.

    Args:
        backend: 'file' or 'memory'; the configured backend by default
        directory: Directory for the file backend; the configured one by default
        load: Whether to load the stored snapshot right away

    Returns:
        A ready-to-use Store
    """
    settings = get_settings()
    backend = backend or settings.storage.backend

    if backend == "memory":
        storage: SnapshotStorageInterface = InMemoryStorage()
    elif backend == "file":
        storage = JsonFileStorage(directory or settings.storage.directory)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    store = Store(storage)
    if load:
        store.load()
    return store
