"""Shared fixtures for FinTrack tests."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fintrack.audit import AuditLogger
from fintrack.models.transaction import Transaction, TransactionKind
from fintrack.services.storage import InMemoryStorage
from fintrack.store import Store


class RecordingLogger:
    """Stands in for a structlog logger and keeps every call."""

    def __init__(self):
        self.records = []

    def _record(self, level, event, **kwargs):
        self.records.append((level, event, kwargs))

    def debug(self, event, **kwargs):
        self._record("debug", event, **kwargs)

    def info(self, event, **kwargs):
        self._record("info", event, **kwargs)

    def warning(self, event, **kwargs):
        self._record("warning", event, **kwargs)

    def error(self, event, **kwargs):
        self._record("error", event, **kwargs)

    def event_types(self):
        return [kwargs["event_type"] for _, _, kwargs in self.records]


class FixedClock:
    """Returns a fixed instant until advanced."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def make_transaction():
    """Factory for transactions with sensible defaults."""
    counter = {"next_id": 1}

    def _make(
        kind="expense",
        amount="10",
        category="Food",
        description="Item",
        timestamp=datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc),
        id=None,
    ):
        if id is None:
            id = counter["next_id"]
            counter["next_id"] += 1
        return Transaction(
            id=id,
            kind=TransactionKind(kind),
            description=description,
            category=category,
            amount=Decimal(str(amount)),
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def recorder():
    return RecordingLogger()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, recorder, clock):
    return Store(
        storage,
        audit_logger=AuditLogger(recorder),
        key="test-key",
        default_categories=["Food", "Transport"],
        clock=clock,
    )
