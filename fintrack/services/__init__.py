"""Services package."""

from fintrack.services.storage import (
    CorruptSnapshotError,
    InMemoryStorage,
    JsonFileStorage,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "CorruptSnapshotError",
    "InMemoryStorage",
    "JsonFileStorage",
    "SnapshotStorageInterface",
    "StorageError",
]
