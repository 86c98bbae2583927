"""
Storage Services Package

Provides the abstract snapshot storage interface and its implementations.
Local JSON files are the durable backend; the in-memory backend serves tests.
"""

from fintrack.services.storage.interface import (
    CorruptSnapshotError,
    SnapshotStorageInterface,
    StorageError,
)
from fintrack.services.storage.json_file import JsonFileStorage
from fintrack.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "SnapshotStorageInterface",
    # Exceptions
    "CorruptSnapshotError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
