"""
Abstract Storage Interface

The store persists one opaque blob under one key, the way a browser
key/value store would. Backends only move strings; serialization of the
snapshot belongs to the store.

Keeping the interface this small lets tests use the in-memory backend
and lets the durable backend be swapped without touching the store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot storage.

    Any storage implementation (local files, in-memory, a remote
    key/value service) must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored blob, or None if nothing was ever written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, blob: str) -> None:
        """
        Overwrite the blob stored under a key.

        Args:
            key: Storage key
            blob: Serialized snapshot

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptSnapshotError(StorageError):
    """The stored blob could not be parsed into a snapshot."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Snapshot under '{key}' is corrupt: {reason}")
