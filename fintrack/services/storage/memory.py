"""In-memory snapshot storage, for tests and throwaway sessions."""

from typing import Optional

from fintrack.services.storage.interface import SnapshotStorageInterface


class InMemoryStorage(SnapshotStorageInterface):
    """Keeps blobs in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob
        self.write_count += 1
