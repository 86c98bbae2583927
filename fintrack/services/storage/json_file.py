"""
JSON File Storage Implementation

Local durable storage: one file per key inside a directory, the desktop
equivalent of a browser's local key/value store.

TRADEOFFS:
- Whole-file overwrite on every write, no partial-write protection
- No locking, so only one process may use a directory at a time
"""

import re
from pathlib import Path
from typing import Optional

from fintrack.config import get_settings
from fintrack.services.storage.interface import (
    SnapshotStorageInterface,
    StorageError,
)


_VALID_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class JsonFileStorage(SnapshotStorageInterface):
    """
    Stores each key as `<directory>/<key>.json`.

    The directory is created on first write.
    """

    def __init__(self, directory: Optional[Path] = None):
        if directory is None:
            directory = get_settings().storage.directory
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Resolve the file backing a key."""
        if not _VALID_KEY.match(key) or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(blob, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
