"""
Durable key/value storage used to persist the query cache between restarts.

Storage behaves like browser local storage: string keys, string values,
whole values replaced on every write.
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger("cache.storage")


class StorageError(Exception):
    """Raised when the underlying storage cannot be read or written."""


class KeyValueStorage(Protocol):
    """
    Interface for durable string storage.

    Implementations:
    - JsonFileStorage: one JSON document on local disk
    - MemoryStorage: process memory only (tests, disabled persistence)
    """

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage. ``fail_writes`` simulates a full or disabled store."""

    def __init__(self, fail_writes: bool = False):
        self._items: Dict[str, str] = {}
        self.fail_writes = fail_writes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("Storage quota exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError("Storage quota exceeded")
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Storage backed by a single JSON file.

    Each write rewrites the file through a temp file and ``os.replace`` so a
    crash mid-write never leaves a truncated document behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(items, dict):
            raise StorageError(f"Unexpected storage format in {self.path}")
        return items

    def _write_all(self, items: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read_all()
            items[key] = value
            self._write_all(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read_all()
            if items.pop(key, None) is not None:
                self._write_all(items)
                logger.debug(f"Removed {key} from {self.path}")
