"""
Key-value store collaborators.

A localStorage-like interface: string keys, string values, whole-value
replacement. The workout collection only ever touches one key.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StoreWriteError(Exception):
    """A value could not be written to the store (e.g. quota exceeded)."""


class KeyValueStore:
    """Interface for the persistence collaborator."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store, lost when the process ends."""

    def __init__(self, quota: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self._quota = quota

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota is not None and len(value) > self._quota:
            raise StoreWriteError(
                f"Value for '{key}' exceeds quota ({len(value)} > {self._quota} chars)"
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStore(KeyValueStore):
    """
    Store backed by a single JSON file mapping key -> string value.

    The file is re-read on every access so several sessions sharing the
    same path see each other's writes.
    """

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable store file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self._path}: expected a JSON object")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(data, f)
        except IOError as e:
            raise StoreWriteError(f"Failed to write {self._path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
