"""
Workout collection and its persistence bridge.

The collection is the authoritative, append-only list of records for one
session. Every append rewrites the whole list under a single store key.
"""

import json
import logging
from typing import Iterator, List, Optional

from mapty_mcp.api.model import InvalidInput, WorkoutRecord, from_dict, to_dict
from mapty_mcp.sdk.store import KeyValueStore, StoreWriteError
from mapty_mcp.sdk.types import STORE_KEY

logger = logging.getLogger(__name__)


class CorruptStore(ValueError):
    """The stored collection is unreadable or breaks record invariants."""


def serialize(records) -> str:
    return json.dumps([to_dict(r) for r in records])


def deserialize(raw: str) -> List[WorkoutRecord]:
    """Parse a stored collection.

    Raises:
        CorruptStore: If the text is not a JSON array of valid records
            with unique ids
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise CorruptStore(f"Stored workouts are not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptStore("Stored workouts must be a JSON array")

    records = []
    seen = set()
    for index, item in enumerate(data):
        try:
            record = from_dict(item)
        except InvalidInput as e:
            raise CorruptStore(f"Stored workout #{index} is invalid: {e}") from e
        if record.id in seen:
            raise CorruptStore(f"Stored workout #{index} reuses id {record.id}")
        seen.add(record.id)
        records.append(record)
    return records


class WorkoutCollection:
    """Ordered, append-only set of workouts backed by a key-value store."""

    def __init__(self, store: KeyValueStore, key: str = STORE_KEY):
        self._store = store
        self._key = key
        self._records: List[WorkoutRecord] = []
        self._loaded = False
        self._persisted = True

    @property
    def records(self) -> tuple:
        return tuple(self._records)

    @property
    def is_loaded(self) -> bool:
        """True once memory holds the authoritative list (restored or cleared)."""
        return self._loaded

    @property
    def is_persisted(self) -> bool:
        """Whether the last write to the store succeeded."""
        return self._persisted

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[WorkoutRecord]:
        return iter(tuple(self._records))

    def find(self, record_id: str) -> Optional[WorkoutRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def append(self, record: WorkoutRecord) -> bool:
        """Add a record and persist the whole collection.

        Returns:
            True if the store write succeeded

        Raises:
            ValueError: If a record with the same id is already present
        """
        if self.find(record.id) is not None:
            raise ValueError(f"Workout id {record.id} is already in the collection")
        self._records.append(record)
        return self._persist()

    def _persist(self) -> bool:
        try:
            self._store.set_item(self._key, serialize(self._records))
        except (StoreWriteError, OSError) as e:
            # Memory stays authoritative for the rest of the session
            logger.warning(f"Failed to persist {len(self._records)} workouts: {e}")
            self._persisted = False
        else:
            self._persisted = True
        return self._persisted

    def restore(self) -> List[WorkoutRecord]:
        """Replace the in-memory list with the stored one.

        Returns:
            The restored records (empty if nothing is stored)

        Raises:
            CorruptStore: If the stored value cannot be read back; the
                in-memory list is left untouched
        """
        raw = self._store.get_item(self._key)
        if raw is None:
            self._loaded = True
            return []
        records = deserialize(raw)
        self._records = records
        self._loaded = True
        return list(records)

    def discard(self) -> bool:
        """Drop the in-memory list and the stored value.

        Memory is cleared even when the store refuses the removal.

        Returns:
            True if the stored value was removed
        """
        self._records = []
        self._loaded = True
        try:
            self._store.remove_item(self._key)
        except (StoreWriteError, OSError) as e:
            logger.warning(f"Failed to clear stored workouts: {e}")
            self._persisted = False
        else:
            self._persisted = True
        return self._persisted

    def reset(self) -> bool:
        """Clear the persisted workouts; the caller starts a fresh session."""
        cleared = self.discard()
        if cleared:
            logger.info("Workout store cleared")
        return cleared
