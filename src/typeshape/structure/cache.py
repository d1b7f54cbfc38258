"""Memoization of built structures, including failed attempts."""
import threading
from typing import Union

from ..models import TypeStructure


class _Tombstone:
    """Marker for "resolution was attempted and failed"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TOMBSTONE"

    def __bool__(self) -> bool:
        return False


TOMBSTONE = _Tombstone()

CachedEntry = Union[TypeStructure, _Tombstone]


class StructureCache:
    """Thread-safe map from a key to a finished structure or a tombstone.

    Entries never expire. Writes for the same key are last-writer-wins;
    rebuilding a type yields an equivalent structure, so no coordination
    beyond the map lock is needed.
    """

    def __init__(self):
        self._entries: dict[str, CachedEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CachedEntry | None:
        """Return the cached entry, or None on a miss."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CachedEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def tombstone(self, key: str) -> None:
        self.put(key, TOMBSTONE)

    def is_tombstoned(self, key: str) -> bool:
        return self.get(key) is TOMBSTONE

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
