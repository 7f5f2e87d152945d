"""InMemoryStore — zero-config, dict-backed storage for development and testing."""

from __future__ import annotations

import copy
from collections import defaultdict
from threading import RLock

from defaults_store.stores.base import RawValue, Store


class InMemoryStore(Store):
    """In-memory store using nested dicts.  Data is lost on process exit.

    Container values are deep-copied on the way in and out, so mutating a
    value after ``set`` or after ``get`` never changes what is stored.
    Safe to share between event loops running in different threads.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._slots: dict[str, dict[str, RawValue]] = defaultdict(dict)

    async def get(self, namespace: str, key: str) -> RawValue | None:
        with self._lock:
            value = self._slots[namespace].get(key)
            return copy.deepcopy(value) if isinstance(value, (list, dict)) else value

    async def set(self, namespace: str, key: str, value: RawValue) -> None:
        if isinstance(value, (list, dict)):
            value = copy.deepcopy(value)
        with self._lock:
            self._slots[namespace][key] = value

    async def delete(self, namespace: str, key: str) -> None:
        with self._lock:
            self._slots[namespace].pop(key, None)

    async def exists(self, namespace: str, key: str) -> bool:
        with self._lock:
            return key in self._slots.get(namespace, {})
