"""Backing stores for persisted settings."""

from defaults_store.stores.base import RawValue, Store
from defaults_store.stores.memory import InMemoryStore
from defaults_store.stores.sqlite import SQLiteStore

__all__ = ["InMemoryStore", "RawValue", "SQLiteStore", "Store"]
