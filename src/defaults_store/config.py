"""Store configuration and the factory that turns it into a backend."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from defaults_store.exceptions import StoreConfigError
from defaults_store.stores import InMemoryStore, SQLiteStore, Store


class StoreConfig(BaseModel):
    """Which backing store to use.

    Attributes:
        type: Store type ("memory" or "sqlite")
        path: Path to SQLite database file (for sqlite type)
    """

    type: Literal["memory", "sqlite"] = "memory"
    path: str = ""


def create_store(config: StoreConfig) -> Store:
    """Build the store described by *config*.

    Raises:
        StoreConfigError: If a sqlite store has no ``path``.
    """
    if config.type == "sqlite":
        if not config.path:
            raise StoreConfigError("sqlite", "'path' is required")
        return SQLiteStore(config.path)
    return InMemoryStore()
