"""DefaultsManager — wires one store and one bus into accessors."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from defaults_store.accessor import CodableDefaults, Defaults
from defaults_store.bus import ChangeBus
from defaults_store.stores.memory import InMemoryStore

if TYPE_CHECKING:
    from defaults_store.stores.base import Store


class DefaultsManager:
    """Holds the shared store and change bus and hands out accessors.

    Accessors are cheap and stateless, so create one wherever a setting is
    needed instead of keeping them around.

    Parameters:
        store: Persistence backend shared by every accessor.  Defaults to
               :class:`InMemoryStore` when omitted.
        bus:   Change bus shared by every accessor.  A fresh one is created
               when omitted.
    """

    def __init__(self, store: Store | None = None, bus: ChangeBus | None = None) -> None:
        self._store: Store = store or InMemoryStore()
        self._bus: ChangeBus = bus or ChangeBus()

    # ── accessors ────────────────────────────────────────────

    def defaults(self, key: StrEnum) -> Defaults[Any]:
        """Primitive accessor for *key*."""
        return Defaults(key, store=self._store, bus=self._bus)

    def codable(self, value_type: Any, key: StrEnum) -> CodableDefaults[Any]:
        """Structured accessor for *key*, validating against *value_type*."""
        return CodableDefaults(key, value_type, store=self._store, bus=self._bus)

    # ── lifecycle ────────────────────────────────────────────

    async def remove_all(self) -> list[str]:
        """Clear every primitive and structured setting (sign-out / reset).

        Returns ``"<kind>:<key>"`` for each slot that could not be cleared.
        """
        failed: list[str] = []
        for accessor_cls in (Defaults, CodableDefaults):
            keys = await accessor_cls.remove_all(store=self._store, bus=self._bus)
            failed.extend(f"{accessor_cls.kind}:{key}" for key in keys)
        return failed

    async def close(self) -> None:
        await self._store.close()

    @property
    def store(self) -> Store:
        return self._store

    @property
    def bus(self) -> ChangeBus:
        return self._bus
