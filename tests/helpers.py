"""Test doubles and helpers shared across the suite."""

from __future__ import annotations

from pydantic import BaseModel

from defaults_store.exceptions import StoreError
from defaults_store.stores import InMemoryStore


class UserProfile(BaseModel):
    name: str
    email: str
    age: int | None = None


class SpyStore(InMemoryStore):
    """In-memory store that records every call."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str, str]] = []

    async def get(self, namespace, key):
        self.calls.append(("get", namespace, key))
        return await super().get(namespace, key)

    async def set(self, namespace, key, value):
        self.calls.append(("set", namespace, key))
        await super().set(namespace, key, value)

    async def delete(self, namespace, key):
        self.calls.append(("delete", namespace, key))
        await super().delete(namespace, key)


class FailingStore(InMemoryStore):
    """In-memory store whose writes fail for selected keys."""

    def __init__(self, *failing_keys: str) -> None:
        super().__init__()
        self.failing_keys = set(failing_keys)

    async def set(self, namespace, key, value):
        if key in self.failing_keys:
            raise StoreError("set", f"disk full writing {key}")
        await super().set(namespace, key, value)

    async def delete(self, namespace, key):
        if key in self.failing_keys:
            raise StoreError("delete", f"disk full removing {key}")
        await super().delete(namespace, key)


async def drain(sub):
    """Consume every event already queued on *sub*."""
    return [await anext(sub) for _ in range(sub.pending())]
