"""Store protocol — raw key-value persistence underneath the accessors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TypeAlias

RawValue: TypeAlias = str | int | float | bool | bytes | list[Any] | dict[str, Any]
"""Anything a store can hold natively.  Codecs translate typed values to this."""


class Store(ABC):
    """Abstract base for all storage backends.

    Values live in slots addressed by ``(namespace, key)``.  Accessors use
    their kind as the namespace and their key name as the key.  The store is
    agnostic to what is being stored and knows nothing about change
    notification.

    Implementations must tolerate concurrent calls from several tasks and
    threads.  Failures may be reported as :class:`~defaults_store.exceptions.StoreError`.
    """

    @abstractmethod
    async def get(self, namespace: str, key: str) -> RawValue | None:
        """Return the stored value, or ``None`` if not found."""
        ...

    @abstractmethod
    async def set(self, namespace: str, key: str, value: RawValue) -> None:
        """Create or overwrite a value."""
        ...

    @abstractmethod
    async def delete(self, namespace: str, key: str) -> None:
        """Delete a value.  No-op if the key does not exist."""
        ...

    @abstractmethod
    async def exists(self, namespace: str, key: str) -> bool:
        """Return ``True`` if the key exists in the namespace."""
        ...

    async def close(self) -> None:
        """Release any held resources.  Default is a no-op."""
        return None
