"""Typed accessors — the public get/set/remove/subscribe surface for one key."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

from defaults_store.bus import ChangeBus, Subscription
from defaults_store.codec import Codec, IdentityCodec, JsonCodec
from defaults_store.exceptions import DecodeError, EncodeError, StoreError
from defaults_store.keys import AccessorKind, DefaultsKey, Topic
from defaults_store.stores.base import RawValue, Store

logger = logging.getLogger(__name__)

V = TypeVar("V")


class Defaults(Generic[V]):
    """Accessor for a primitive setting stored as-is.

    An accessor is a lightweight handle: it holds its key, codec, store and
    bus, and nothing else.  It caches no value and constructing one never
    touches storage, so any number of instances for the same key are
    interchangeable.

    Failures never escape as exceptions from the value paths:

    * an unreadable stored payload reads as ``None`` (and is logged);
    * a value that cannot be encoded, or a store write that fails, leaves the
      slot untouched, publishes nothing and makes :meth:`set` return ``False``.

    Parameters:
        key:   Member of :attr:`keys` naming the setting.
        store: Backing store holding the raw value.
        bus:   Change bus carrying notifications for this accessor kind.
    """

    kind: ClassVar[AccessorKind] = AccessorKind.PRIMITIVE
    keys: ClassVar[type[StrEnum]] = DefaultsKey

    def __init__(self, key: StrEnum, *, store: Store, bus: ChangeBus) -> None:
        if not isinstance(key, self.keys):
            raise TypeError(f"{key!r} is not a member of {self.keys.__name__}")
        self._key = key
        self._store = store
        self._bus = bus
        self._codec: Codec[V] = self._make_codec()

    def _make_codec(self) -> Codec[V]:
        return IdentityCodec()

    @property
    def key(self) -> StrEnum:
        return self._key

    @property
    def topic(self) -> Topic:
        return Topic(self.kind, self._key)

    @property
    def codec(self) -> Codec[V]:
        return self._codec

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.topic})"

    # ── value access ─────────────────────────────────────────

    async def get(self) -> V | None:
        """Return the current value, or ``None`` if absent or unreadable."""
        raw = await self._store.get(self.topic.namespace, self.topic.slot)
        return self._decode(raw)

    async def exists(self) -> bool:
        """``True`` if the slot holds a payload, even one that no longer decodes."""
        return await self._store.exists(self.topic.namespace, self.topic.slot)

    async def set(self, value: V | None) -> bool:
        """Store *value* and notify subscribers.  ``None`` is the same as :meth:`remove`.

        Returns ``True`` when the value was written and published.
        """
        if value is None:
            return await self.remove()

        try:
            raw = self._codec.encode(value)
            # refuse to write anything get() could not read back
            self._codec.decode(raw)
        except (EncodeError, DecodeError) as exc:
            logger.warning("Not storing %s: %s", self.topic, exc)
            return False

        topic = self.topic
        async with self._bus.lock(topic):
            try:
                await self._store.set(topic.namespace, topic.slot, raw)
            except StoreError:
                logger.exception("Write to %s failed", topic)
                return False
            self._bus.publish(topic, raw)
        return True

    async def remove(self) -> bool:
        """Clear the slot and publish absence, whether or not a value was present."""
        topic = self.topic
        async with self._bus.lock(topic):
            try:
                await self._store.delete(topic.namespace, topic.slot)
            except StoreError:
                logger.exception("Removal of %s failed", topic)
                return False
            self._bus.publish(topic, None)
        return True

    async def subscribe(self) -> Subscription[V | None]:
        """Return a stream yielding the current value, then every later change."""
        topic = self.topic
        async with self._bus.lock(topic):
            raw = await self._store.get(topic.namespace, topic.slot)
            return self._bus.subscribe(topic, raw, transform=self._decode)

    # ── bulk ─────────────────────────────────────────────────

    @classmethod
    async def remove_all(cls, *, store: Store, bus: ChangeBus) -> list[StrEnum]:
        """Remove every key of this accessor kind, e.g. on sign-out.

        Each key is handled on its own; a failure is logged and the loop
        moves on.  Returns the keys that could not be removed.
        """
        failed: list[StrEnum] = []
        for key in cls.keys:
            try:
                removed = await cls(key, store=store, bus=bus).remove()
            except Exception:
                logger.exception("Could not reset %s:%s", cls.kind, key)
                removed = False
            if not removed:
                failed.append(key)
        if failed:
            logger.warning(
                "Reset of %s left %d key(s) behind: %s",
                cls.kind,
                len(failed),
                ", ".join(str(k) for k in failed),
            )
        return failed

    # ── internals ────────────────────────────────────────────

    def _decode(self, raw: RawValue | None) -> V | None:
        if raw is None:
            return None
        try:
            return self._codec.decode(raw)
        except DecodeError as exc:
            logger.warning("Ignoring unreadable value in %s: %s", self.topic, exc)
            return None


class CodableDefaults(Defaults[V]):
    """Accessor for a structured setting serialized through :class:`JsonCodec`.

    Lives in its own namespace, so it never sees the primitive value stored
    under the same key name.

    Parameters:
        key:        Member of :attr:`keys` naming the setting.
        value_type: Type every value is validated against, typically a
                    pydantic model.  Only :meth:`remove` works without one.
        store:      Backing store holding the serialized value.
        bus:        Change bus carrying notifications for this accessor kind.
    """

    kind: ClassVar[AccessorKind] = AccessorKind.STRUCTURED

    def __init__(
        self,
        key: StrEnum,
        value_type: Any = Any,
        *,
        store: Store,
        bus: ChangeBus,
    ) -> None:
        self._value_type = value_type
        super().__init__(key, store=store, bus=bus)

    def _make_codec(self) -> Codec[V]:
        return JsonCodec(self._value_type)

    @property
    def value_type(self) -> Any:
        return self._value_type
