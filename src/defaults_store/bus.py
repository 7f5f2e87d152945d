"""ChangeBus — in-process fan-out of setting changes, keyed by topic."""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
import weakref
from collections import defaultdict, deque
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from defaults_store.keys import Topic

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _identity(payload: Any) -> Any:
    return payload


def _snapshot(payload: Any) -> Any:
    return copy.deepcopy(payload) if isinstance(payload, (list, dict)) else payload


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


def _wake_threadsafe(waiter: asyncio.Future[None]) -> None:
    try:
        waiter.get_loop().call_soon_threadsafe(_wake, waiter)
    except RuntimeError:
        # the consumer's loop is closed; nobody is left to wake
        pass


class TopicLock:
    """Mutual exclusion for one topic, usable from any event loop or thread.

    :class:`asyncio.Lock` belongs to a single loop, so a UI loop and a
    background loop could not share it.  Here ownership is tracked under a
    :class:`threading.Lock` and handed to waiters in FIFO order, each woken
    on its own loop.
    """

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._locked = False
        self._waiters: deque[asyncio.Future[None]] = deque()

    def locked(self) -> bool:
        return self._locked

    async def acquire(self) -> bool:
        with self._mutex:
            if not self._locked:
                self._locked = True
                return True
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            with self._mutex:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
                    raise
            # ownership was already handed to us
            self.release()
            raise
        return True

    def release(self) -> None:
        with self._mutex:
            if not self._locked:
                raise RuntimeError("TopicLock is not acquired")
            if self._waiters:
                _wake_threadsafe(self._waiters.popleft())
            else:
                self._locked = False

    async def __aenter__(self) -> None:
        await self.acquire()

    async def __aexit__(self, *exc_info: object) -> None:
        self.release()


class Subscription(Generic[T]):
    """One subscriber's view of a topic: the current value, then every change.

    Iterate with ``async for``.  Each subscription owns an unbounded FIFO
    buffer, so a slow consumer never blocks the publisher or other
    subscribers.  Events may be published from any thread; the consumer is
    woken on the loop it is waiting in.  ``transform`` is applied when an
    event is enqueued, to a private copy of the payload.

    Use as an async context manager, or call :meth:`cancel`, to stop
    delivery.  Dropping the last reference has the same effect.
    """

    def __init__(
        self,
        bus: ChangeBus,
        topic: Topic,
        transform: Callable[[Any], T],
    ) -> None:
        self._bus = bus
        self._topic = topic
        self._transform = transform
        self._mutex = threading.Lock()
        self._items: deque[T] = deque()
        self._waiter: asyncio.Future[None] | None = None
        self._closed = False
        self._ref: weakref.ref[Subscription[T]] | None = None

    @property
    def topic(self) -> Topic:
        return self._topic

    @property
    def cancelled(self) -> bool:
        return self._closed

    def pending(self) -> int:
        """Number of events enqueued but not yet consumed."""
        with self._mutex:
            return len(self._items)

    def cancel(self) -> None:
        """Stop delivery.  No value is yielded after this returns.  Idempotent."""
        with self._mutex:
            if self._closed:
                return
            self._closed = True
            self._items.clear()
            waiter, self._waiter = self._waiter, None
        self._bus._unsubscribe(self)
        if waiter is not None:
            _wake_threadsafe(waiter)

    def _deliver(self, payload: Any) -> None:
        if self._closed:
            return
        item = self._transform(_snapshot(payload))
        with self._mutex:
            if self._closed:
                return
            self._items.append(item)
            waiter, self._waiter = self._waiter, None
        if waiter is not None:
            _wake_threadsafe(waiter)

    # ── async iteration ──────────────────────────────────────

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        while True:
            with self._mutex:
                if self._closed:
                    raise StopAsyncIteration
                if self._items:
                    return self._items.popleft()
                waiter = asyncio.get_running_loop().create_future()
                self._waiter = waiter
            try:
                await waiter
            finally:
                with self._mutex:
                    if self._waiter is waiter:
                        self._waiter = None

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.cancel()


class ChangeBus:
    """Publish/subscribe channel for setting changes.

    Independent of any store: the bus never reads or writes data itself.
    Callers provide the seed value when subscribing and the new payload when
    publishing.  Events for one topic reach each subscriber in publish order;
    there is no ordering across topics.  Every method may be called from
    any thread.

    :meth:`lock` hands out one :class:`TopicLock` per topic.  Holding it
    around "write then publish" and around "read then subscribe" keeps every
    subscriber's seed consistent with the live events that follow it.
    """

    def __init__(self) -> None:
        # reentrant: weakref callbacks may fire while the lock is held
        self._mutex = threading.RLock()
        self._subscribers: dict[Topic, list[weakref.ref[Subscription[Any]]]] = defaultdict(list)
        self._locks: dict[Topic, TopicLock] = {}

    def lock(self, topic: Topic) -> TopicLock:
        with self._mutex:
            lock = self._locks.get(topic)
            if lock is None:
                lock = self._locks[topic] = TopicLock()
            return lock

    def subscribe(
        self,
        topic: Topic,
        seed: Any,
        transform: Callable[[Any], T] | None = None,
    ) -> Subscription[T]:
        """Register a subscriber on *topic*, seeded with *seed* before any live event."""
        sub: Subscription[T] = Subscription(self, topic, transform or _identity)
        sub._deliver(seed)
        ref = weakref.ref(sub, lambda r, topic=topic: self._discard(topic, r))
        sub._ref = ref
        with self._mutex:
            self._subscribers[topic].append(ref)
        return sub

    def publish(self, topic: Topic, payload: Any) -> int:
        """Deliver *payload* to every live subscriber of *topic*, in subscription order.

        Each subscriber receives its own copy of list and dict payloads.
        Returns the number of subscribers the event was delivered to.
        """
        with self._mutex:
            refs = list(self._subscribers.get(topic, ()))
        delivered = 0
        for ref in refs:
            sub = ref()
            if sub is None:
                continue
            try:
                sub._deliver(payload)
            except Exception:
                logger.exception("Subscriber on %s failed to accept an event", topic)
                continue
            delivered += 1
        logger.debug("Published change on %s to %d subscriber(s)", topic, delivered)
        return delivered

    def subscriber_count(self, topic: Topic) -> int:
        with self._mutex:
            refs = list(self._subscribers.get(topic, ()))
        return sum(1 for ref in refs if ref() is not None)

    # ── internals ────────────────────────────────────────────

    def _unsubscribe(self, sub: Subscription[Any]) -> None:
        if sub._ref is not None:
            self._discard(sub.topic, sub._ref)

    def _discard(self, topic: Topic, ref: weakref.ref[Subscription[Any]]) -> None:
        with self._mutex:
            refs = self._subscribers.get(topic)
            if refs is None:
                return
            try:
                refs.remove(ref)
            except ValueError:
                return
            if not refs:
                del self._subscribers[topic]
