"""Tests for ChangeBus and Subscription."""

import asyncio
import gc
import threading

import pytest

from defaults_store import AccessorKind, DefaultsKey, Topic
from defaults_store.bus import TopicLock
from tests.helpers import drain

LOCALE = Topic(AccessorKind.PRIMITIVE, DefaultsKey.PREFERRED_LOCALE)
COUNT = Topic(AccessorKind.PRIMITIVE, DefaultsKey.LAUNCH_COUNT)


async def test_seed_comes_first(bus):
    sub = bus.subscribe(LOCALE, "en-US")
    bus.publish(LOCALE, "de-DE")
    assert await anext(sub) == "en-US"
    assert await anext(sub) == "de-DE"


async def test_absent_seed(bus):
    sub = bus.subscribe(LOCALE, None)
    assert await drain(sub) == [None]


async def test_fifo_without_coalescing(bus):
    sub = bus.subscribe(COUNT, None)
    for n in (1, 2, 2, 3):
        bus.publish(COUNT, n)
    bus.publish(COUNT, None)
    assert await drain(sub) == [None, 1, 2, 2, 3, None]


async def test_each_subscriber_seeded_independently(bus):
    first = bus.subscribe(COUNT, 1)
    bus.publish(COUNT, 2)
    second = bus.subscribe(COUNT, 2)
    bus.publish(COUNT, 3)

    assert await drain(first) == [1, 2, 3]
    assert await drain(second) == [2, 3]


async def test_publish_returns_delivery_count(bus):
    assert bus.publish(COUNT, 1) == 0
    subs = [bus.subscribe(COUNT, None) for _ in range(3)]
    assert bus.publish(COUNT, 2) == 3
    assert bus.subscriber_count(COUNT) == len(subs)


async def test_topics_are_isolated(bus):
    locale = bus.subscribe(LOCALE, None)
    bus.publish(COUNT, 5)
    assert await drain(locale) == [None]


async def test_same_key_different_kind_is_another_topic(bus):
    structured = Topic(AccessorKind.STRUCTURED, DefaultsKey.PREFERRED_LOCALE)
    sub = bus.subscribe(structured, None)
    bus.publish(LOCALE, "fr-FR")
    assert await drain(sub) == [None]


async def test_cancel_stops_delivery(bus):
    sub = bus.subscribe(COUNT, 0)
    bus.publish(COUNT, 1)
    sub.cancel()
    bus.publish(COUNT, 2)

    assert sub.cancelled
    assert sub.pending() == 0
    with pytest.raises(StopAsyncIteration):
        await anext(sub)


async def test_cancel_does_not_affect_other_subscribers(bus):
    keep = bus.subscribe(COUNT, 0)
    drop = bus.subscribe(COUNT, 0)
    drop.cancel()
    bus.publish(COUNT, 1)

    assert await drain(keep) == [0, 1]
    assert bus.subscriber_count(COUNT) == 1


async def test_cancel_is_idempotent(bus):
    sub = bus.subscribe(COUNT, 0)
    sub.cancel()
    sub.cancel()
    assert bus.subscriber_count(COUNT) == 0


async def test_cancel_wakes_waiting_consumer(bus):
    sub = bus.subscribe(COUNT, 0)
    assert await anext(sub) == 0

    waiter = asyncio.create_task(sub.__anext__())
    await asyncio.sleep(0)
    assert not waiter.done()

    sub.cancel()
    with pytest.raises(StopAsyncIteration):
        await waiter


async def test_async_for_ends_on_cancel(bus):
    sub = bus.subscribe(COUNT, 0)
    bus.publish(COUNT, 1)
    seen = []
    async for value in sub:
        seen.append(value)
        if value == 1:
            sub.cancel()
    assert seen == [0, 1]


async def test_context_manager_cancels(bus):
    async with bus.subscribe(COUNT, 0) as sub:
        assert await anext(sub) == 0
    assert sub.cancelled
    assert bus.subscriber_count(COUNT) == 0


async def test_dropped_subscription_is_released(bus):
    sub = bus.subscribe(COUNT, 0)
    assert bus.subscriber_count(COUNT) == 1
    del sub
    gc.collect()
    assert bus.subscriber_count(COUNT) == 0
    assert bus.publish(COUNT, 1) == 0


async def test_transform_applies_to_seed_and_events(bus):
    sub = bus.subscribe(COUNT, 1, transform=lambda n: None if n is None else n * 10)
    bus.publish(COUNT, 2)
    bus.publish(COUNT, None)
    assert await drain(sub) == [10, 20, None]


async def test_failing_subscriber_does_not_block_others(bus):
    def picky(payload):
        if payload == "boom":
            raise ValueError("cannot take it")
        return payload

    fragile = bus.subscribe(LOCALE, "ok", transform=picky)
    sturdy = bus.subscribe(LOCALE, "ok")

    assert bus.publish(LOCALE, "boom") == 1
    assert await drain(sturdy) == ["ok", "boom"]
    assert await drain(fragile) == ["ok"]


async def test_lock_is_per_topic(bus):
    assert bus.lock(COUNT) is bus.lock(COUNT)
    assert bus.lock(COUNT) is not bus.lock(LOCALE)


def test_topic_address():
    assert LOCALE.namespace == "defaults"
    assert LOCALE.slot == "preferred_locale"
    assert str(LOCALE) == "defaults:preferred_locale"
    assert Topic(AccessorKind.PRIMITIVE, DefaultsKey.PREFERRED_LOCALE) == LOCALE


async def test_event_payloads_are_copied_per_subscriber(bus):
    first = bus.subscribe(COUNT, None)
    second = bus.subscribe(COUNT, None)
    payload = {"n": 1}
    bus.publish(COUNT, payload)
    payload["n"] = 2

    mine = (await drain(first))[-1]
    mine["n"] = 3
    assert await drain(second) == [None, {"n": 1}]


async def test_publish_from_thread_wakes_waiting_consumer(bus):
    sub = bus.subscribe(COUNT, 0)
    assert await anext(sub) == 0

    publisher = threading.Timer(0.05, bus.publish, args=(COUNT, 1))
    publisher.start()
    try:
        assert await asyncio.wait_for(anext(sub), timeout=2) == 1
    finally:
        publisher.join()


async def test_cancel_from_thread_ends_iteration(bus):
    sub = bus.subscribe(COUNT, 0)
    assert await anext(sub) == 0

    canceller = threading.Timer(0.05, sub.cancel)
    canceller.start()
    try:
        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(anext(sub), timeout=2)
    finally:
        canceller.join()


# ── TopicLock ────────────────────────────────────────────────


async def test_topic_lock_is_fifo():
    lock = TopicLock()
    order = []

    async def worker(label):
        async with lock:
            order.append(label)
            await asyncio.sleep(0)

    await lock.acquire()
    tasks = [asyncio.create_task(worker(n)) for n in range(3)]
    await asyncio.sleep(0)
    lock.release()
    await asyncio.gather(*tasks)

    assert order == [0, 1, 2]
    assert not lock.locked()


async def test_cancelled_waiter_does_not_hold_the_lock():
    lock = TopicLock()
    await lock.acquire()
    waiter = asyncio.create_task(lock.acquire())
    await asyncio.sleep(0)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    lock.release()
    assert not lock.locked()


def test_release_unlocked_topic_lock():
    with pytest.raises(RuntimeError):
        TopicLock().release()


def test_topic_lock_excludes_across_threads():
    lock = TopicLock()
    inside = []
    overlaps = []

    async def critical_sections():
        for _ in range(50):
            async with lock:
                if inside:
                    overlaps.append(True)
                inside.append(True)
                await asyncio.sleep(0)
                inside.pop()

    threads = [threading.Thread(target=asyncio.run, args=(critical_sections(),)) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert not lock.locked()
