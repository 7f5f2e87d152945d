"""Tests for SQLiteStore."""

import pytest

from defaults_store import ChangeBus, CodableDefaults, Defaults, DefaultsKey
from defaults_store.exceptions import StoreError
from defaults_store.stores import SQLiteStore
from tests.helpers import UserProfile, drain


@pytest.fixture
async def store(tmp_path):
    s = SQLiteStore(str(tmp_path / "defaults.db"))
    yield s
    await s.close()


async def test_get_nonexistent(store):
    assert await store.get("ns", "key") is None


@pytest.mark.parametrize(
    "value",
    ["text", 42, 2.5, True, False, b"\x00raw\xff", [1, "two"], {"a": {"b": [1, 2]}}],
)
async def test_values_keep_their_type(store, value):
    await store.set("ns", "k", value)
    result = await store.get("ns", "k")
    assert result == value
    assert type(result) is type(value)


async def test_overwrite_changes_encoding(store):
    await store.set("ns", "k", b"bytes")
    await store.set("ns", "k", "text")
    assert await store.get("ns", "k") == "text"


async def test_delete_and_exists(store):
    await store.set("ns", "k", 1)
    assert await store.exists("ns", "k")
    await store.delete("ns", "k")
    assert not await store.exists("ns", "k")
    await store.delete("ns", "k")  # no-op


async def test_namespace_isolation(store):
    await store.set("ns1", "k", 1)
    await store.set("ns2", "k", 2)
    assert await store.get("ns1", "k") == 1
    assert await store.get("ns2", "k") == 2


async def test_persists_across_connections(tmp_path):
    path = str(tmp_path / "persist.db")
    first = SQLiteStore(path)
    await first.set("defaults", "launch_count", 7)
    await first.close()

    second = SQLiteStore(path)
    try:
        assert await second.get("defaults", "launch_count") == 7
    finally:
        await second.close()


async def test_unsupported_value_raises_store_error(store):
    with pytest.raises(StoreError) as exc_info:
        await store.set("ns", "k", object())
    assert exc_info.value.operation == "set"
    assert await store.get("ns", "k") is None


async def test_unopenable_path_raises_store_error(tmp_path):
    s = SQLiteStore(str(tmp_path / "missing-dir" / "db.sqlite"))
    with pytest.raises(StoreError):
        await s.get("ns", "k")


async def test_accessors_on_sqlite(store, alice):
    bus = ChangeBus()
    profile = CodableDefaults(DefaultsKey.USER_PROFILE, UserProfile, store=store, bus=bus)
    count = Defaults(DefaultsKey.LAUNCH_COUNT, store=store, bus=bus)
    sub = await profile.subscribe()

    assert await profile.set(alice)
    assert await count.set(12)
    assert await profile.get() == alice
    assert await count.get() == 12
    assert await drain(sub) == [None, alice]

    await store.set("defaults_codable", "user_profile", b'{"legacy": true}')
    assert await profile.get() is None


async def test_exists_wraps_driver_errors(store):
    db = await store._connect()
    await db.execute("DROP TABLE defaults_store")
    await db.commit()

    with pytest.raises(StoreError) as exc_info:
        await store.exists("ns", "k")
    assert exc_info.value.operation == "exists"
