"""Shared test fixtures."""

import pytest

from defaults_store import ChangeBus, DefaultsManager
from defaults_store.stores import InMemoryStore
from tests.helpers import UserProfile


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def bus():
    return ChangeBus()


@pytest.fixture
def manager(store, bus):
    return DefaultsManager(store=store, bus=bus)


@pytest.fixture
def alice():
    return UserProfile(name="Alice", email="alice@acme.com", age=34)


@pytest.fixture
def bob():
    return UserProfile(name="Bob", email="bob@acme.com")
