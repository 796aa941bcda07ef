"""Pytest configuration and fixtures for keycloak-discovery tests."""

import os
from datetime import datetime, timedelta, timezone
from typing import List, Sequence
from unittest.mock import AsyncMock

import pytest

from keycloak_discovery.core.exceptions import DirectoryUnavailableError, NameLookupError
from keycloak_discovery.features.directory.entities.directory_entry import DirectoryEntry
from keycloak_discovery.features.directory.repositories.in_memory_directory_store import (
    InMemoryDirectoryStore,
)
from keycloak_discovery.features.membership.entities.node_identity import NodeIdentity
from keycloak_discovery.features.membership.services.membership_agent import MembershipAgent
from keycloak_discovery.features.resolution.adapters.static_name_resolver import StaticNameResolver
from keycloak_discovery.features.resolution.services.address_resolver import AddressResolver
from keycloak_discovery.utils.retry import RetryPolicy

EPOCH = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = EPOCH):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class SleepRecorder:
    """Async sleep replacement recording requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyNameResolver:
    """Fails the first ``failures`` lookups, then returns ``addresses``."""

    def __init__(self, addresses: Sequence[str], failures: int = 0):
        self.addresses = list(addresses)
        self.failures = failures
        self.calls = 0

    async def lookup(self, name: str) -> List[str]:
        self.calls += 1
        if self.calls <= self.failures:
            raise NameLookupError(name, "NXDOMAIN")
        return list(self.addresses)


class FlakyDirectoryStore:
    """Wraps a store and fails every operation while ``down`` is set."""

    def __init__(self, inner):
        self.inner = inner
        self.down = False
        self.calls: List[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.down:
            raise DirectoryUnavailableError(operation, "connection refused")

    async def initialize(self):
        self._check("initialize")
        return await self.inner.initialize()

    async def upsert(self, entry):
        self._check("upsert")
        return await self.inner.upsert(entry)

    async def scan_live(self, staleness_window):
        self._check("scan")
        return await self.inner.scan_live(staleness_window)

    async def scan_all(self):
        self._check("scan")
        return await self.inner.scan_all()

    async def delete_stale(self, staleness_window):
        self._check("prune")
        return await self.inner.delete_stale(staleness_window)

    async def delete_entry(self, node_id, incarnation, older_than=None):
        self._check("delete")
        return await self.inner.delete_entry(node_id, incarnation, older_than=older_than)

    async def next_incarnation(self, node_id):
        self._check("incarnation allocation")
        return await self.inner.next_incarnation(node_id)

    async def reset(self):
        self._check("reset")
        return await self.inner.reset()

    async def close(self):
        await self.inner.close()


@pytest.fixture
def mock_database_repository():
    """Mock database manager for testing."""
    mock_db = AsyncMock()
    mock_db.fetchrow = AsyncMock()
    mock_db.fetch = AsyncMock()
    mock_db.fetchval = AsyncMock()
    mock_db.execute = AsyncMock()
    mock_db.close_pool = AsyncMock()
    return mock_db


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def in_memory_store(clock):
    """In-memory directory driven by the manual clock."""
    return InMemoryDirectoryStore(clock=clock)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def static_resolver():
    return StaticNameResolver({
        "kc-0": ["10.0.0.10"],
        "kc-1": ["10.0.0.11"],
        "kc-2": ["10.0.0.12"],
    })


@pytest.fixture
def make_entry(clock):
    """Factory for directory entries stamped by the manual clock."""
    def _make(node_id: str = "kc-0", incarnation: int = 1, address: str = "10.0.0.10",
              port: int = 7800, age: float = 0.0) -> DirectoryEntry:
        return DirectoryEntry(
            node_id=node_id,
            incarnation=incarnation,
            address=address,
            port=port,
            last_seen_at=clock() - timedelta(seconds=age),
        )
    return _make


@pytest.fixture
def make_agent(static_resolver, in_memory_store, sleep_recorder):
    """Factory for agents sharing one directory and one name resolver."""
    def _make(node_id: str, store=None, name_resolver=None, port: int = 7800,
              max_retries: int = 3, **options) -> MembershipAgent:
        options.setdefault("refresh_period", 10.0)
        options.setdefault("staleness_window", 30.0)
        options.setdefault("prune_incarnation_grace", 15.0)
        options.setdefault("store_retry_policy", RetryPolicy.fixed(1, 0.0))
        resolver = AddressResolver(
            name_resolver or static_resolver,
            RetryPolicy.fixed(max_retries, 5.0),
            sleep=sleep_recorder,
        )
        return MembershipAgent(
            NodeIdentity(node_id=node_id, port=port),
            resolver,
            store if store is not None else in_memory_store,
            **options,
        )
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove discovery settings inherited from the environment."""
    for key in list(os.environ):
        if key.startswith("KC_DISCOVERY_") or key == "DATABASE_URL":
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def flaky_store(in_memory_store):
    """The shared in-memory directory behind a switchable outage."""
    return FlakyDirectoryStore(in_memory_store)


@pytest.fixture
def flaky_name_resolver():
    """Factory for name resolvers that fail a given number of times."""
    return FlakyNameResolver
