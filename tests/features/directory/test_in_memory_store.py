"""Tests for the in-memory directory store."""

import pytest


class TestInMemoryDirectoryStore:
    """Store semantics shared with the PostgreSQL backend."""

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, in_memory_store, make_entry):
        entry = make_entry()

        first = await in_memory_store.upsert(entry)
        second = await in_memory_store.upsert(entry)

        assert first == second
        assert await in_memory_store.scan_all() == [first]

    @pytest.mark.asyncio
    async def test_store_clock_stamps_last_seen(self, in_memory_store, make_entry, clock):
        entry = make_entry(age=100)

        stored = await in_memory_store.upsert(entry)

        assert stored.last_seen_at == clock()

    @pytest.mark.asyncio
    async def test_refresh_is_monotonic(self, in_memory_store, make_entry, clock):
        entry = await in_memory_store.upsert(make_entry())
        clock.advance(10)
        refreshed = await in_memory_store.upsert(entry)
        clock.advance(-5)
        again = await in_memory_store.upsert(entry)

        assert refreshed.last_seen_at > entry.last_seen_at
        assert again.last_seen_at == refreshed.last_seen_at

    @pytest.mark.asyncio
    async def test_scan_live_excludes_stale_entries(self, in_memory_store, make_entry, clock):
        await in_memory_store.upsert(make_entry("kc-0"))
        clock.advance(20)
        await in_memory_store.upsert(make_entry("kc-1", address="10.0.0.11"))
        clock.advance(10)

        live = await in_memory_store.scan_live(30)

        assert [e.node_id for e in live] == ["kc-1"]
        assert len(await in_memory_store.scan_all()) == 2

    @pytest.mark.asyncio
    async def test_scan_returns_every_incarnation(self, in_memory_store, make_entry):
        await in_memory_store.upsert(make_entry("kc-0", incarnation=2))
        await in_memory_store.upsert(make_entry("kc-0", incarnation=1))

        assert [e.key for e in await in_memory_store.scan_live(30)] == [("kc-0", 1), ("kc-0", 2)]

    @pytest.mark.asyncio
    async def test_delete_stale_is_idempotent(self, in_memory_store, make_entry, clock):
        await in_memory_store.upsert(make_entry("kc-0"))
        clock.advance(31)
        await in_memory_store.upsert(make_entry("kc-1", address="10.0.0.11"))

        assert await in_memory_store.delete_stale(30) == 1
        assert await in_memory_store.delete_stale(30) == 0
        assert [e.node_id for e in await in_memory_store.scan_all()] == ["kc-1"]

    @pytest.mark.asyncio
    async def test_delete_entry_respects_age_condition(self, in_memory_store, make_entry, clock):
        await in_memory_store.upsert(make_entry("kc-0", incarnation=1))
        clock.advance(10)

        assert not await in_memory_store.delete_entry("kc-0", 1, older_than=15)
        clock.advance(5)
        assert await in_memory_store.delete_entry("kc-0", 1, older_than=15)
        assert not await in_memory_store.delete_entry("kc-0", 1)

    @pytest.mark.asyncio
    async def test_next_incarnation(self, in_memory_store, make_entry):
        assert await in_memory_store.next_incarnation("kc-0") == 1

        await in_memory_store.upsert(make_entry("kc-0", incarnation=3))
        await in_memory_store.upsert(make_entry("kc-1", incarnation=7, address="10.0.0.11"))

        assert await in_memory_store.next_incarnation("kc-0") == 4

    @pytest.mark.asyncio
    async def test_next_incarnation_survives_deregistration(self, in_memory_store, make_entry):
        first = await in_memory_store.next_incarnation("kc-0")
        await in_memory_store.upsert(make_entry("kc-0", incarnation=first))
        await in_memory_store.delete_entry("kc-0", first)

        second = await in_memory_store.next_incarnation("kc-0")
        await in_memory_store.reset()

        assert second > first
        assert await in_memory_store.next_incarnation("kc-0") > second

    @pytest.mark.asyncio
    async def test_reset(self, in_memory_store, make_entry):
        await in_memory_store.upsert(make_entry("kc-0"))
        await in_memory_store.upsert(make_entry("kc-1", address="10.0.0.11"))

        assert await in_memory_store.reset() == 2
        assert len(in_memory_store) == 0
