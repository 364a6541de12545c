# ============================================================================
# CATALOG CACHE SERVICE TESTS
# ============================================================================
# STATUS: Tests - Staleness gate and single-flight refresh
# PURPOSE: Verify TTL boundary and coalescing of concurrent refreshes
# CREATED: 19 OCT 2026
# ============================================================================
"""
CatalogCacheService Tests

Uses a settable clock, in-memory repositories and a mocked provider.

Run with:
    pytest tests/test_cache_service.py -v
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from core.errors import ProviderFetchError
from infrastructure.locking import LockService, SingleFlight
from services.cache_service import CatalogCacheService, is_stale
from services.sync_service import QuestSyncService
from tests.fakes import (
    T0,
    FakeCacheRepository,
    FakeClock,
    FakeQuestRepository,
    make_catalog,
    make_provider_quest,
    make_settings,
)


def _build(duration_minutes=30):
    clock = FakeClock()
    settings = make_settings(duration_minutes=duration_minutes)
    provider = AsyncMock()
    provider.fetch_catalog.return_value = make_catalog(make_provider_quest("1"))
    cache_repo = FakeCacheRepository(clock)
    sync = QuestSyncService(
        None,
        settings,
        provider_client=provider,
        quest_repo=FakeQuestRepository(),
        cache_repo=cache_repo,
    )
    svc = CatalogCacheService(settings, sync, cache_repo, clock=clock)
    return svc, provider, cache_repo, clock


# ============================================================================
# STALENESS PREDICATE
# ============================================================================

class TestIsStale:

    def test_just_before_threshold_is_fresh(self):
        assert not is_stale(T0, T0 + timedelta(milliseconds=999), 1000)

    def test_at_threshold_is_stale(self):
        assert is_stale(T0, T0 + timedelta(milliseconds=1000), 1000)

    def test_same_instant_is_fresh(self):
        assert not is_stale(T0, T0, 1000)

    def test_zero_threshold_always_stale(self):
        assert is_stale(T0, T0, 0)


# ============================================================================
# GET CATALOG
# ============================================================================

class TestGetCatalog:

    def test_absent_entry_triggers_sync(self):
        svc, provider, cache, _ = _build()

        document = asyncio.run(svc.get_catalog())

        assert [q["id"] for q in document["quests"]] == ["1"]
        assert cache.entries["discord_quests"].data == document
        provider.fetch_catalog.assert_awaited_once()

    def test_fresh_entry_served_without_provider_call(self):
        svc, provider, _, clock = _build()
        asyncio.run(svc.get_catalog())

        clock.advance(minutes=30, milliseconds=-1)
        document = asyncio.run(svc.get_catalog())

        assert provider.fetch_catalog.await_count == 1
        assert [q["id"] for q in document["quests"]] == ["1"]

    def test_entry_stale_at_exact_duration(self):
        svc, provider, cache, clock = _build()
        asyncio.run(svc.get_catalog())

        clock.advance(minutes=30)
        asyncio.run(svc.get_catalog())

        assert provider.fetch_catalog.await_count == 2
        assert cache.entries["discord_quests"].updated_at == T0 + timedelta(minutes=30)

    def test_cached_document_returned_unchanged(self):
        svc, provider, cache, _ = _build()
        asyncio.run(cache.put("discord_quests", {"quests": [{"id": "cached"}]}))

        document = asyncio.run(svc.get_catalog())

        assert document == {"quests": [{"id": "cached"}]}
        provider.fetch_catalog.assert_not_awaited()

    def test_sync_failure_propagates(self):
        svc, provider, _, _ = _build()
        provider.fetch_catalog.side_effect = ProviderFetchError("Request failed: boom")

        with pytest.raises(ProviderFetchError):
            asyncio.run(svc.get_catalog())

    def test_concurrent_stale_requests_fetch_once(self):
        svc, provider, _, _ = _build()

        async def slow_fetch():
            await asyncio.sleep(0.01)
            return make_catalog(make_provider_quest("1"))

        provider.fetch_catalog.side_effect = slow_fetch

        async def run():
            return await asyncio.gather(*(svc.get_catalog() for _ in range(5)))

        documents = asyncio.run(run())

        assert provider.fetch_catalog.await_count == 1
        assert all(d == documents[0] for d in documents)

    def test_refresh_ignores_freshness(self):
        svc, provider, _, _ = _build()
        asyncio.run(svc.get_catalog())

        result = asyncio.run(svc.refresh())

        assert provider.fetch_catalog.await_count == 2
        assert result.new_count == 0
        assert result.skipped_count == 1


# ============================================================================
# SINGLE FLIGHT
# ============================================================================

class TestSingleFlight:

    def test_holders_serialized_per_key(self):
        flight = SingleFlight()
        active = []
        overlaps = []

        async def worker(key):
            async with flight.hold(key):
                if key in active:
                    overlaps.append(key)
                active.append(key)
                await asyncio.sleep(0.005)
                active.remove(key)

        async def run():
            await asyncio.gather(worker("a"), worker("a"), worker("b"))

        asyncio.run(run())

        assert overlaps == []

    def test_lock_id_is_stable_signed_int64(self):
        first = LockService._hash_to_lock_id("questmirror:sync:discord_quests")
        second = LockService._hash_to_lock_id("questmirror:sync:discord_quests")

        assert first == second
        assert -(2 ** 63) <= first < 2 ** 63
        assert first != LockService._hash_to_lock_id("questmirror:sync:other")
