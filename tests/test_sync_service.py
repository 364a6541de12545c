# ============================================================================
# QUEST SYNC SERVICE TESTS
# ============================================================================
# STATUS: Tests - Fetch, ingest, reconstruct, cache cycle
# PURPOSE: Verify unknown-only ingest, idempotence and failure handling
# CREATED: 19 OCT 2026
# ============================================================================
"""
QuestSyncService Tests

The provider client is an AsyncMock; repositories are in-memory fakes.

Run with:
    pytest tests/test_sync_service.py -v
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from core.errors import MappingError, ProviderFetchError, StorageError
from core.timestamps import age_cutoff, format_timestamp
from services.sync_service import QuestSyncService, parse_catalog
from tests.fakes import (
    T0,
    FakeCacheRepository,
    FakeQuestRepository,
    make_catalog,
    make_provider_quest,
    make_settings,
)


def _build_service(catalog=None, quest_repo=None, fetch_error=None):
    provider = AsyncMock()
    if fetch_error is not None:
        provider.fetch_catalog.side_effect = fetch_error
    else:
        provider.fetch_catalog.return_value = catalog or make_catalog()

    quest_repo = quest_repo or FakeQuestRepository()
    cache_repo = FakeCacheRepository()
    svc = QuestSyncService(
        None,
        make_settings(),
        provider_client=provider,
        quest_repo=quest_repo,
        cache_repo=cache_repo,
    )
    return svc, provider, quest_repo, cache_repo


# ============================================================================
# HAPPY PATH
# ============================================================================

class TestRunCycle:

    def test_new_quests_ingested_and_cached(self):
        catalog = make_catalog(make_provider_quest("1"), make_provider_quest("2"))
        svc, provider, quests, cache = _build_service(catalog)

        result = asyncio.run(svc.run_cycle())

        assert result.new_count == 2
        assert result.skipped_count == 0
        assert result.ingested_ids == ["1", "2"]
        assert set(quests.quests) == {"1", "2"}
        assert cache.entries["discord_quests"].data == result.document
        provider.fetch_catalog.assert_awaited_once()

    def test_only_unknown_ids_ingested(self):
        quests = FakeQuestRepository()
        svc, _, _, _ = _build_service(
            make_catalog(make_provider_quest("1")), quest_repo=quests
        )
        asyncio.run(svc.run_cycle())

        svc.provider_client.fetch_catalog.return_value = make_catalog(
            make_provider_quest("1"), make_provider_quest("2")
        )
        result = asyncio.run(svc.run_cycle())

        assert result.new_count == 1
        assert result.skipped_count == 1
        assert quests.save_calls == ["1", "2"]

    def test_second_identical_cycle_ingests_nothing(self):
        catalog = make_catalog(make_provider_quest("1"), make_provider_quest("2"))
        svc, _, quests, _ = _build_service(catalog)

        first = asyncio.run(svc.run_cycle())
        stored_before = dict(quests.quests)
        second = asyncio.run(svc.run_cycle())

        assert second.new_count == 0
        assert second.skipped_count == 2
        assert quests.quests == stored_before
        assert second.document == first.document

    def test_known_quest_not_updated_when_provider_changes_it(self):
        svc, provider, quests, _ = _build_service(make_catalog(make_provider_quest("1")))
        asyncio.run(svc.run_cycle())

        changed = make_provider_quest("1")
        changed["config"]["messages"]["quest_name"] = "Renamed"
        provider.fetch_catalog.return_value = make_catalog(changed)
        asyncio.run(svc.run_cycle())

        assert quests.quests["1"].quest_name == "Orb Runner Quest"

    def test_duplicate_ids_in_one_fetch_ingested_once(self):
        catalog = make_catalog(make_provider_quest("1"), make_provider_quest("1"))
        svc, _, quests, _ = _build_service(catalog)

        result = asyncio.run(svc.run_cycle())

        assert quests.save_calls == ["1"]
        assert result.new_count == 1
        assert result.skipped_count == 1

    def test_document_filtered_by_age_and_ordered(self):
        catalog = make_catalog(
            make_provider_quest("old", starts_at="2026-01-01T00:00:00+00:00",
                                expires_at="2026-02-01T00:00:00+00:00"),
            make_provider_quest("early", starts_at="2026-09-01T00:00:00+00:00"),
            make_provider_quest("late", starts_at="2026-10-10T00:00:00+00:00"),
        )
        svc, _, _, _ = _build_service(catalog)

        result = asyncio.run(svc.run_cycle())

        assert [q["id"] for q in result.document["quests"]] == ["late", "early"]

    def test_age_filter_boundary_inclusive(self):
        cutoff = age_cutoff(T0, 30)
        catalog = make_catalog(
            make_provider_quest("edge", starts_at="2026-09-01T00:00:00+00:00",
                                expires_at=format_timestamp(cutoff)),
            make_provider_quest("gone", starts_at="2026-09-01T00:00:00+00:00",
                                expires_at=format_timestamp(cutoff - timedelta(microseconds=1))),
        )
        svc, _, quests, _ = _build_service(catalog)

        result = asyncio.run(svc.run_cycle())

        assert set(quests.quests) == {"edge", "gone"}
        assert [q["id"] for q in result.document["quests"]] == ["edge"]

    def test_empty_catalog(self):
        svc, _, _, cache = _build_service(make_catalog())

        result = asyncio.run(svc.run_cycle())

        assert result.new_count == 0
        assert result.document == {"quests": []}
        assert cache.put_count == 1


# ============================================================================
# FAILURES
# ============================================================================

class TestRunCycleFailures:

    def test_provider_failure_propagates(self):
        svc, _, quests, cache = _build_service(
            fetch_error=ProviderFetchError("Provider API returned 401", upstream_status=401)
        )

        with pytest.raises(ProviderFetchError):
            asyncio.run(svc.run_cycle())

        assert quests.save_calls == []
        assert cache.put_count == 0

    def test_malformed_catalog_ingests_nothing(self):
        bad = make_provider_quest("2")
        del bad["config"]["application"]
        svc, _, quests, cache = _build_service(
            make_catalog(make_provider_quest("1"), bad)
        )

        with pytest.raises(MappingError):
            asyncio.run(svc.run_cycle())

        assert quests.save_calls == []
        assert cache.put_count == 0

    def test_fail_fast_keeps_earlier_quests(self):
        catalog = make_catalog(
            make_provider_quest("1"),
            make_provider_quest("2", starts_at="not-a-date"),
            make_provider_quest("3"),
        )
        svc, _, quests, cache = _build_service(catalog)

        with pytest.raises(MappingError):
            asyncio.run(svc.run_cycle())

        assert set(quests.quests) == {"1"}
        assert cache.put_count == 0

    def test_storage_failure_stops_cycle(self):
        quests = FakeQuestRepository(fail_on={"2"})
        catalog = make_catalog(
            make_provider_quest("1"), make_provider_quest("2"), make_provider_quest("3")
        )
        svc, _, _, cache = _build_service(catalog, quest_repo=quests)

        with pytest.raises(StorageError):
            asyncio.run(svc.run_cycle())

        assert quests.save_calls == ["1", "2"]
        assert cache.put_count == 0


class TestParseCatalog:

    def test_missing_quests_key_is_empty(self):
        assert parse_catalog({}).quests == []

    def test_quests_not_a_list(self):
        with pytest.raises(MappingError):
            parse_catalog({"quests": "nope"})
