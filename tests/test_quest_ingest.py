# ============================================================================
# QUEST INGEST TESTS
# ============================================================================
# STATUS: Tests - Provider document to normalized rows
# PURPOSE: Verify build_quest_rows mapping rules and QuestIngestService writes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Ingest Tests

Pure mapping tests for build_quest_rows plus a persistence test with the
in-memory repository. No database, no network.

Run with:
    pytest tests/test_quest_ingest.py -v
"""

import asyncio
from datetime import datetime, timezone

import pytest

from core.errors import MappingError
from services.quest_ingest import QuestIngestService, build_quest_rows
from tests.fakes import FakeQuestRepository, make_provider_quest


# ============================================================================
# SCALAR MAPPING
# ============================================================================

class TestQuestRow:

    def test_scalars_copied_from_config(self):
        rows = build_quest_rows(make_provider_quest())
        q = rows.quest

        assert q.id == "1245"
        assert q.config_version == 2
        assert q.starts_at == datetime(2026, 10, 1, tzinfo=timezone.utc)
        assert q.expires_at == datetime(2026, 11, 1, tzinfo=timezone.utc)
        assert q.application_id == "app-77"
        assert q.application_name == "Orb Runner"
        assert q.quest_name == "Orb Runner Quest"
        assert q.game_publisher == "Orb Studio"
        assert q.primary_color == "#5865F2"
        assert q.cta_link == "https://orbrunner.example/play"
        assert q.cta_button_label == "Play Now"
        assert q.reward_assignment_method == 1
        assert q.rewards_expire_at == datetime(2026, 12, 1, tzinfo=timezone.utc)
        assert q.preview is False

    def test_zulu_timestamps_normalized_to_utc(self):
        rows = build_quest_rows(make_provider_quest(
            starts_at="2026-10-01T02:00:00+02:00",
            expires_at="2026-11-01T00:00:00Z",
        ))

        assert rows.quest.starts_at == datetime(2026, 10, 1, tzinfo=timezone.utc)
        assert rows.quest.expires_at.tzinfo == timezone.utc

    def test_missing_cta_config(self):
        rows = build_quest_rows(make_provider_quest(cta_config=None))

        assert rows.quest.cta_link is None
        assert rows.quest.cta_button_label is None
        assert rows.quest.has_cta is False

    def test_missing_colors(self):
        rows = build_quest_rows(make_provider_quest(colors=None))

        assert rows.quest.primary_color is None
        assert rows.quest.secondary_color is None

    def test_unknown_fields_ignored(self):
        doc = make_provider_quest()
        doc["config"]["brand_new_field"] = {"x": 1}
        doc["something_else"] = True

        rows = build_quest_rows(doc)

        assert rows.quest.id == "1245"

    def test_long_free_form_text_kept(self):
        link = "https://orbrunner.example/" + "a" * 2000
        doc = make_provider_quest(
            application={"id": "app-77", "name": "Orb Runner", "link": link},
        )
        doc["config"]["task_config_v2"]["join_operator"] = "and-then-or-" * 10

        rows = build_quest_rows(doc)

        assert rows.quest.application_link == link
        assert rows.quest.task_join_operator == "and-then-or-" * 10


# ============================================================================
# CHILD ROWS
# ============================================================================

class TestChildRows:

    def test_tasks_keyed_by_type(self):
        rows = build_quest_rows(make_provider_quest())
        tasks = {t.task_type: t for t in rows.tasks}

        assert set(tasks) == {"WATCH_VIDEO", "PLAY_ON_DESKTOP"}
        assert tasks["WATCH_VIDEO"].target == 900
        assert tasks["WATCH_VIDEO"].applications == [{"id": "app-77"}]
        assert tasks["PLAY_ON_DESKTOP"].external_ids == ["ext-1"]

    def test_task_target_defaults_to_zero(self):
        task_config = {
            "tasks": {
                "STREAM": {"type": "STREAM"},
                "ODD": {"type": "ODD", "target": "lots"},
            },
            "join_operator": "and",
        }
        rows = build_quest_rows(make_provider_quest(task_config_v2=task_config))
        targets = {t.task_type: t.target for t in rows.tasks}

        assert targets == {"STREAM": 0, "ODD": 0}
        assert rows.quest.task_join_operator == "and"

    def test_missing_task_config_gives_no_tasks(self):
        rows = build_quest_rows(make_provider_quest(task_config_v2=None))

        assert rows.tasks == []
        assert rows.quest.task_join_operator == "or"

    def test_first_platform_shared_by_every_reward(self):
        doc = make_provider_quest()
        doc["config"]["rewards_config"]["platforms"] = [2, 5]

        rows = build_quest_rows(doc)

        assert len(rows.rewards) == 2
        assert all(r.platform == 2 for r in rows.rewards)

    def test_empty_platforms_default_to_zero(self):
        doc = make_provider_quest()
        doc["config"]["rewards_config"]["platforms"] = []

        rows = build_quest_rows(doc)

        assert [r.platform for r in rows.rewards] == [0, 0]

    def test_rewards_keep_provider_order(self):
        rows = build_quest_rows(make_provider_quest())

        assert [r.reward_type for r in rows.rewards] == [4, 3]
        assert rows.rewards[0].orb_quantity == 700
        assert rows.rewards[1].redemption_instructions == {"0": "Open settings"}
        assert rows.rewards[1].reward_name_with_article == "an Avatar Decoration"

    def test_features_copied(self):
        rows = build_quest_rows(make_provider_quest())

        assert [f.feature_id for f in rows.features] == [3, 9]

    def test_missing_features_gives_empty_set(self):
        rows = build_quest_rows(make_provider_quest(features=None))

        assert rows.features == []

    def test_assets_only_when_block_present(self):
        with_assets = build_quest_rows(make_provider_quest())
        without = build_quest_rows(make_provider_quest(assets=None))

        assert with_assets.assets.hero == "quests/1245/hero.png"
        assert with_assets.assets.game_tile_light is None
        assert without.assets is None


# ============================================================================
# FAILURES
# ============================================================================

class TestMappingFailures:

    def test_unparseable_timestamp(self):
        with pytest.raises(MappingError) as exc_info:
            build_quest_rows(make_provider_quest(starts_at="next tuesday"))

        assert exc_info.value.quest_id == "1245"

    def test_naive_timestamp_rejected(self):
        with pytest.raises(MappingError):
            build_quest_rows(make_provider_quest(expires_at="2026-11-01T00:00:00"))

    def test_missing_required_block(self):
        doc = make_provider_quest(messages=None)

        with pytest.raises(MappingError) as exc_info:
            build_quest_rows(doc)

        assert exc_info.value.quest_id == "1245"

    def test_mapping_error_is_500(self):
        with pytest.raises(MappingError) as exc_info:
            build_quest_rows(make_provider_quest(rewards_config=None))

        assert exc_info.value.status_code == 500


# ============================================================================
# PERSISTENCE
# ============================================================================

class TestQuestIngestService:

    def test_ingest_saves_all_rows(self):
        repo = FakeQuestRepository()
        svc = QuestIngestService(None, quest_repo=repo)

        rows = asyncio.run(svc.ingest(make_provider_quest()))

        assert repo.save_calls == ["1245"]
        assert rows.quest.id in repo.quests
        assert len(repo.tasks["1245"]) == 2
        assert len(repo.rewards["1245"]) == 2
        assert repo.assets["1245"].logotype == "quests/1245/logo.png"

    def test_mapping_failure_writes_nothing(self):
        repo = FakeQuestRepository()
        svc = QuestIngestService(None, quest_repo=repo)

        with pytest.raises(MappingError):
            asyncio.run(svc.ingest(make_provider_quest(expires_at="bogus")))

        assert repo.save_calls == []
        assert repo.quests == {}
