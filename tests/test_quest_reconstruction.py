# ============================================================================
# QUEST RECONSTRUCTION TESTS
# ============================================================================
# STATUS: Tests - Stored rows back to provider shape
# PURPOSE: Verify reconstruct_quest output and ingest/reconstruct round trips
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Reconstruction Tests

Round trips go through build_quest_rows and the in-memory repository, so
they exercise the same rows a database would hold.

Run with:
    pytest tests/test_quest_reconstruction.py -v
"""

import asyncio
import copy
from datetime import datetime, timezone

from core.models.quest import CompleteQuest, Quest, QuestReward
from services.quest_ingest import QuestIngestService
from services.quest_reconstruction import (
    reconstruct_catalog,
    reconstruct_quest,
    representative_platform,
)
from tests.fakes import FakeQuestRepository, make_provider_quest


def _round_trip(document):
    repo = FakeQuestRepository()
    svc = QuestIngestService(None, quest_repo=repo)

    async def run():
        await svc.ingest(document)
        return await repo.get_complete(document["id"])

    return reconstruct_quest(asyncio.run(run()))


def _expected(document):
    """The provider document as the mirror is able to reproduce it."""
    expected = copy.deepcopy(document)
    expected["user_status"] = None
    expected["targeted_content"] = []
    return expected


def _bare_quest(**overrides):
    fields = dict(
        id="q1",
        config_version=1,
        starts_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        expires_at=datetime(2026, 11, 1, tzinfo=timezone.utc),
        application_id="a",
        application_name="App",
        application_link="https://app.example",
        share_policy="not_shareable",
        quest_name="Q",
        game_title="G",
        game_publisher="P",
        reward_assignment_method=2,
    )
    fields.update(overrides)
    return Quest(**fields)


# ============================================================================
# ROUND TRIP
# ============================================================================

class TestRoundTrip:

    def test_fully_populated_quest(self):
        doc = make_provider_quest()

        assert _round_trip(doc) == _expected(doc)

    def test_quest_without_cta_has_no_cta_key(self):
        doc = make_provider_quest(cta_config=None)

        result = _round_trip(doc)

        assert "cta_config" not in result["config"]
        assert result == _expected(doc)

    def test_zulu_input_rendered_with_offset(self):
        doc = make_provider_quest(starts_at="2026-10-01T00:00:00Z")

        result = _round_trip(doc)

        assert result["config"]["starts_at"] == "2026-10-01T00:00:00+00:00"

    def test_multiple_platforms_collapse_to_first(self):
        doc = make_provider_quest()
        doc["config"]["rewards_config"]["platforms"] = [2, 5]

        result = _round_trip(doc)

        assert result["config"]["rewards_config"]["platforms"] == [2]

    def test_optional_blocks_absent(self):
        doc = make_provider_quest(
            assets=None,
            colors=None,
            task_config_v2=None,
            features=None,
            cta_config=None,
        )
        doc["config"]["rewards_config"]["rewards"] = []
        doc["config"]["rewards_config"].pop("rewards_expire_at")

        config = _round_trip(doc)["config"]

        assert config["assets"] == {
            "hero": None,
            "hero_video": None,
            "quest_bar_hero": None,
            "quest_bar_hero_video": None,
            "game_tile": None,
            "logotype": None,
            "game_tile_light": None,
            "game_tile_dark": None,
            "logotype_light": None,
            "logotype_dark": None,
        }
        assert config["colors"] == {"primary": None, "secondary": None}
        assert config["task_config_v2"] == {"tasks": {}, "join_operator": "or"}
        assert config["features"] == []
        assert config["rewards_config"]["rewards"] == []
        assert config["rewards_config"]["rewards_expire_at"] is None
        assert config["rewards_config"]["platforms"] == [0]
        assert "cta_config" not in config


# ============================================================================
# DIRECT RENDERING
# ============================================================================

class TestReconstructQuest:

    def test_constant_fields(self):
        result = reconstruct_quest(CompleteQuest(quest=_bare_quest(preview=True)))

        assert result["id"] == "q1"
        assert result["config"]["id"] == "q1"
        assert result["user_status"] is None
        assert result["targeted_content"] == []
        assert result["preview"] is True

    def test_fractional_seconds_preserved(self):
        quest = _bare_quest(
            starts_at=datetime(2026, 10, 1, 8, 30, 15, 250000, tzinfo=timezone.utc)
        )

        result = reconstruct_quest(CompleteQuest(quest=quest))

        assert result["config"]["starts_at"] == "2026-10-01T08:30:15.250000+00:00"

    def test_representative_platform(self):
        reward = QuestReward(
            quest_id="q1",
            reward_type=1,
            reward_name="n",
            reward_name_with_article="a n",
            platform=4,
        )

        assert representative_platform(CompleteQuest(quest=_bare_quest())) == 0
        assert representative_platform(
            CompleteQuest(quest=_bare_quest(), rewards=[reward])
        ) == 4

    def test_catalog_wrapper(self):
        quests = [CompleteQuest(quest=_bare_quest(id="a")), CompleteQuest(quest=_bare_quest(id="b"))]

        catalog = reconstruct_catalog(quests)

        assert [q["id"] for q in catalog["quests"]] == ["a", "b"]

    def test_empty_catalog(self):
        assert reconstruct_catalog([]) == {"quests": []}
