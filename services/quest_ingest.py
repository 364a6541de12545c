# ============================================================================
# QUEST INGEST SERVICE
# ============================================================================
# STATUS: Domain service - Provider document to normalized rows
# PURPOSE: Flatten one nested provider quest into table rows and persist them
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Ingest

Maps one provider quest onto the normalized store:

    quest config      -> quests row
    config.assets     -> quest_assets row (only when the block is present)
    task_config_v2    -> quest_tasks rows, keyed by task type
    rewards_config    -> quest_rewards rows, in provider order
    config.features   -> quest_features rows

``user_status`` and ``targeted_content`` are per-user state and are dropped.

Every reward of a quest records the first entry of
``rewards_config.platforms`` (or 0). The rest of that list is not stored.

Pattern: build_quest_rows() is pure; QuestIngestService persists its output
through QuestRepository.save_complete() in a single transaction.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from psycopg_pool import AsyncConnectionPool

from core.errors import MappingError
from core.logging import get_logger, log_context
from core.models.provider import ProviderQuest
from core.models.quest import (
    Quest,
    QuestAssets,
    QuestFeature,
    QuestReward,
    QuestTask,
)
from core.timestamps import parse_optional_timestamp, parse_timestamp
from repositories import QuestRepository

logger = get_logger(__name__)


@dataclass
class QuestRowSet:
    """Rows produced from one provider quest."""
    quest: Quest
    assets: Optional[QuestAssets] = None
    tasks: List[QuestTask] = field(default_factory=list)
    rewards: List[QuestReward] = field(default_factory=list)
    features: List[QuestFeature] = field(default_factory=list)


def parse_provider_quest(document: Union[ProviderQuest, Dict[str, Any]]) -> ProviderQuest:
    """Validate a raw quest object, raising MappingError on shape mismatch."""
    if isinstance(document, ProviderQuest):
        return document
    try:
        return ProviderQuest.model_validate(document)
    except ValidationError as e:
        quest_id = document.get("id") if isinstance(document, dict) else None
        raise MappingError(
            f"Quest {quest_id or '<unknown>'} does not match the provider schema: {e}",
            quest_id=quest_id,
        ) from e


def _task_target(raw: Any) -> int:
    # Non-integer targets (including booleans) collapse to 0
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    return 0


def build_quest_rows(document: Union[ProviderQuest, Dict[str, Any]]) -> QuestRowSet:
    """
    Flatten one provider quest into table rows. Does no I/O.

    Raises:
        MappingError: required field missing or a timestamp does not parse
    """
    provider = parse_provider_quest(document)
    try:
        return _rows_from_provider(provider)
    except ValidationError as e:
        raise MappingError(
            f"Quest {provider.id} has out-of-range values: {e}",
            quest_id=provider.id,
        ) from e


def _rows_from_provider(provider: ProviderQuest) -> QuestRowSet:
    config = provider.config
    quest_id = provider.id

    try:
        starts_at = parse_timestamp(config.starts_at)
        expires_at = parse_timestamp(config.expires_at)
        rewards_expire_at = parse_optional_timestamp(config.rewards_config.rewards_expire_at)
    except MappingError as e:
        raise MappingError(f"Quest {quest_id}: {e.message}", quest_id=quest_id) from e

    colors = config.colors
    cta = config.cta_config
    task_config = config.task_config_v2

    quest = Quest(
        id=quest_id,
        config_version=config.config_version,
        starts_at=starts_at,
        expires_at=expires_at,
        application_id=config.application.id,
        application_name=config.application.name,
        application_link=config.application.link,
        share_policy=config.share_policy,
        preview=provider.preview,
        primary_color=colors.primary if colors else None,
        secondary_color=colors.secondary if colors else None,
        quest_name=config.messages.quest_name,
        game_title=config.messages.game_title,
        game_publisher=config.messages.game_publisher,
        cta_link=cta.link if cta else None,
        cta_button_label=cta.button_label if cta else None,
        task_join_operator=task_config.join_operator if task_config else "or",
        reward_assignment_method=config.rewards_config.assignment_method,
        rewards_expire_at=rewards_expire_at,
    )

    assets = None
    if config.assets is not None:
        assets = QuestAssets(quest_id=quest_id, **config.assets.model_dump())

    tasks = []
    if task_config is not None:
        for task_type, task_data in task_config.tasks.items():
            tasks.append(QuestTask(
                quest_id=quest_id,
                task_type=task_type,
                target=_task_target(task_data.get("target")),
                applications=task_data.get("applications"),
                external_ids=task_data.get("external_ids"),
            ))

    platforms = config.rewards_config.platforms
    platform = platforms[0] if platforms else 0
    rewards = [
        QuestReward(
            quest_id=quest_id,
            reward_type=reward.reward_type,
            sku_id=reward.sku_id,
            reward_name=reward.messages.name,
            reward_name_with_article=reward.messages.name_with_article,
            orb_quantity=reward.orb_quantity,
            redemption_instructions=reward.messages.redemption_instructions_by_platform,
            platform=platform,
        )
        for reward in config.rewards_config.rewards
    ]

    features = [
        QuestFeature(quest_id=quest_id, feature_id=feature_id)
        for feature_id in (config.features or [])
    ]

    return QuestRowSet(
        quest=quest,
        assets=assets,
        tasks=tasks,
        rewards=rewards,
        features=features,
    )


class QuestIngestService:
    """Persists provider quests into the normalized store."""

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool],
        quest_repo: Optional[QuestRepository] = None,
    ):
        self.pool = pool
        self.quest_repo = quest_repo or QuestRepository(pool)

    async def ingest(self, document: Union[ProviderQuest, Dict[str, Any]]) -> QuestRowSet:
        """
        Map and store one quest.

        Raises:
            MappingError: document does not map; nothing is written
            StorageError: the write failed; nothing is written for this quest
        """
        rows = build_quest_rows(document)
        with log_context(quest_id=rows.quest.id):
            await self.quest_repo.save_complete(
                rows.quest,
                rows.assets,
                rows.tasks,
                rows.rewards,
                rows.features,
            )
            logger.info(
                f"Ingested quest {rows.quest.id} ({rows.quest.quest_name})",
                extra={"tasks": len(rows.tasks), "rewards": len(rows.rewards)},
            )
        return rows


__all__ = [
    "QuestRowSet",
    "QuestIngestService",
    "build_quest_rows",
    "parse_provider_quest",
]
