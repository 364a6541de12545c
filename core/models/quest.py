# ============================================================================
# QUEST MODELS
# ============================================================================
# STATUS: Domain model - Normalized quest catalog rows
# PURPOSE: One Pydantic model per relational table, plus the hydrated aggregate
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Models

Normalized form of one provider quest:

    quests            one row per quest id (aggregate root)
    quest_assets      0..1 per quest (media references)
    quest_tasks       0..N per quest, unique by task_type
    quest_rewards     0..N per quest, ordered by insertion
    quest_features    0..N per quest (numeric feature codes)

Child rows cascade-delete with their quest. Task applications/external ids
and reward redemption instructions are opaque JSON trees, stored as JSONB
and handed back unchanged.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field


SCHEMA = "questmirror"


class Quest(BaseModel):
    """
    Top-level catalog entry.

    Maps to: questmirror.quests
    """

    # SQL DDL METADATA
    __sql_table__: ClassVar[str] = "quests"
    __sql_schema__: ClassVar[str] = SCHEMA
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {}
    __sql_indexes__: ClassVar[List] = [
        ("idx_quests_expires_at", ["expires_at"]),
        {"name": "idx_quests_starts_at", "columns": ["starts_at"], "descending": True},
    ]

    # Identity
    id: str = Field(..., max_length=64, description="Provider quest id (snowflake)")
    config_version: int

    # Validity window
    starts_at: datetime
    expires_at: datetime

    # Owning application
    application_id: str = Field(..., max_length=64)
    application_name: str
    application_link: str

    share_policy: str
    preview: bool = False

    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None

    # Display metadata
    quest_name: str
    game_title: str
    game_publisher: str

    # Call to action (both present or both absent)
    cta_link: Optional[str] = None
    cta_button_label: Optional[str] = None

    task_join_operator: str = "or"
    reward_assignment_method: int
    rewards_expire_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": False}

    @property
    def has_cta(self) -> bool:
        return self.cta_link is not None


class QuestAssets(BaseModel):
    """
    Media references for a quest. One row per quest.

    A bundle with every field null is distinct from no bundle at all.

    Maps to: questmirror.quest_assets
    """

    __sql_table__: ClassVar[str] = "quest_assets"
    __sql_schema__: ClassVar[str] = SCHEMA
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "quest_id": f"{SCHEMA}.quests(id)",
    }
    __sql_unique__: ClassVar[List] = [
        ("uq_quest_assets_quest", ["quest_id"]),
    ]

    # Column order here is the rendering order of the provider "assets" block
    MEDIA_FIELDS: ClassVar[tuple] = (
        "hero",
        "hero_video",
        "quest_bar_hero",
        "quest_bar_hero_video",
        "game_tile",
        "logotype",
        "game_tile_light",
        "game_tile_dark",
        "logotype_light",
        "logotype_dark",
    )

    id: Optional[int] = None
    quest_id: str = Field(..., max_length=64)
    hero: Optional[str] = None
    hero_video: Optional[str] = None
    quest_bar_hero: Optional[str] = None
    quest_bar_hero_video: Optional[str] = None
    game_tile: Optional[str] = None
    logotype: Optional[str] = None
    game_tile_light: Optional[str] = None
    game_tile_dark: Optional[str] = None
    logotype_light: Optional[str] = None
    logotype_dark: Optional[str] = None

    def media(self) -> Dict[str, Optional[str]]:
        """The media references keyed as the provider names them."""
        return {name: getattr(self, name) for name in self.MEDIA_FIELDS}


class QuestTask(BaseModel):
    """
    One task requirement, keyed by task type within its quest.

    Maps to: questmirror.quest_tasks
    """

    __sql_table__: ClassVar[str] = "quest_tasks"
    __sql_schema__: ClassVar[str] = SCHEMA
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "quest_id": f"{SCHEMA}.quests(id)",
    }
    __sql_unique__: ClassVar[List] = [
        ("uq_quest_tasks_quest_type", ["quest_id", "task_type"]),
    ]

    id: Optional[int] = None
    quest_id: str = Field(..., max_length=64)
    task_type: str
    target: int = 0
    applications: Optional[Any] = None
    external_ids: Optional[Any] = None


class QuestReward(BaseModel):
    """
    One reward. ``platform`` is the quest's representative platform code,
    shared by every reward of the same quest.

    Maps to: questmirror.quest_rewards
    """

    __sql_table__: ClassVar[str] = "quest_rewards"
    __sql_schema__: ClassVar[str] = SCHEMA
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "quest_id": f"{SCHEMA}.quests(id)",
    }
    __sql_indexes__: ClassVar[List] = [
        ("idx_quest_rewards_quest", ["quest_id"]),
    ]

    id: Optional[int] = None
    quest_id: str = Field(..., max_length=64)
    reward_type: int
    sku_id: Optional[str] = Field(default=None, max_length=64)
    reward_name: str
    reward_name_with_article: str
    orb_quantity: Optional[int] = None
    redemption_instructions: Optional[Any] = None
    platform: int = 0


class QuestFeature(BaseModel):
    """
    Feature flag code attached to a quest.

    Maps to: questmirror.quest_features
    """

    __sql_table__: ClassVar[str] = "quest_features"
    __sql_schema__: ClassVar[str] = SCHEMA
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "quest_id": f"{SCHEMA}.quests(id)",
    }
    __sql_indexes__: ClassVar[List] = [
        ("idx_quest_features_quest", ["quest_id"]),
    ]

    id: Optional[int] = None
    quest_id: str = Field(..., max_length=64)
    feature_id: int


class CompleteQuest(BaseModel):
    """A quest with every child collection loaded. Not a table."""

    quest: Quest
    assets: Optional[QuestAssets] = None
    tasks: List[QuestTask] = Field(default_factory=list)
    rewards: List[QuestReward] = Field(default_factory=list)
    features: List[QuestFeature] = Field(default_factory=list)

    @property
    def quest_id(self) -> str:
        return self.quest.id


__all__ = [
    "SCHEMA",
    "Quest",
    "QuestAssets",
    "QuestTask",
    "QuestReward",
    "QuestFeature",
    "CompleteQuest",
]
