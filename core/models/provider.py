# ============================================================================
# PROVIDER DOCUMENT MODELS
# ============================================================================
# STATUS: Boundary model - Upstream quest catalog shape
# PURPOSE: Validate the nested provider document before ingest
# CREATED: 19 OCT 2026
# ============================================================================
"""
Provider Document Models

Pydantic view of the upstream catalog response:

    {"quests": [{"id": ..., "config": {...}, "preview": false, ...}]}

Only the fields the mirror persists are modelled. Unknown keys are ignored
so the upstream can add fields without breaking ingest; missing required
keys fail validation and surface as MappingError in the ingest layer.
Timestamps stay strings here and are parsed by core.timestamps during
ingest so a bad value aborts just that quest.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProviderApplication(_ProviderModel):
    id: str
    name: str
    link: str


class ProviderAssets(_ProviderModel):
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


class ProviderColors(_ProviderModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None


class ProviderMessages(_ProviderModel):
    quest_name: str
    game_title: str
    game_publisher: str


class ProviderTaskConfig(_ProviderModel):
    """``task_config_v2``: tasks keyed by task type, each an open JSON object."""

    tasks: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    join_operator: str = "or"


class ProviderRewardMessages(_ProviderModel):
    name: str
    name_with_article: str
    redemption_instructions_by_platform: Optional[Any] = None


class ProviderReward(_ProviderModel):
    reward_type: int = Field(..., alias="type")
    sku_id: Optional[str] = None
    messages: ProviderRewardMessages
    orb_quantity: Optional[int] = None


class ProviderRewardsConfig(_ProviderModel):
    assignment_method: int
    rewards: List[ProviderReward] = Field(default_factory=list)
    rewards_expire_at: Optional[str] = None
    platforms: List[int] = Field(default_factory=list)


class ProviderCtaConfig(_ProviderModel):
    link: str
    button_label: str


class ProviderQuestConfig(_ProviderModel):
    config_version: int
    starts_at: str
    expires_at: str
    features: Optional[List[int]] = None
    application: ProviderApplication
    assets: Optional[ProviderAssets] = None
    colors: Optional[ProviderColors] = None
    messages: ProviderMessages
    task_config_v2: Optional[ProviderTaskConfig] = None
    rewards_config: ProviderRewardsConfig
    share_policy: str
    cta_config: Optional[ProviderCtaConfig] = None


class ProviderQuest(_ProviderModel):
    """One quest. ``user_status`` and ``targeted_content`` are never read."""

    id: str
    config: ProviderQuestConfig
    preview: bool = False


class ProviderCatalog(_ProviderModel):
    """Top-level provider response."""

    quests: List[ProviderQuest] = Field(default_factory=list)


__all__ = [
    "ProviderApplication",
    "ProviderAssets",
    "ProviderColors",
    "ProviderMessages",
    "ProviderTaskConfig",
    "ProviderRewardMessages",
    "ProviderReward",
    "ProviderRewardsConfig",
    "ProviderCtaConfig",
    "ProviderQuestConfig",
    "ProviderQuest",
    "ProviderCatalog",
]
