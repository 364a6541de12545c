# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# CREATED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Table models carry SQL metadata via __sql_* ClassVar attributes for DDL
generation (see core.schema.PydanticToSQL). Provider models describe the
upstream document and never touch the database.
"""

from core.models.quest import (
    SCHEMA,
    Quest,
    QuestAssets,
    QuestTask,
    QuestReward,
    QuestFeature,
    CompleteQuest,
)
from core.models.cache_entry import CacheEntry
from core.models.provider import ProviderCatalog, ProviderQuest, ProviderQuestConfig

__all__ = [
    "SCHEMA",
    # Tables
    "Quest",
    "QuestAssets",
    "QuestTask",
    "QuestReward",
    "QuestFeature",
    "CacheEntry",
    # Aggregates
    "CompleteQuest",
    # Provider
    "ProviderCatalog",
    "ProviderQuest",
    "ProviderQuestConfig",
]
