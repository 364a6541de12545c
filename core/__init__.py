# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export models, errors and schema utilities
# CREATED: 19 OCT 2026
# ============================================================================

from core.errors import (
    QuestMirrorError,
    StorageError,
    QuestNotFoundError,
    ProviderFetchError,
    MappingError,
    ConfigurationError,
)
from core.models import (
    Quest,
    QuestAssets,
    QuestTask,
    QuestReward,
    QuestFeature,
    CompleteQuest,
    CacheEntry,
)
from core.schema import PydanticToSQL

__all__ = [
    # Errors
    "QuestMirrorError",
    "StorageError",
    "QuestNotFoundError",
    "ProviderFetchError",
    "MappingError",
    "ConfigurationError",
    # Models
    "Quest",
    "QuestAssets",
    "QuestTask",
    "QuestReward",
    "QuestFeature",
    "CompleteQuest",
    "CacheEntry",
    # Schema
    "PydanticToSQL",
]
