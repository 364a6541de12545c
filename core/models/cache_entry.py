# ============================================================================
# CACHE ENTRY MODEL
# ============================================================================
# STATUS: Domain model - Cached catalog reconstruction
# PURPOSE: Key/value row holding the last reconstructed provider document
# CREATED: 19 OCT 2026
# ============================================================================
"""
CacheEntry Model

Singleton-per-key store for the reconstructed catalog. Only one key is used
today (the catalog key from settings); ``updated_at`` drives staleness.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List

from pydantic import BaseModel, Field

from core.models.quest import SCHEMA


class CacheEntry(BaseModel):
    """
    Last reconstructed document for a cache key.

    Maps to: questmirror.cache_store
    """

    __sql_table__: ClassVar[str] = "cache_store"
    __sql_schema__: ClassVar[str] = SCHEMA
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {}

    id: str = Field(..., max_length=64, description="Cache key")
    data: Dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["CacheEntry"]
