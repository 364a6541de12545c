# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# STATUS: Core - Database access layer
# PURPOSE: Persistence for the normalized quest store and catalog cache
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repositories Module

Provides database access for quest mirror entities.
Uses psycopg3 async with connection pooling.

Usage:
    from repositories import QuestRepository, get_pool

    pool = await get_pool()
    quest_repo = QuestRepository(pool)
    known = await quest_repo.list_known_ids()
"""

from .database import get_pool, init_pool, close_pool, storage_errors
from .quest_repo import QuestRepository
from .cache_repo import CacheRepository

__all__ = [
    "get_pool",
    "init_pool",
    "close_pool",
    "storage_errors",
    "QuestRepository",
    "CacheRepository",
]
