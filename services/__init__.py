# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Business logic layer
# PURPOSE: Ingest, reconstruction, sync and cache services for the quest mirror
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the quest mirror.
Services coordinate between the provider client and repositories.

Usage:
    from services import QuestSyncService, CatalogCacheService

    sync_service = QuestSyncService(pool, settings)
    cache_service = CatalogCacheService(settings, sync_service, CacheRepository(pool))
    document = await cache_service.get_catalog()
"""

from .provider_client import ProviderClient
from .quest_ingest import QuestIngestService, QuestRowSet, build_quest_rows
from .quest_reconstruction import reconstruct_catalog, reconstruct_quest
from .sync_service import QuestSyncService, SyncResult
from .cache_service import CatalogCacheService, is_stale

__all__ = [
    "ProviderClient",
    "QuestIngestService",
    "QuestRowSet",
    "build_quest_rows",
    "reconstruct_catalog",
    "reconstruct_quest",
    "QuestSyncService",
    "SyncResult",
    "CatalogCacheService",
    "is_stale",
]
