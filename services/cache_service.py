# ============================================================================
# CATALOG CACHE SERVICE
# ============================================================================
# STATUS: Domain service - Staleness-gated catalog reads
# PURPOSE: Serve the cached catalog, refreshing it when older than the TTL
# CREATED: 19 OCT 2026
# ============================================================================
"""
CatalogCacheService

Read path for GET /v1/quests:

    fresh entry  -> cached document, no provider call
    stale/absent -> one sync cycle (single-flight per key), then its document

An entry is stale once ``now - updated_at >= cache duration``. Concurrent
callers that find the entry stale queue on the same lock; each re-checks
freshness after acquiring it, so only the first one hits the provider.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from core.config import Settings
from core.logging import ComponentType, get_logger, log_context
from core.models.cache_entry import CacheEntry
from core.timestamps import elapsed_ms, utcnow
from infrastructure.locking import SingleFlight
from repositories import CacheRepository
from services.sync_service import QuestSyncService, SyncResult

logger = get_logger(__name__, ComponentType.SERVICE)


def is_stale(updated_at: datetime, now: datetime, threshold_ms: int) -> bool:
    """True once the entry is at least threshold_ms old."""
    return elapsed_ms(updated_at, now) >= threshold_ms


class CatalogCacheService:
    """Staleness gate in front of QuestSyncService."""

    def __init__(
        self,
        settings: Settings,
        sync_service: QuestSyncService,
        cache_repo: CacheRepository,
        single_flight: Optional[SingleFlight] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings
        self.sync_service = sync_service
        self.cache_repo = cache_repo
        self.single_flight = single_flight or SingleFlight()
        self.clock = clock

    @property
    def cache_key(self) -> str:
        return self.settings.cache.cache_key

    @property
    def threshold_ms(self) -> int:
        return self.settings.cache.duration_ms

    def _is_fresh(self, entry: Optional[CacheEntry]) -> bool:
        return entry is not None and not is_stale(
            entry.updated_at, self.clock(), self.threshold_ms
        )

    async def get_catalog(self) -> Dict[str, Any]:
        """
        Return the catalog document, refreshing it first if stale.

        Raises:
            ProviderFetchError, MappingError, StorageError from the sync cycle
        """
        with log_context(cache_key=self.cache_key):
            entry = await self.cache_repo.get(self.cache_key)
            if self._is_fresh(entry):
                logger.debug("Serving cached catalog")
                return entry.data

            async with self.single_flight.hold(self.cache_key):
                # Another caller may have refreshed while we waited
                entry = await self.cache_repo.get(self.cache_key)
                if self._is_fresh(entry):
                    logger.debug("Catalog refreshed by a concurrent request")
                    return entry.data

                reason = "absent" if entry is None else "stale"
                logger.info(f"Cached catalog {reason}, running sync cycle")
                result = await self.sync_service.run_cycle()
                return result.document

    async def refresh(self) -> SyncResult:
        """Run one sync cycle unconditionally (startup sync)."""
        with log_context(cache_key=self.cache_key):
            async with self.single_flight.hold(self.cache_key):
                return await self.sync_service.run_cycle()


__all__ = ["CatalogCacheService", "is_stale"]
