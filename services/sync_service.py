# ============================================================================
# QUEST SYNC SERVICE
# ============================================================================
# STATUS: Domain service - Fetch, ingest, reconstruct, cache
# PURPOSE: One refresh cycle of the mirrored quest catalog
# CREATED: 19 OCT 2026
# ============================================================================
"""
QuestSyncService

One sync cycle:

    1. fetch the provider catalog (single attempt)
    2. validate it; a malformed document stops the cycle before any write
    3. ingest quests whose id is not stored yet, in provider order
    4. rebuild the catalog from quests that expired within the age window
    5. write the rebuilt document to the cache

Known quest ids are never re-ingested, even if the provider has changed
them since. Ingest is fail-fast: the first failing quest aborts the cycle,
quests ingested before it stay committed, and the cache is not written.

Pattern: Constructor injection of AsyncConnectionPool, repos instantiated
in __init__ (overridable for tests), async methods.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from psycopg_pool import AsyncConnectionPool

from core.config import Settings
from core.errors import MappingError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.provider import ProviderCatalog
from repositories import CacheRepository, QuestRepository
from services.provider_client import ProviderClient
from services.quest_ingest import QuestIngestService
from services.quest_reconstruction import reconstruct_catalog

logger = get_logger(__name__, ComponentType.SERVICE)


@dataclass
class SyncResult:
    """Outcome of one sync cycle."""
    new_count: int
    skipped_count: int
    document: Dict[str, Any] = field(default_factory=dict)
    ingested_ids: List[str] = field(default_factory=list)


def parse_catalog(raw: Dict[str, Any]) -> ProviderCatalog:
    """Validate the whole provider document, raising MappingError on mismatch."""
    try:
        return ProviderCatalog.model_validate(raw)
    except ValidationError as e:
        raise MappingError(f"Provider catalog does not match the expected schema: {e}") from e


class QuestSyncService:
    """Runs provider → store → cache refresh cycles."""

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool],
        settings: Settings,
        provider_client: Optional[ProviderClient] = None,
        quest_repo: Optional[QuestRepository] = None,
        cache_repo: Optional[CacheRepository] = None,
    ):
        self.pool = pool
        self.settings = settings
        self.provider_client = provider_client or ProviderClient(settings.provider)
        self.quest_repo = quest_repo or QuestRepository(pool)
        self.cache_repo = cache_repo or CacheRepository(pool)
        self.ingest_service = QuestIngestService(pool, quest_repo=self.quest_repo)

    @property
    def cache_key(self) -> str:
        return self.settings.cache.cache_key

    async def run_cycle(self) -> SyncResult:
        """
        Execute one full sync cycle.

        Raises:
            ProviderFetchError: provider unreachable or non-2xx
            MappingError: catalog or one new quest does not map
            StorageError: a read or write against the store failed
        """
        sync_id = uuid.uuid4().hex[:12]

        with log_context(cache_key=self.cache_key, sync_id=sync_id):
            log_checkpoint("sync_started")

            raw = await self.provider_client.fetch_catalog()
            catalog = parse_catalog(raw)
            known = await self.quest_repo.list_known_ids()

            new_quests = []
            seen = set()
            for quest in catalog.quests:
                if quest.id in known or quest.id in seen:
                    continue
                seen.add(quest.id)
                new_quests.append(quest)

            skipped = len(catalog.quests) - len(new_quests)
            logger.info(
                f"Provider returned {len(catalog.quests)} quests: "
                f"{len(new_quests)} new, {skipped} already stored"
            )

            ingested = []
            for quest in new_quests:
                await self.ingest_service.ingest(quest)
                ingested.append(quest.id)

            log_checkpoint("sync_ingested", {"new": len(ingested), "skipped": skipped})

            recent = await self.quest_repo.list_recent(self.settings.catalog.quest_age_days)
            document = reconstruct_catalog(recent)
            await self.cache_repo.put(self.cache_key, document)

            log_checkpoint("cache_written", {"quests": len(document["quests"])})

        return SyncResult(
            new_count=len(ingested),
            skipped_count=skipped,
            document=document,
            ingested_ids=ingested,
        )


__all__ = ["QuestSyncService", "SyncResult", "parse_catalog"]
