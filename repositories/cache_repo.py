# ============================================================================
# CACHE REPOSITORY
# ============================================================================
# STATUS: Domain - Cached catalog document
# PURPOSE: Database access for the cache_store table
# CREATED: 19 OCT 2026
# ============================================================================
"""
Cache Repository

Key/value access to the last reconstructed catalog document.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.models.cache_entry import CacheEntry
from core.timestamps import utcnow
from .database import TABLE_CACHE_STORE, storage_errors

logger = logging.getLogger(__name__)


class CacheRepository:
    """Repository for CacheEntry rows."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get the cached document for a key, if any."""
        async with storage_errors(f"read cache {key}"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL(
                        "SELECT id, data, updated_at FROM {} WHERE id = %s"
                    ).format(TABLE_CACHE_STORE),
                    (key,),
                )
                row = await result.fetchone()
                return CacheEntry(**row) if row else None

    async def put(
        self,
        key: str,
        document: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> CacheEntry:
        """Insert or overwrite the cached document, stamping updated_at."""
        entry = CacheEntry(id=key, data=document, updated_at=now or utcnow())
        async with storage_errors(f"write cache {key}"):
            async with self.pool.connection() as conn:
                await conn.execute(
                    sql.SQL("""
                        INSERT INTO {} (id, data, updated_at)
                        VALUES (%s, %s, %s)
                        ON CONFLICT (id) DO UPDATE
                        SET data = EXCLUDED.data, updated_at = EXCLUDED.updated_at
                    """).format(TABLE_CACHE_STORE),
                    (entry.id, Json(entry.data), entry.updated_at),
                )
        logger.info(f"Cached catalog under '{key}'")
        return entry
