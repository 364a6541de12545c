# ============================================================================
# DISTRIBUTED LOCKING SERVICE
# ============================================================================
# STATUS: Infrastructure - Concurrency control
# PURPOSE: Single-flight sync cycles via asyncio locks and PostgreSQL advisory locks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Distributed Locking Service

Two layers keep concurrent refreshes of one cache key from racing:

- Layer 1: per-key asyncio.Lock, coalescing callers inside one process
- Layer 2: PostgreSQL transaction-level advisory lock, coalescing
  processes that share the database

Advisory locks are:
- Fast (in-memory, no disk I/O)
- Auto-release on disconnect (crash-safe)
- 64-bit key space

Usage:
    from infrastructure.locking import LockService, SingleFlight

    flight = SingleFlight(LockService(pool))

    async with flight.hold("discord_quests"):
        if still_stale():
            await sync_service.run_cycle()
"""

import asyncio
import hashlib
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from psycopg_pool import AsyncConnectionPool

from repositories.database import storage_errors

logger = logging.getLogger(__name__)


class LockService:
    """
    PostgreSQL advisory locks keyed by cache key.

    Locks are transaction-level: they are held for as long as the
    connection context is open and released when it exits.
    """

    SYNC_LOCK_PREFIX = "questmirror:sync:"

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    @staticmethod
    def _hash_to_lock_id(key: str) -> int:
        """
        Convert string key to int64 for PostgreSQL advisory lock.

        Returns:
            Signed int64 suitable for pg_advisory_xact_lock
        """
        # First 8 bytes of SHA256, interpreted as signed int64
        h = hashlib.sha256(key.encode()).digest()[:8]
        return int.from_bytes(h, byteorder='big', signed=True)

    @asynccontextmanager
    async def sync_lock(self, cache_key: str):
        """
        Context manager holding the sync lock of one cache key.

        Blocks until the advisory lock is granted. The lock is released
        when the connection context commits on exit.

        Args:
            cache_key: Cache key being refreshed
        """
        lock_id = self._hash_to_lock_id(f"{self.SYNC_LOCK_PREFIX}{cache_key}")

        async with storage_errors(f"sync lock {cache_key}"):
            async with self.pool.connection() as conn:
                await conn.execute("SELECT pg_advisory_xact_lock(%s)", (lock_id,))
                logger.debug(f"Acquired sync lock for {cache_key} (lock_id={lock_id})")
                try:
                    yield
                finally:
                    logger.debug(f"Released sync lock for {cache_key}")


class SingleFlight:
    """
    Serializes work per key within the process and, when a LockService
    is given, across processes sharing the database.

    Waiters are admitted one at a time after the holder finishes, so
    callers must re-check whether the work is still needed once inside.
    """

    def __init__(self, lock_service: Optional[LockService] = None):
        self._lock_service = lock_service
        self._locks: Dict[str, asyncio.Lock] = {}

    def _local_lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, key: str):
        async with self._local_lock(key):
            if self._lock_service is None:
                yield
            else:
                async with self._lock_service.sync_lock(key):
                    yield


__all__ = ['LockService', 'SingleFlight']
