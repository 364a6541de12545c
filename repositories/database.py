# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================
# STATUS: Core - Async PostgreSQL connection management
# PURPOSE: Provide connection pooling for psycopg3 async
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database Connection Pool

Manages async PostgreSQL connections using psycopg3 and psycopg_pool.
Singleton pattern ensures one pool per application.

Connection settings come from DATABASE_URL or the POSTGRES_* variables.

Usage:
    from repositories.database import get_pool

    pool = await get_pool()
    async with pool.connection() as conn:
        result = await conn.execute("SELECT 1")
"""

import os
import logging
from typing import Optional
from contextlib import asynccontextmanager

import psycopg
from psycopg import sql as psycopg_sql
from psycopg_pool import AsyncConnectionPool

from core.errors import StorageError
from core.models.quest import SCHEMA

logger = logging.getLogger(__name__)

# Global pool instance
_pool: Optional[AsyncConnectionPool] = None


def get_connection_string() -> str:
    """
    Get database connection string from environment.

    Priority:
    1. DATABASE_URL environment variable
    2. Individual POSTGRES_* components

    Returns:
        PostgreSQL connection string
    """
    if url := os.environ.get("DATABASE_URL"):
        return url

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    name = os.environ.get("POSTGRES_DB", "postgres")
    user = os.environ.get("POSTGRES_USER", "postgres")
    password = os.environ.get("POSTGRES_PASSWORD", "")
    sslmode = os.environ.get("POSTGRES_SSLMODE", "prefer")

    return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def _safe_conninfo(conninfo: str) -> str:
    """Strip credentials before logging."""
    if "@" in conninfo:
        return conninfo.split("@")[-1]
    if "password=" in conninfo:
        return conninfo.split("password=")[0] + "password=***"
    return conninfo


async def init_pool(
    min_size: int = 1,
    max_size: int = 10,
    connection_string: Optional[str] = None,
) -> AsyncConnectionPool:
    """
    Initialize the global connection pool.

    Args:
        min_size: Minimum connections to maintain
        max_size: Maximum connections allowed
        connection_string: Override connection string (defaults to env)

    Returns:
        AsyncConnectionPool instance
    """
    global _pool

    if _pool is not None:
        logger.warning("Pool already initialized, returning existing pool")
        return _pool

    conninfo = connection_string or get_connection_string()
    logger.info(f"Initializing connection pool: {_safe_conninfo(conninfo)}")

    _pool = AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        open=False,
    )

    await _pool.open()
    logger.info(f"Connection pool opened (min={min_size}, max={max_size})")

    return _pool


async def get_pool() -> AsyncConnectionPool:
    """
    Get the global connection pool, initializing if needed.
    """
    global _pool

    if _pool is None:
        await init_pool()

    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Connection pool closed")


@asynccontextmanager
async def storage_errors(operation: str):
    """
    Re-raise driver failures as StorageError.

    Usage:
        async with storage_errors("upsert quest"):
            async with self.pool.connection() as conn:
                ...
    """
    try:
        yield
    except psycopg.Error as e:
        logger.error(f"Database error during {operation}: {e}")
        raise StorageError(f"Database error during {operation}: {e}") from e


# ============================================================================
# SCHEMA CONSTANTS
# ============================================================================

# Table identifiers, for use with psycopg sql.SQL().format()
TABLE_QUESTS = psycopg_sql.Identifier(SCHEMA, "quests")
TABLE_QUEST_ASSETS = psycopg_sql.Identifier(SCHEMA, "quest_assets")
TABLE_QUEST_TASKS = psycopg_sql.Identifier(SCHEMA, "quest_tasks")
TABLE_QUEST_REWARDS = psycopg_sql.Identifier(SCHEMA, "quest_rewards")
TABLE_QUEST_FEATURES = psycopg_sql.Identifier(SCHEMA, "quest_features")
TABLE_CACHE_STORE = psycopg_sql.Identifier(SCHEMA, "cache_store")
