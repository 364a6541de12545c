# ============================================================================
# QUEST REPOSITORY
# ============================================================================
# STATUS: Domain - Normalized quest store
# PURPOSE: Database access for quests and their child tables
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Repository

Persists one quest as a root row plus its asset bundle, tasks, rewards
and features, and hydrates it back into a CompleteQuest.

Child collections are replaced (delete then insert) inside a transaction,
so readers never observe a half-replaced quest. All SQL uses psycopg
sql.SQL composition for injection safety.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from psycopg import AsyncConnection, sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.errors import QuestNotFoundError
from core.models.quest import (
    CompleteQuest,
    Quest,
    QuestAssets,
    QuestFeature,
    QuestReward,
    QuestTask,
)
from core.timestamps import age_cutoff, utcnow
from .database import (
    TABLE_QUESTS,
    TABLE_QUEST_ASSETS,
    TABLE_QUEST_TASKS,
    TABLE_QUEST_REWARDS,
    TABLE_QUEST_FEATURES,
    storage_errors,
)

logger = logging.getLogger(__name__)


# Columns written on insert; created_at/updated_at are left to the database
QUEST_COLUMNS = [
    name for name in Quest.model_fields if name not in ("created_at", "updated_at")
]


def _json_or_none(value: Any) -> Optional[Json]:
    return Json(value) if value is not None else None


class QuestRepository:
    """Repository for quests and their child rows."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    # =========================================================================
    # WRITES
    # =========================================================================

    async def upsert_quest(self, quest: Quest) -> None:
        """Insert a quest, or refresh every scalar if the id exists."""
        async with storage_errors("upsert quest"):
            async with self.pool.connection() as conn:
                await self._upsert_quest(conn, quest)

    async def upsert_assets(self, quest_id: str, assets: QuestAssets) -> None:
        """Insert or update the asset bundle of a quest."""
        async with storage_errors("upsert assets"):
            async with self.pool.connection() as conn:
                await self._upsert_assets(conn, quest_id, assets)

    async def replace_tasks(self, quest_id: str, tasks: List[QuestTask]) -> None:
        """Replace every task of a quest."""
        async with storage_errors("replace tasks"):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    await self._replace_tasks(conn, quest_id, tasks)

    async def replace_rewards(self, quest_id: str, rewards: List[QuestReward]) -> None:
        """Replace every reward of a quest, keeping list order."""
        async with storage_errors("replace rewards"):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    await self._replace_rewards(conn, quest_id, rewards)

    async def replace_features(self, quest_id: str, features: List[QuestFeature]) -> None:
        """Replace every feature code of a quest."""
        async with storage_errors("replace features"):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    await self._replace_features(conn, quest_id, features)

    async def save_complete(
        self,
        quest: Quest,
        assets: Optional[QuestAssets],
        tasks: List[QuestTask],
        rewards: List[QuestReward],
        features: List[QuestFeature],
    ) -> None:
        """
        Write a quest and all of its children in one transaction.

        Either every row lands or none does.
        """
        async with storage_errors(f"save quest {quest.id}"):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    await self._upsert_quest(conn, quest)
                    if assets is not None:
                        await self._upsert_assets(conn, quest.id, assets)
                    await self._replace_tasks(conn, quest.id, tasks)
                    await self._replace_rewards(conn, quest.id, rewards)
                    await self._replace_features(conn, quest.id, features)

        logger.debug(
            f"Saved quest {quest.id} "
            f"(tasks={len(tasks)}, rewards={len(rewards)}, features={len(features)})"
        )

    async def _upsert_quest(self, conn: AsyncConnection, quest: Quest) -> None:
        values = quest.model_dump(include=set(QUEST_COLUMNS))
        await conn.execute(
            sql.SQL("""
                INSERT INTO {table} ({columns}) VALUES ({values})
                ON CONFLICT (id) DO UPDATE SET {updates}, updated_at = NOW()
            """).format(
                table=TABLE_QUESTS,
                columns=sql.SQL(", ").join(sql.Identifier(c) for c in QUEST_COLUMNS),
                values=sql.SQL(", ").join(sql.Placeholder(c) for c in QUEST_COLUMNS),
                updates=sql.SQL(", ").join(
                    sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c))
                    for c in QUEST_COLUMNS
                    if c != "id"
                ),
            ),
            values,
        )

    async def _upsert_assets(
        self, conn: AsyncConnection, quest_id: str, assets: QuestAssets
    ) -> None:
        fields = list(QuestAssets.MEDIA_FIELDS)
        params: Dict[str, Any] = assets.media()
        params["quest_id"] = quest_id
        await conn.execute(
            sql.SQL("""
                INSERT INTO {table} (quest_id, {columns}) VALUES (%(quest_id)s, {values})
                ON CONFLICT (quest_id) DO UPDATE SET {updates}
            """).format(
                table=TABLE_QUEST_ASSETS,
                columns=sql.SQL(", ").join(sql.Identifier(c) for c in fields),
                values=sql.SQL(", ").join(sql.Placeholder(c) for c in fields),
                updates=sql.SQL(", ").join(
                    sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c))
                    for c in fields
                ),
            ),
            params,
        )

    async def _replace_tasks(
        self, conn: AsyncConnection, quest_id: str, tasks: List[QuestTask]
    ) -> None:
        await conn.execute(
            sql.SQL("DELETE FROM {} WHERE quest_id = %s").format(TABLE_QUEST_TASKS),
            (quest_id,),
        )
        if not tasks:
            return
        async with conn.cursor() as cur:
            await cur.executemany(
                sql.SQL("""
                    INSERT INTO {} (quest_id, task_type, target, applications, external_ids)
                    VALUES (%s, %s, %s, %s, %s)
                """).format(TABLE_QUEST_TASKS),
                [
                    (
                        quest_id,
                        task.task_type,
                        task.target,
                        _json_or_none(task.applications),
                        _json_or_none(task.external_ids),
                    )
                    for task in tasks
                ],
            )

    async def _replace_rewards(
        self, conn: AsyncConnection, quest_id: str, rewards: List[QuestReward]
    ) -> None:
        await conn.execute(
            sql.SQL("DELETE FROM {} WHERE quest_id = %s").format(TABLE_QUEST_REWARDS),
            (quest_id,),
        )
        if not rewards:
            return
        # executemany inserts in list order, so serial ids preserve it
        async with conn.cursor() as cur:
            await cur.executemany(
                sql.SQL("""
                    INSERT INTO {} (
                        quest_id, reward_type, sku_id, reward_name,
                        reward_name_with_article, orb_quantity,
                        redemption_instructions, platform
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """).format(TABLE_QUEST_REWARDS),
                [
                    (
                        quest_id,
                        reward.reward_type,
                        reward.sku_id,
                        reward.reward_name,
                        reward.reward_name_with_article,
                        reward.orb_quantity,
                        _json_or_none(reward.redemption_instructions),
                        reward.platform,
                    )
                    for reward in rewards
                ],
            )

    async def _replace_features(
        self, conn: AsyncConnection, quest_id: str, features: List[QuestFeature]
    ) -> None:
        await conn.execute(
            sql.SQL("DELETE FROM {} WHERE quest_id = %s").format(TABLE_QUEST_FEATURES),
            (quest_id,),
        )
        if not features:
            return
        async with conn.cursor() as cur:
            await cur.executemany(
                sql.SQL(
                    "INSERT INTO {} (quest_id, feature_id) VALUES (%s, %s)"
                ).format(TABLE_QUEST_FEATURES),
                [(quest_id, feature.feature_id) for feature in features],
            )

    # =========================================================================
    # READS
    # =========================================================================

    async def list_known_ids(self) -> Set[str]:
        """Every quest id already stored."""
        async with storage_errors("list quest ids"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("SELECT id FROM {}").format(TABLE_QUESTS)
                )
                rows = await result.fetchall()
                return {row["id"] for row in rows}

    async def get_complete(self, quest_id: str) -> CompleteQuest:
        """
        Load one quest with all child collections.

        Raises:
            QuestNotFoundError: no quest with this id
        """
        async with storage_errors(f"load quest {quest_id}"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("SELECT * FROM {} WHERE id = %s").format(TABLE_QUESTS),
                    (quest_id,),
                )
                row = await result.fetchone()
                if row is None:
                    raise QuestNotFoundError(quest_id)
                quests = [Quest(**row)]
                return (await self._hydrate(conn, quests))[0]

    async def list_recent(
        self,
        max_age_days: int,
        now: Optional[datetime] = None,
    ) -> List[CompleteQuest]:
        """
        Quests whose expiry is within max_age_days of now (inclusive),
        newest start first, fully hydrated.
        """
        cutoff = age_cutoff(now or utcnow(), max_age_days)
        async with storage_errors("list recent quests"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                        SELECT * FROM {}
                        WHERE expires_at >= %s
                        ORDER BY starts_at DESC, id
                    """).format(TABLE_QUESTS),
                    (cutoff,),
                )
                rows = await result.fetchall()
                quests = [Quest(**row) for row in rows]
                return await self._hydrate(conn, quests)

    async def _hydrate(
        self, conn: AsyncConnection, quests: List[Quest]
    ) -> List[CompleteQuest]:
        """Attach child rows to quests, one query per child table."""
        if not quests:
            return []
        ids = [q.id for q in quests]

        assets_rows = await self._fetch_children(conn, TABLE_QUEST_ASSETS, ids)
        task_rows = await self._fetch_children(conn, TABLE_QUEST_TASKS, ids)
        reward_rows = await self._fetch_children(conn, TABLE_QUEST_REWARDS, ids)
        feature_rows = await self._fetch_children(conn, TABLE_QUEST_FEATURES, ids)

        assets = {row["quest_id"]: QuestAssets(**row) for row in assets_rows}
        tasks = _group(task_rows, QuestTask)
        rewards = _group(reward_rows, QuestReward)
        features = _group(feature_rows, QuestFeature)

        return [
            CompleteQuest(
                quest=q,
                assets=assets.get(q.id),
                tasks=tasks.get(q.id, []),
                rewards=rewards.get(q.id, []),
                features=features.get(q.id, []),
            )
            for q in quests
        ]

    async def _fetch_children(
        self, conn: AsyncConnection, table: sql.Identifier, ids: List[str]
    ) -> List[Dict[str, Any]]:
        result = await conn.execute(
            sql.SQL("SELECT * FROM {} WHERE quest_id = ANY(%s) ORDER BY id").format(table),
            (ids,),
        )
        return await result.fetchall()


def _group(rows: Iterable[Dict[str, Any]], model) -> Dict[str, list]:
    grouped: Dict[str, list] = {}
    for row in rows:
        grouped.setdefault(row["quest_id"], []).append(model(**row))
    return grouped
