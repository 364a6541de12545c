# ============================================================================
# DATABASE INITIALIZER - INFRASTRUCTURE AS CODE
# ============================================================================
# STATUS: Infrastructure - Database initialization orchestrator
# PURPOSE: Bootstrap the questmirror schema from Pydantic models
# CREATED: 19 OCT 2026
# ============================================================================
"""
DatabaseInitializer - Infrastructure as Code for the quest mirror.

Provides a standardized workflow for initializing the questmirror schema:
1. Connection test
2. Schema, table, index and trigger creation (PydanticToSQL.generate_all)
3. Verification that every expected table exists

Pydantic models are the SINGLE SOURCE OF TRUTH for schema.
All statements are idempotent (IF NOT EXISTS / OR REPLACE).

Usage:
    from infrastructure import DatabaseInitializer

    initializer = DatabaseInitializer(pool)
    result = await initializer.initialize_all_async()

    # Dry run (generate SQL without executing)
    result = await initializer.initialize_all_async(dry_run=True)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from core.models.quest import SCHEMA
from core.schema import PydanticToSQL

logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class StepResult:
    """Result of a single initialization step."""
    name: str
    status: str  # 'success', 'failed', 'skipped'
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InitializationResult:
    """Complete result of database initialization."""
    schema_name: str
    timestamp: str
    success: bool
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "schema_name": self.schema_name,
            "timestamp": self.timestamp,
            "success": self.success,
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "message": s.message,
                    "error": s.error,
                    "details": s.details
                }
                for s in self.steps
            ],
            "errors": self.errors,
            "warnings": self.warnings,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == "success"]),
                "failed": len([s for s in self.steps if s.status == "failed"]),
                "skipped": len([s for s in self.steps if s.status == "skipped"])
            }
        }


# ============================================================================
# DATABASE INITIALIZER
# ============================================================================

class DatabaseInitializer:
    """
    Database initialization orchestrator for the quest mirror.

    All operations are idempotent (safe to run multiple times).
    """

    def __init__(self, pool: Optional[AsyncConnectionPool], schema_name: str = SCHEMA):
        self.pool = pool
        self.schema_name = schema_name
        self.generator = PydanticToSQL(schema_name=schema_name)

    @property
    def expected_tables(self) -> List[str]:
        return self.generator.expected_tables()

    def generate_ddl_statements(self) -> List:
        """DDL for the whole schema, in execution order."""
        return self.generator.generate_all()

    async def initialize_all_async(self, dry_run: bool = False) -> InitializationResult:
        """
        Run the full initialization workflow.

        Args:
            dry_run: Generate statements without executing them

        Returns:
            InitializationResult with per-step outcome
        """
        result = InitializationResult(
            schema_name=self.schema_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            success=False,
        )

        logger.info("=" * 70)
        logger.info("DATABASE INITIALIZATION")
        logger.info(f"   Schema: {self.schema_name}")
        logger.info(f"   Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")
        logger.info("=" * 70)

        if not dry_run:
            step_result = await self._test_connection_async()
            result.steps.append(step_result)
            if step_result.status == "failed":
                result.errors.append(f"Connection failed: {step_result.error}")
                return result

        step_result = await self._deploy_schema_async(dry_run=dry_run)
        result.steps.append(step_result)
        if step_result.status == "failed":
            result.errors.append(f"Schema deployment failed: {step_result.error}")

        if not dry_run and step_result.status == "success":
            step_result = await self._verify_tables_async()
            result.steps.append(step_result)
            if step_result.status == "failed":
                result.warnings.append(f"Verification issue: {step_result.error}")

        critical_failures = [
            s for s in result.steps
            if s.status == "failed" and s.name != "verify_tables"
        ]
        result.success = len(critical_failures) == 0

        summary = result.to_dict()["summary"]
        logger.info("=" * 70)
        logger.info(f"INITIALIZATION {'COMPLETE' if result.success else 'FAILED'}")
        logger.info(f"   Steps: {summary['successful']} succeeded, {summary['failed']} failed")
        logger.info("=" * 70)

        return result

    async def _test_connection_async(self) -> StepResult:
        step = StepResult(name="test_connection", status="pending")

        logger.info("Step: Testing database connection...")

        try:
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    "SELECT version() as version, current_database() as db"
                )
                row = await result.fetchone()

                step.status = "success"
                step.message = f"Connected to {row['db']}"
                step.details = {
                    "version": row["version"][:50] + "...",
                    "database": row["db"],
                }

        except psycopg.Error as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Connection failed: {e}"
            logger.error(f"Connection test failed: {e}")

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    async def _deploy_schema_async(self, dry_run: bool = False) -> StepResult:
        step = StepResult(name="deploy_schema", status="pending")

        logger.info(f"Step: Deploying {self.schema_name} schema...")

        statements = self.generate_ddl_statements()
        logger.info(f"   Generated {len(statements)} DDL statements from Pydantic models")

        if dry_run:
            step.status = "success"
            step.message = f"[DRY RUN] Would execute {len(statements)} statements"
            step.details = {"statements_count": len(statements)}
            return step

        try:
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    for stmt in statements:
                        await conn.execute(stmt)

            step.status = "success"
            step.message = f"Deployed {len(statements)} statements"
            step.details = {
                "statements_executed": len(statements),
                "schema": self.schema_name,
            }

        except psycopg.Error as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Schema deployment failed: {e}"
            logger.error(f"Schema deployment failed: {e}")

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    async def _verify_tables_async(self) -> StepResult:
        step = StepResult(name="verify_tables", status="pending")

        logger.info("Step: Verifying tables...")

        try:
            existing = await self.get_tables_in_schema()

            missing = [t for t in self.expected_tables if t not in existing]

            if missing:
                step.status = "failed"
                step.error = f"Missing tables: {missing}"
                step.message = f"Verification failed: {len(missing)} tables missing"
            else:
                step.status = "success"
                step.message = f"All {len(self.expected_tables)} expected tables exist"

            step.details = {
                "expected": self.expected_tables,
                "existing": existing,
                "missing": missing,
            }

        except psycopg.Error as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Verification failed: {e}"

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    async def get_tables_in_schema(self) -> List[str]:
        """Names of the base tables currently present in the schema."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                """
                SELECT table_name FROM information_schema.tables
                WHERE table_schema = %s AND table_type = 'BASE TABLE'
                ORDER BY table_name
                """,
                (self.schema_name,),
            )
            rows = await result.fetchall()
            return [row["table_name"] for row in rows]


__all__ = [
    "DatabaseInitializer",
    "InitializationResult",
    "StepResult",
]
