# ============================================================================
# DDL UTILITIES
# ============================================================================
# STATUS: Core - Shared SQL generation patterns
# PURPOSE: Index, unique, trigger and schema builders using psycopg.sql
# CREATED: 19 OCT 2026
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All methods return psycopg.sql.Composed objects for safe execution.
No string concatenation - full SQL composition for injection safety.

Usage:
    from core.schema.ddl_utils import IndexBuilder, TriggerBuilder

    idx = IndexBuilder.btree('questmirror', 'quests', ['expires_at'])
    await conn.execute(idx)
"""

from typing import List, Optional, Sequence, Union

from psycopg import sql


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """
    Builder for PostgreSQL index DDL statements.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def _normalize_columns(columns: Union[str, Sequence[str]]) -> List[str]:
        """Convert single column or sequence to list."""
        if isinstance(columns, str):
            return [columns]
        return list(columns)

    @staticmethod
    def _generate_index_name(
        table: str,
        columns: List[str],
        prefix: str = 'idx',
        suffix: str = ''
    ) -> str:
        """Generate conventional index name."""
        col_part = '_'.join(columns)
        name = f"{prefix}_{table}_{col_part}"
        if suffix:
            name = f"{name}_{suffix}"
        return name

    @staticmethod
    def btree(
        schema: str,
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None,
        descending: bool = False,
        partial_where: Optional[str] = None
    ) -> sql.Composed:
        """
        Create B-tree index.

        Args:
            schema: Schema name
            table: Table name
            columns: Column name(s) to index
            name: Optional custom index name
            descending: If True, create DESC index
            partial_where: Optional WHERE clause for partial index
        """
        cols = IndexBuilder._normalize_columns(columns)
        idx_name = name or IndexBuilder._generate_index_name(
            table, cols, suffix='desc' if descending else ''
        )

        if descending:
            col_parts = [
                sql.SQL("{} DESC").format(sql.Identifier(c))
                for c in cols
            ]
        else:
            col_parts = [sql.Identifier(c) for c in cols]

        stmt = sql.SQL("CREATE INDEX IF NOT EXISTS {name} ON {schema}.{table} ({columns})").format(
            name=sql.Identifier(idx_name),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table),
            columns=sql.SQL(", ").join(col_parts)
        )

        if partial_where:
            stmt = sql.SQL("{} WHERE {}").format(stmt, sql.SQL(partial_where))

        return stmt

    @staticmethod
    def unique(
        schema: str,
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None,
    ) -> sql.Composed:
        """
        Create unique index.

        ON CONFLICT targets in the repositories rely on these.
        """
        cols = IndexBuilder._normalize_columns(columns)
        idx_name = name or IndexBuilder._generate_index_name(table, cols, prefix='idx_unique')

        return sql.SQL(
            "CREATE UNIQUE INDEX IF NOT EXISTS {name} ON {schema}.{table} ({columns})"
        ).format(
            name=sql.Identifier(idx_name),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table),
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in cols)
        )


# ============================================================================
# TRIGGER BUILDER
# ============================================================================

class TriggerBuilder:
    """
    Builder for PostgreSQL trigger DDL statements.
    """

    @staticmethod
    def updated_at_function(schema: str) -> sql.Composed:
        """
        Create the update_updated_at_column() trigger function.
        """
        return sql.SQL("""
            CREATE OR REPLACE FUNCTION {schema}.update_updated_at_column()
            RETURNS TRIGGER
            LANGUAGE plpgsql
            AS $$
            BEGIN
                NEW.updated_at = NOW();
                RETURN NEW;
            END;
            $$
        """).format(schema=sql.Identifier(schema))

    @staticmethod
    def updated_at_trigger(
        schema: str,
        table: str,
        trigger_name: Optional[str] = None
    ) -> List[sql.Composed]:
        """
        Create trigger that calls update_updated_at_column() on UPDATE.

        Returns DROP + CREATE for idempotency.
        """
        trig_name = trigger_name or f"trg_{table}_updated_at"

        drop_stmt = sql.SQL("DROP TRIGGER IF EXISTS {name} ON {schema}.{table}").format(
            name=sql.Identifier(trig_name),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table)
        )

        create_stmt = sql.SQL("""
            CREATE TRIGGER {name}
            BEFORE UPDATE ON {schema}.{table}
            FOR EACH ROW
            EXECUTE FUNCTION {schema}.update_updated_at_column()
        """).format(
            name=sql.Identifier(trig_name),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table)
        )

        return [drop_stmt, create_stmt]


# ============================================================================
# SCHEMA UTILITIES
# ============================================================================

class SchemaUtils:
    """
    Utility methods for schema-level DDL operations.
    """

    @staticmethod
    def create_schema(schema: str) -> sql.Composed:
        return sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))

    @staticmethod
    def set_search_path(schema: str, include_public: bool = True) -> sql.Composed:
        """
        Set search_path to include schema.
        """
        if include_public:
            return sql.SQL("SET search_path TO {}, public").format(
                sql.Identifier(schema)
            )
        return sql.SQL("SET search_path TO {}").format(sql.Identifier(schema))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'IndexBuilder',
    'TriggerBuilder',
    'SchemaUtils',
]
