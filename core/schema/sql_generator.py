# ============================================================================
# PYDANTIC TO SQL GENERATOR
# ============================================================================
# STATUS: Core - DDL generation from Pydantic models
# PURPOSE: Generate PostgreSQL CREATE statements for the quest mirror tables
# CREATED: 19 OCT 2026
# EXPORTS: PydanticToSQL
# DEPENDENCIES: pydantic, psycopg
# ============================================================================
"""
Pydantic to PostgreSQL Schema Generator.

Pydantic table models are the SINGLE SOURCE OF TRUTH for schema.

Model Metadata Convention:
    Models define SQL metadata via ClassVar attributes:
    - __sql_table__: Table name
    - __sql_schema__: Schema name
    - __sql_primary_key__: Primary key column(s) - string or list
    - __sql_foreign_keys__: Dict of {column: "schema.table(column)"}
    - __sql_indexes__: List of index definitions (tuple or dict)
    - __sql_unique__: List of (name, columns) unique indexes
    - __sql_serial_columns__: Columns that should be BIGSERIAL

Usage:
    generator = PydanticToSQL(schema_name="questmirror")
    for stmt in generator.generate_all():
        await conn.execute(stmt)
"""

import re
import logging
from datetime import datetime
from typing import Any, Dict, List, Type, Union, get_args, get_origin

from psycopg import sql
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from core.schema.ddl_utils import IndexBuilder, TriggerBuilder, SchemaUtils

logger = logging.getLogger(__name__)


class PydanticToSQL:
    """
    Convert Pydantic models to PostgreSQL DDL statements.

    Analyzes Pydantic models with __sql_* metadata and generates
    corresponding PostgreSQL CREATE TABLE statements.
    """

    TYPE_MAP = {
        str: "VARCHAR",
        int: "INTEGER",
        float: "DOUBLE PRECISION",
        bool: "BOOLEAN",
        datetime: "TIMESTAMPTZ",
        dict: "JSONB",
        Dict: "JSONB",
        list: "JSONB",
        List: "JSONB",
    }

    def __init__(self, schema_name: str = "questmirror"):
        self.schema_name = schema_name

    # =========================================================================
    # METADATA EXTRACTION
    # =========================================================================

    @staticmethod
    def get_model_metadata(model: Type[BaseModel]) -> Dict[str, Any]:
        """
        Extract SQL DDL metadata from a Pydantic model.

        Returns:
            Dict with table, schema, primary_key, foreign_keys, indexes,
            unique, serial_columns
        """
        def get_attr(name: str, default=None):
            return getattr(model, f"__{name}__", default)

        metadata = {
            "table": get_attr("sql_table"),
            "schema": get_attr("sql_schema", "questmirror"),
            "primary_key": get_attr("sql_primary_key", []),
            "foreign_keys": get_attr("sql_foreign_keys", {}),
            "indexes": get_attr("sql_indexes", []),
            "unique": get_attr("sql_unique", []),
            "serial_columns": get_attr("sql_serial_columns", []),
        }

        if isinstance(metadata["primary_key"], str):
            metadata["primary_key"] = [metadata["primary_key"]]

        return metadata

    # =========================================================================
    # TYPE CONVERSION
    # =========================================================================

    def python_type_to_sql(self, field_type: Type, field_info: FieldInfo) -> str:
        """
        Convert Python type to PostgreSQL type.

        Opaque payloads (``Any``) and containers map to JSONB.
        """
        actual_type = field_type
        origin = get_origin(field_type)

        if origin is Union:
            args = [a for a in get_args(field_type) if a is not type(None)]
            actual_type = args[0] if len(args) == 1 else Any
            origin = get_origin(actual_type)

        if origin in (dict, Dict, list, List) or actual_type is Any:
            return "JSONB"

        if actual_type == str:
            for constraint in getattr(field_info, "metadata", None) or []:
                max_length = getattr(constraint, "max_length", None)
                if max_length is not None:
                    return f"VARCHAR({max_length})"
            return "TEXT"

        return self.TYPE_MAP.get(actual_type, "JSONB")

    @staticmethod
    def _is_optional(field_type: Type) -> bool:
        if get_origin(field_type) is Union:
            return type(None) in get_args(field_type)
        return False

    # =========================================================================
    # TABLE GENERATION
    # =========================================================================

    def generate_table(self, model: Type[BaseModel]) -> sql.Composed:
        """
        Generate CREATE TABLE DDL from a Pydantic model.

        Raises:
            ValueError: model has no __sql_table__
        """
        meta = self.get_model_metadata(model)
        table_name = meta["table"]
        schema_name = meta["schema"]
        primary_key = meta["primary_key"]
        serial_columns = meta["serial_columns"]

        if not table_name:
            raise ValueError(f"Model {model.__name__} missing __sql_table__ attribute")

        logger.debug(f"Generating table {schema_name}.{table_name} from {model.__name__}")

        columns = []
        constraints = []

        for field_name, field_info in model.model_fields.items():
            field_type = field_info.annotation

            if field_name in serial_columns:
                columns.append(
                    sql.SQL("{} BIGSERIAL").format(sql.Identifier(field_name))
                )
                continue

            sql_type_str = self.python_type_to_sql(field_type, field_info)
            column_parts = [sql.Identifier(field_name), sql.SQL(" " + sql_type_str)]

            if not self._is_optional(field_type) and field_name not in primary_key:
                column_parts.append(sql.SQL(" NOT NULL"))

            if field_name in ("created_at", "updated_at"):
                column_parts.append(sql.SQL(" DEFAULT NOW()"))
            elif isinstance(field_info.default, bool):
                column_parts.append(sql.SQL(" DEFAULT true" if field_info.default else " DEFAULT false"))
            elif isinstance(field_info.default, (int, str)) and field_info.default is not None:
                column_parts.extend([sql.SQL(" DEFAULT "), sql.Literal(field_info.default)])

            columns.append(sql.SQL("").join(column_parts))

        if primary_key:
            constraints.append(
                sql.SQL("PRIMARY KEY ({})").format(
                    sql.SQL(", ").join(sql.Identifier(col) for col in primary_key)
                )
            )

        for fk_column, fk_reference in meta["foreign_keys"].items():
            match = re.match(r"(\w+)\.(\w+)\((\w+)\)", fk_reference)
            if match:
                ref_schema, ref_table, ref_column = match.groups()
                constraints.append(
                    sql.SQL("FOREIGN KEY ({}) REFERENCES {}.{} ({}) ON DELETE CASCADE").format(
                        sql.Identifier(fk_column),
                        sql.Identifier(ref_schema),
                        sql.Identifier(ref_table),
                        sql.Identifier(ref_column)
                    )
                )

        return sql.SQL("CREATE TABLE IF NOT EXISTS {}.{} ({})").format(
            sql.Identifier(schema_name),
            sql.Identifier(table_name),
            sql.SQL(", ").join(columns + constraints)
        )

    # =========================================================================
    # INDEX GENERATION
    # =========================================================================

    def generate_indexes(self, model: Type[BaseModel]) -> List[sql.Composed]:
        """
        Generate CREATE INDEX / CREATE UNIQUE INDEX statements for a model.
        """
        meta = self.get_model_metadata(model)
        table_name = meta["table"]
        schema_name = meta["schema"]

        result = []

        for name, columns in meta["unique"]:
            result.append(IndexBuilder.unique(schema_name, table_name, columns, name=name))

        for idx_def in meta["indexes"]:
            # (name, columns) or (name, columns, partial_where)
            if isinstance(idx_def, tuple):
                name = idx_def[0]
                columns = idx_def[1] if len(idx_def) > 1 else []
                partial_where = idx_def[2] if len(idx_def) > 2 else None
                descending = False
            elif isinstance(idx_def, dict):
                name = idx_def.get("name")
                columns = idx_def.get("columns", [])
                partial_where = idx_def.get("partial_where")
                descending = idx_def.get("descending", False)
            else:
                continue

            if not columns or not name:
                continue

            result.append(IndexBuilder.btree(
                schema_name, table_name, columns,
                name=name,
                partial_where=partial_where,
                descending=descending,
            ))

        return result

    # =========================================================================
    # COMPLETE SCHEMA GENERATION
    # =========================================================================

    def table_models(self) -> List[Type[BaseModel]]:
        """Table models in dependency order (parents before children)."""
        from core.models import (
            Quest, QuestAssets, QuestTask, QuestReward, QuestFeature, CacheEntry,
        )
        return [Quest, QuestAssets, QuestTask, QuestReward, QuestFeature, CacheEntry]

    def expected_tables(self) -> List[str]:
        return [self.get_model_metadata(m)["table"] for m in self.table_models()]

    def generate_all(self) -> List[sql.Composed]:
        """
        Generate complete DDL for all quest mirror tables.

        Returns:
            List of sql.Composed statements ready for execution
        """
        models = self.table_models()

        statements = [
            SchemaUtils.create_schema(self.schema_name),
            SchemaUtils.set_search_path(self.schema_name),
        ]

        for model in models:
            statements.append(self.generate_table(model))

        for model in models:
            statements.extend(self.generate_indexes(model))

        statements.append(TriggerBuilder.updated_at_function(self.schema_name))
        statements.extend(TriggerBuilder.updated_at_trigger(self.schema_name, "quests"))

        logger.info(f"Generated {len(statements)} DDL statements for schema {self.schema_name}")
        return statements


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['PydanticToSQL']
