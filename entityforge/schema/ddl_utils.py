# ============================================================================
# DDL UTILITIES
# ============================================================================
# STATUS: Core - Per-dialect type tables and literal rendering
# PURPOSE: Dialect capability table, identifier/literal quoting, index and
#          comment builders shared by the DDL generator
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: DialectSpec, DIALECTS, get_dialect_spec, IndexBuilder,
#          CommentBuilder, SchemaUtils, render_column_type, render_default
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

Every dialect is described by one DialectSpec: its type names, quoting,
boolean spelling and array capability. Generators never branch on a dialect
name; they read the DialectSpec.

Array capability per dialect:

    postgres  native arrays: arrayOf(string) -> TEXT[], nested -> TEXT[][]
    sqlite    no arrays: JSON text in a TEXT column (json_array_fallback)
    mysql     no arrays: JSON column (json_array_fallback)

With json_array_fallback disabled, arrays on sqlite/mysql raise
UnsupportedColumnTypeError instead of being serialized.

Usage:
    from entityforge.schema.ddl_utils import get_dialect_spec, IndexBuilder

    spec = get_dialect_spec("sqlite")
    spec.quote_identifier("User")          # '"User"'
    IndexBuilder.btree(spec, "User", ["email"])
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from entityforge.contracts import Dialect
from entityforge.errors import UnsupportedColumnTypeError, UnsupportedDialectError
from entityforge.models.column_types import (
    ColumnType,
    PrimitiveType,
    describe_column_type,
    element_type,
    is_array_column_type,
    parse_iso_instant,
)
from entityforge.models.entity import pascal_to_snake_case, thaw_value


# ============================================================================
# DIALECT SPECS
# ============================================================================

@dataclass(frozen=True)
class DialectSpec:
    """
    Capability table for one SQL dialect.
    """
    dialect: Dialect
    type_map: Dict[PrimitiveType, str]
    quote_char: str = '"'
    true_literal: str = "TRUE"
    false_literal: str = "FALSE"

    # Column type used to store arrays as JSON; None when arrays are native
    json_array_type: Optional[str] = None
    native_arrays: bool = False

    # Default-clause rendering for json values
    json_cast: str = ""               # appended after the literal, e.g. "::jsonb"
    json_parenthesize: bool = False   # MySQL requires expression defaults

    current_timestamp: str = "CURRENT_TIMESTAMP"
    index_if_not_exists: bool = True
    supports_schemas: bool = True
    inline_comments: bool = False
    comment_statements: bool = False
    notes: str = field(default="", compare=False)

    @property
    def name(self) -> str:
        return self.dialect.value

    def quote_identifier(self, name: str) -> str:
        """Quote an identifier, doubling embedded quote characters."""
        q = self.quote_char
        return f"{q}{name.replace(q, q + q)}{q}"

    def qualified_table(self, table: str, schema_name: Optional[str] = None) -> str:
        if schema_name and self.supports_schemas:
            return f"{self.quote_identifier(schema_name)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table)


POSTGRES = DialectSpec(
    dialect=Dialect.POSTGRES,
    type_map={
        PrimitiveType.STRING: "TEXT",
        PrimitiveType.NUMBER: "DOUBLE PRECISION",
        PrimitiveType.INTEGER: "INTEGER",
        PrimitiveType.BOOLEAN: "BOOLEAN",
        PrimitiveType.DATE: "TIMESTAMPTZ",
        PrimitiveType.JSON: "JSONB",
    },
    native_arrays=True,
    json_cast="::jsonb",
    comment_statements=True,
    notes="Native arrays (T[]); json as JSONB.",
)

SQLITE = DialectSpec(
    dialect=Dialect.SQLITE,
    type_map={
        PrimitiveType.STRING: "TEXT",
        PrimitiveType.NUMBER: "REAL",
        PrimitiveType.INTEGER: "INTEGER",
        PrimitiveType.BOOLEAN: "INTEGER",
        PrimitiveType.DATE: "TEXT",
        PrimitiveType.JSON: "TEXT",
    },
    true_literal="1",
    false_literal="0",
    json_array_type="TEXT",
    supports_schemas=False,
    notes="No arrays: serialized as JSON text. Booleans as 0/1, dates as ISO text.",
)

MYSQL = DialectSpec(
    dialect=Dialect.MYSQL,
    type_map={
        PrimitiveType.STRING: "VARCHAR(255)",
        PrimitiveType.NUMBER: "DOUBLE",
        PrimitiveType.INTEGER: "INTEGER",
        PrimitiveType.BOOLEAN: "BOOLEAN",
        PrimitiveType.DATE: "DATETIME(3)",
        PrimitiveType.JSON: "JSON",
    },
    quote_char="`",
    json_array_type="JSON",
    json_parenthesize=True,
    current_timestamp="CURRENT_TIMESTAMP(3)",
    index_if_not_exists=False,
    inline_comments=True,
    notes="No arrays: JSON column. Dates as UTC DATETIME(3).",
)

DIALECTS: Dict[Dialect, DialectSpec] = {
    Dialect.POSTGRES: POSTGRES,
    Dialect.SQLITE: SQLITE,
    Dialect.MYSQL: MYSQL,
}


def get_dialect_spec(dialect: Union[str, Dialect]) -> DialectSpec:
    """
    Resolve a dialect name or enum to its DialectSpec.

    Raises:
        UnsupportedDialectError: for anything outside the closed set
    """
    supported = [d.value for d in DIALECTS]
    if isinstance(dialect, str) and not isinstance(dialect, Dialect):
        dialect = dialect.strip().lower()
    try:
        key = Dialect(dialect)
    except ValueError:
        raise UnsupportedDialectError(dialect, supported) from None
    spec = DIALECTS.get(key)
    if spec is None:
        raise UnsupportedDialectError(dialect, supported)
    return spec


# ============================================================================
# TYPE RENDERING
# ============================================================================

def render_column_type(
    column_type: ColumnType,
    spec: DialectSpec,
    column: str,
    entity_name: Optional[str] = None,
    json_array_fallback: bool = True,
) -> str:
    """
    Map a column type to the dialect's native type name.

    Raises:
        UnsupportedColumnTypeError: array on a dialect without native arrays
            when the JSON fallback is disabled
    """
    if is_array_column_type(column_type):
        if spec.native_arrays:
            inner = render_column_type(
                element_type(column_type), spec, column, entity_name, json_array_fallback,
            )
            return f"{inner}[]"
        if json_array_fallback and spec.json_array_type:
            return spec.json_array_type
        raise UnsupportedColumnTypeError(
            column, describe_column_type(column_type), f"{spec.name} DDL", entity_name=entity_name,
        )

    sql_type = spec.type_map.get(column_type)
    if sql_type is None:
        raise UnsupportedColumnTypeError(
            column, describe_column_type(column_type), f"{spec.name} DDL", entity_name=entity_name,
        )
    return sql_type


# ============================================================================
# LITERAL RENDERING
# ============================================================================

def quote_string(value: str) -> str:
    """SQL string literal with doubled single quotes."""
    return "'" + value.replace("'", "''") + "'"


def _json_text(value: Any) -> str:
    return json.dumps(thaw_value(value), separators=(",", ":"), ensure_ascii=False)


def _render_json(value: Any, spec: DialectSpec) -> str:
    literal = quote_string(_json_text(value)) + spec.json_cast
    if spec.json_parenthesize:
        return f"({literal})"
    return literal


def _render_number(value: Union[int, float]) -> str:
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def _render_date(value: str, spec: DialectSpec) -> str:
    if spec.dialect is Dialect.MYSQL:
        instant = parse_iso_instant(value)
        if instant.tzinfo is not None:
            instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
        return quote_string(instant.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3])
    return quote_string(value)


def _render_scalar(column_type: PrimitiveType, value: Any, spec: DialectSpec) -> str:
    if column_type is PrimitiveType.STRING:
        return quote_string(value)
    if column_type in (PrimitiveType.NUMBER, PrimitiveType.INTEGER):
        return _render_number(value)
    if column_type is PrimitiveType.BOOLEAN:
        return spec.true_literal if value else spec.false_literal
    if column_type is PrimitiveType.DATE:
        if isinstance(value, datetime):
            value = value.isoformat()
        return _render_date(value, spec)
    if column_type is PrimitiveType.JSON:
        return _render_json(value, spec)
    raise TypeError(f"Unhandled column type: {column_type!r}")


def _render_array_items(column_type: ColumnType, values: Sequence[Any], spec: DialectSpec) -> str:
    """Postgres ARRAY[...] body; nested arrays nest ARRAY[...] without casts."""
    parts: List[str] = []
    for item in values:
        if item is None:
            parts.append("NULL")
        elif is_array_column_type(column_type):
            inner = _render_array_items(element_type(column_type), item, spec)
            parts.append(f"ARRAY[{inner}]")
        elif column_type is PrimitiveType.JSON:
            parts.append(quote_string(_json_text(item)) + spec.json_cast)
        else:
            parts.append(_render_scalar(column_type, item, spec))
    return ", ".join(parts)


def render_default(
    column_type: ColumnType,
    value: Any,
    spec: DialectSpec,
    column: str,
    entity_name: Optional[str] = None,
    json_array_fallback: bool = True,
) -> str:
    """
    Render a (frozen) default literal in the dialect's syntax.

    The type check already happened in the builder; this only formats.
    """
    if value is None:
        return "NULL"

    if is_array_column_type(column_type):
        if spec.native_arrays:
            sql_type = render_column_type(column_type, spec, column, entity_name, json_array_fallback)
            body = _render_array_items(element_type(column_type), value, spec)
            return f"ARRAY[{body}]::{sql_type}"
        # Serialized as JSON on dialects without arrays
        return _render_json(value, spec)

    return _render_scalar(column_type, value, spec)


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """
    Builder for CREATE INDEX statements.

    All methods are static and return SQL text terminated by ';'.
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
        prefix: str = "idx",
    ) -> str:
        """Generate conventional index name, e.g. idx_user_account_email."""
        col_part = "_".join(pascal_to_snake_case(c) for c in columns)
        return f"{prefix}_{pascal_to_snake_case(table)}_{col_part}"

    @staticmethod
    def btree(
        spec: DialectSpec,
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None,
        schema_name: Optional[str] = None,
        unique: bool = False,
    ) -> str:
        """
        Create a (unique) B-tree index.

        Args:
            spec: Dialect spec
            table: Table name
            columns: Column name(s) to index
            name: Optional custom index name
            schema_name: Optional schema qualifier
            unique: Emit CREATE UNIQUE INDEX
        """
        cols = IndexBuilder._normalize_columns(columns)
        idx_name = name or IndexBuilder._generate_index_name(
            table, cols, prefix="idx_unique" if unique else "idx",
        )
        col_sql = ", ".join(spec.quote_identifier(c) for c in cols)

        keyword = "CREATE UNIQUE INDEX" if unique else "CREATE INDEX"
        if spec.index_if_not_exists:
            keyword = f"{keyword} IF NOT EXISTS"

        return (
            f"{keyword} {spec.quote_identifier(idx_name)} "
            f"ON {spec.qualified_table(table, schema_name)} ({col_sql});"
        )


# ============================================================================
# COMMENT BUILDER
# ============================================================================

class CommentBuilder:
    """
    Builder for column documentation.

    Postgres uses COMMENT ON statements; MySQL inline COMMENT clauses;
    SQLite has no comments.
    """

    @staticmethod
    def inline(spec: DialectSpec, comment: str) -> Optional[str]:
        """Inline column clause, or None when the dialect has none."""
        if not spec.inline_comments:
            return None
        return f"COMMENT {quote_string(comment)}"

    @staticmethod
    def column(
        spec: DialectSpec,
        table: str,
        column: str,
        comment: str,
        schema_name: Optional[str] = None,
    ) -> Optional[str]:
        """COMMENT ON COLUMN statement, or None when the dialect has none."""
        if not spec.comment_statements:
            return None
        return (
            f"COMMENT ON COLUMN {spec.qualified_table(table, schema_name)}."
            f"{spec.quote_identifier(column)} IS {quote_string(comment)};"
        )


# ============================================================================
# SCHEMA UTILITIES
# ============================================================================

class SchemaUtils:
    """
    Utility methods for schema-level DDL operations.
    """

    @staticmethod
    def create_schema(spec: DialectSpec, schema_name: str) -> Optional[str]:
        """CREATE SCHEMA IF NOT EXISTS, or None on dialects without schemas."""
        if not spec.supports_schemas:
            return None
        return f"CREATE SCHEMA IF NOT EXISTS {spec.quote_identifier(schema_name)};"


__all__ = [
    "DialectSpec",
    "DIALECTS",
    "POSTGRES",
    "SQLITE",
    "MYSQL",
    "get_dialect_spec",
    "render_column_type",
    "render_default",
    "quote_string",
    "IndexBuilder",
    "CommentBuilder",
    "SchemaUtils",
]
