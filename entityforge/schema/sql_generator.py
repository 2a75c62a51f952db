# ============================================================================
# ENTITY TO SQL GENERATOR
# ============================================================================
# STATUS: Core - DDL generation from entity definitions
# PURPOSE: Generate dialect-specific CREATE TABLE / CREATE INDEX statements
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: EntityToSQL, to_ddl
# DEPENDENCIES: entityforge.schema.ddl_utils
# ============================================================================
"""
Entity to SQL Schema Generator.

Generates DDL text from frozen EntityDefinitions. The entity definition is
the SINGLE SOURCE OF TRUTH for the table: column order is insertion order and
the same definition always renders byte-identical DDL.

Column rules:
    - stored=False columns are skipped
    - NOT NULL unless the column accepts null (optional or nullable)
    - DEFAULT from the column default, or CURRENT_TIMESTAMP for db.default_now
    - UNIQUE from db.unique; db.primary columns form the PRIMARY KEY
    - db.index columns get a CREATE INDEX statement

Usage:
    generator = EntityToSQL(dialect="postgres")
    print(generator.render(user_entity))

    # or
    ddl = to_ddl(user_entity, "sqlite")
"""

from typing import Iterable, List, Optional, Union

from entityforge.config.defaults import DDLDefaults
from entityforge.contracts import Dialect, TableNaming
from entityforge.logging import ComponentType, get_logger, log_context
from entityforge.models.column_types import PrimitiveType
from entityforge.models.entity import (
    ColumnDefinition,
    EntityDefinition,
    filter_stored_columns,
    pascal_to_snake_case,
)
from entityforge.schema.ddl_utils import (
    CommentBuilder,
    IndexBuilder,
    SchemaUtils,
    get_dialect_spec,
    render_column_type,
    render_default,
)

logger = get_logger(__name__, ComponentType.DDL)


class EntityToSQL:
    """
    Convert EntityDefinitions to DDL statements for one dialect.

    Stateless apart from its settings; safe to share between threads.
    """

    def __init__(
        self,
        dialect: Optional[Union[str, Dialect]] = None,
        defaults: Optional[DDLDefaults] = None,
        schema_name: Optional[str] = None,
    ):
        """
        Initialize the generator.

        Args:
            dialect: Target dialect (defaults to defaults.dialect)
            defaults: DDL settings (DDLDefaults() if omitted)
            schema_name: Optional schema qualifier, overrides defaults.schema_name

        Raises:
            UnsupportedDialectError: unknown dialect
        """
        self.defaults = defaults or DDLDefaults()
        self.spec = get_dialect_spec(dialect if dialect is not None else self.defaults.dialect)
        self.schema_name = schema_name if schema_name is not None else self.defaults.schema_name
        self.table_naming = TableNaming(self.defaults.table_naming)

    # =========================================================================
    # NAMING
    # =========================================================================

    def table_name(self, entity: EntityDefinition) -> str:
        """Table name for an entity under the configured naming rule."""
        if self.table_naming is TableNaming.SNAKE_CASE:
            return pascal_to_snake_case(entity.name)
        return entity.name

    def _table_ref(self, entity: EntityDefinition) -> str:
        return self.spec.qualified_table(self.table_name(entity), self.schema_name)

    # =========================================================================
    # COLUMN GENERATION
    # =========================================================================

    def format_column(self, entity: EntityDefinition, name: str, column: ColumnDefinition) -> str:
        """
        Render one column definition line (without indentation).

        Raises:
            UnsupportedColumnTypeError: column type has no representation
        """
        parts = [
            self.spec.quote_identifier(name),
            render_column_type(
                column.type,
                self.spec,
                name,
                entity_name=entity.name,
                json_array_fallback=self.defaults.json_array_fallback,
            ),
        ]

        if not column.accepts_null:
            parts.append("NOT NULL")

        if column.db.default_now and column.type is PrimitiveType.DATE:
            parts.append(f"DEFAULT {self.spec.current_timestamp}")
        elif column.has_default:
            literal = render_default(
                column.type,
                column.default,
                self.spec,
                name,
                entity_name=entity.name,
                json_array_fallback=self.defaults.json_array_fallback,
            )
            parts.append(f"DEFAULT {literal}")

        if column.db.unique and not column.db.primary:
            parts.append("UNIQUE")

        if self.defaults.include_comments and column.description:
            inline = CommentBuilder.inline(self.spec, column.description)
            if inline:
                parts.append(inline)

        return " ".join(parts)

    # =========================================================================
    # TABLE GENERATION
    # =========================================================================

    def generate_table(self, entity: EntityDefinition) -> Optional[str]:
        """
        Generate the CREATE TABLE statement.

        Returns:
            Statement text, or None for non-table entities and entities
            without stored columns
        """
        if not entity.table:
            return None

        stored = filter_stored_columns(entity)
        if not stored:
            return None

        indent = self.defaults.indent
        lines = []
        for name, column in stored.items():
            with log_context(column=name):
                lines.append(f"{indent}{self.format_column(entity, name, column)}")

        primary_key = [name for name, column in stored.items() if column.db.primary]
        if primary_key:
            pk_columns = ", ".join(self.spec.quote_identifier(name) for name in primary_key)
            lines.append(f"{indent}PRIMARY KEY ({pk_columns})")

        keyword = "CREATE TABLE IF NOT EXISTS" if self.defaults.if_not_exists else "CREATE TABLE"
        body = ",\n".join(lines)
        return f"{keyword} {self._table_ref(entity)} (\n{body}\n);"

    # =========================================================================
    # INDEX & COMMENT GENERATION
    # =========================================================================

    def generate_indexes(self, entity: EntityDefinition) -> List[str]:
        """CREATE INDEX statements for db.index columns (table entities only)."""
        if not entity.table:
            return []

        table = self.table_name(entity)
        return [
            IndexBuilder.btree(self.spec, table, [name], schema_name=self.schema_name)
            for name, column in filter_stored_columns(entity).items()
            if column.db.index and not column.db.primary
        ]

    def generate_comments(self, entity: EntityDefinition) -> List[str]:
        """COMMENT ON COLUMN statements (dialects with comment statements only)."""
        if not entity.table or not self.defaults.include_comments:
            return []

        table = self.table_name(entity)
        statements = []
        for name, column in filter_stored_columns(entity).items():
            if not column.description:
                continue
            stmt = CommentBuilder.column(
                self.spec, table, name, column.description, schema_name=self.schema_name,
            )
            if stmt:
                statements.append(stmt)
        return statements

    # =========================================================================
    # COMPLETE GENERATION
    # =========================================================================

    def generate_statements(self, entity: EntityDefinition) -> List[str]:
        """
        All statements for one entity, in execution order.

        Empty for non-table entities.
        """
        table = self.generate_table(entity)
        if table is None:
            return []
        statements = [table]
        statements.extend(self.generate_indexes(entity))
        statements.extend(self.generate_comments(entity))
        return statements

    def render(self, entity: EntityDefinition) -> str:
        """
        DDL artifact for one entity.

        Non-table entities and entities without stored columns render as a
        single SQL comment, never as CREATE TABLE.
        """
        with log_context(entity=entity.name, dialect=self.spec.name, artifact="ddl"):
            if not entity.table:
                logger.debug(f"Entity {entity.name} is not a table; no DDL")
                return f"-- Entity {entity.name} is not mapped to a table."

            statements = self.generate_statements(entity)
            if not statements:
                logger.debug(f"Entity {entity.name} has no stored columns; no DDL")
                return f"-- Entity {entity.name} has no stored columns."

            logger.debug(
                f"Generated {len(statements)} {self.spec.name} statements for {entity.name}"
            )
            return "\n".join(statements)

    def generate_all(self, entities: Iterable[EntityDefinition]) -> List[str]:
        """
        Statements for many entities, prefixed by CREATE SCHEMA when a schema
        name is configured.
        """
        statements: List[str] = []

        if self.schema_name:
            create_schema = SchemaUtils.create_schema(self.spec, self.schema_name)
            if create_schema:
                statements.append(create_schema)

        for entity in entities:
            statements.extend(self.generate_statements(entity))

        logger.info(f"Generated {len(statements)} {self.spec.name} DDL statements")
        return statements


def to_ddl(
    entity: EntityDefinition,
    dialect: Optional[Union[str, Dialect]] = None,
    defaults: Optional[DDLDefaults] = None,
) -> str:
    """
    DDL text for one entity.

    Args:
        entity: Frozen entity definition
        dialect: postgres | sqlite | mysql (defaults.dialect when omitted)
        defaults: DDL settings

    Raises:
        UnsupportedDialectError, UnsupportedColumnTypeError
    """
    return EntityToSQL(dialect=dialect, defaults=defaults).render(entity)


__all__ = ["EntityToSQL", "to_ddl"]
