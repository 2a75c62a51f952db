# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Shared enums for entity definitions and generators
# PURPOSE: Closed vocabularies that cross the builder/generator boundary
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: Dialect, FieldVisibility, TestMode, TableNaming
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for entityforge.

These enums are shared by the entity builder and every generator:
- SQL (DDL per dialect)
- Validation (runtime schema)
- API (OpenAPI component)

Column types live in models.column_types, not here.
"""

from enum import Enum


# ============================================================================
# DIALECTS
# ============================================================================

class Dialect(str, Enum):
    """
    SQL dialects supported by the DDL generator.

    Closed set: adding a dialect means adding its type table in
    schema.ddl_utils.
    """
    POSTGRES = "postgres"
    SQLITE = "sqlite"
    MYSQL = "mysql"


class TableNaming(str, Enum):
    """How an entity name becomes a table name."""
    ENTITY = "entity"            # "UserAccount" -> "UserAccount"
    SNAKE_CASE = "snake_case"    # "UserAccount" -> "user_account"


# ============================================================================
# FIELD & ENTITY FLAGS
# ============================================================================

class FieldVisibility(str, Enum):
    """
    Field visibility level.

    PUBLIC   - exposed in the API document and the public schema
    INTERNAL - backend/DB only, never exposed in the API
    SECRET   - not exposed AND masked in logs/docs/tests
    """
    PUBLIC = "public"
    INTERNAL = "internal"
    SECRET = "secret"

    def is_exposed(self) -> bool:
        """Check if fields with this visibility appear in API artifacts."""
        return self is FieldVisibility.PUBLIC


class TestMode(str, Enum):
    """Smoke-test scaffolding level consumed by external tooling."""
    __test__ = False

    SMOKE = "smoke"
    FULL = "full"


__all__ = [
    "Dialect",
    "TableNaming",
    "FieldVisibility",
    "TestMode",
]
