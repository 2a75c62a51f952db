# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for DDL rendering, API documents, builder cache
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for the generators. These can be overridden via
environment variables or passed explicitly to each generator.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from entityforge.contracts import Dialect, TableNaming


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable ("1", "true", "yes", "on")."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class DDLDefaults:
    """
    Defaults for DDL rendering.

    Controls dialect, table naming and array handling.
    """
    dialect: str = Dialect.POSTGRES.value
    if_not_exists: bool = True
    table_naming: str = TableNaming.ENTITY.value

    # Serialize arrays as JSON on dialects without native arrays.
    # When False those columns raise UnsupportedColumnTypeError.
    json_array_fallback: bool = True

    # Optional schema qualifier ("app"."User"); ignored by sqlite
    schema_name: Optional[str] = None

    # Emit column descriptions as COMMENT ON / inline COMMENT
    include_comments: bool = False

    indent: str = "  "

    @classmethod
    def from_env(cls) -> "DDLDefaults":
        """Create from environment variables."""
        return cls(
            dialect=os.getenv("ENTITYFORGE_DIALECT", Dialect.POSTGRES.value),
            if_not_exists=_env_bool("ENTITYFORGE_IF_NOT_EXISTS", True),
            table_naming=os.getenv("ENTITYFORGE_TABLE_NAMING", TableNaming.ENTITY.value),
            json_array_fallback=_env_bool("ENTITYFORGE_JSON_ARRAY_FALLBACK", True),
            schema_name=os.getenv("ENTITYFORGE_SCHEMA") or None,
            include_comments=_env_bool("ENTITYFORGE_INCLUDE_COMMENTS", False),
        )


@dataclass(frozen=True)
class DocumentDefaults:
    """
    Defaults for API document generation.
    """
    openapi_version: str = "3.1.0"
    title: str = "Entity API"
    version: str = "0.1.0"

    @classmethod
    def from_env(cls) -> "DocumentDefaults":
        """Create from environment variables."""
        return cls(
            openapi_version=os.getenv("ENTITYFORGE_OPENAPI_VERSION", "3.1.0"),
            title=os.getenv("ENTITYFORGE_API_TITLE", "Entity API"),
            version=os.getenv("ENTITYFORGE_API_VERSION", "0.1.0"),
        )


@dataclass(frozen=True)
class BuilderDefaults:
    """
    Defaults for the entity builder.
    """
    cache_size: int = 128  # 0 disables memoization

    @classmethod
    def from_env(cls) -> "BuilderDefaults":
        """Create from environment variables."""
        return cls(
            cache_size=int(os.getenv("ENTITYFORGE_CACHE_SIZE", 128)),
        )


def get_defaults() -> Dict[str, Any]:
    """
    Get all defaults as a dictionary, with environment overrides applied.

    Returns:
        Dict with ddl, document, builder sections
    """
    return {
        "ddl": asdict(DDLDefaults.from_env()),
        "document": asdict(DocumentDefaults.from_env()),
        "builder": asdict(BuilderDefaults.from_env()),
    }


__all__ = [
    "DDLDefaults",
    "DocumentDefaults",
    "BuilderDefaults",
    "get_defaults",
]
