# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Foundation - Exceptions raised by the builder and generators
# PURPOSE: Carry entity/column/value context for human-fixable failures
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: EntityError, EntityValidationError, GenerationError and subclasses
# ============================================================================
"""
Exceptions for entityforge.

Construction-time errors (EntityValidationError) are raised by the entity
builder; no EntityDefinition exists when one is raised. Generation-time
errors (GenerationError) are raised by a generator; no partial artifact is
returned.

None of these are transient: callers should report and stop processing the
offending specification.
"""

from typing import Any, Iterable, Optional


class EntityError(Exception):
    """Base exception for entity definition and generation errors."""

    def __init__(self, message: str, entity_name: Optional[str] = None):
        self.entity_name = entity_name
        super().__init__(message)


# ============================================================================
# CONSTRUCTION-TIME
# ============================================================================

class EntityValidationError(EntityError):
    """Raised when a specification cannot become an EntityDefinition."""
    pass


class InvalidSpecificationError(EntityValidationError):
    """Raised when a specification has the wrong shape (unknown keys, no columns)."""
    pass


class InvalidNameError(EntityValidationError):
    """Raised when an entity or column name violates its naming convention."""

    def __init__(
        self,
        name: Any,
        pattern: str,
        kind: str = "entity",
        entity_name: Optional[str] = None,
    ):
        self.name = name
        self.pattern = pattern
        self.kind = kind
        if kind == "entity":
            message = (
                f"Invalid entity name {name!r}: entity names must be PascalCase "
                f"(expected pattern {pattern})"
            )
        else:
            message = (
                f"Invalid {kind} name {name!r} in entity {entity_name!r} "
                f"(expected pattern {pattern})"
            )
        super().__init__(message, entity_name=entity_name)


class InvalidColumnTypeError(EntityValidationError):
    """Raised when a column type is not a primitive or a well-formed arrayOf."""

    def __init__(self, column: str, raw_type: Any, entity_name: Optional[str] = None):
        self.column = column
        self.raw_type = raw_type
        super().__init__(
            f"Column {column!r} of entity {entity_name!r} has an invalid type: {raw_type!r}",
            entity_name=entity_name,
        )


class InvalidDefaultError(EntityValidationError):
    """Raised when a default (or example) literal does not match the column type."""

    def __init__(
        self,
        column: str,
        declared_type: str,
        value: Any,
        reason: str = "",
        entity_name: Optional[str] = None,
        attribute: str = "default",
    ):
        self.column = column
        self.declared_type = declared_type
        self.value = value
        self.reason = reason
        self.attribute = attribute
        message = (
            f"Invalid {attribute} for column {column!r} of entity {entity_name!r}: "
            f"declared type {declared_type} does not accept {value!r}"
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, entity_name=entity_name)


# ============================================================================
# GENERATION-TIME
# ============================================================================

class GenerationError(EntityError):
    """Raised when a generator cannot produce its artifact."""
    pass


class UnsupportedDialectError(GenerationError):
    """Raised when DDL is requested for an unknown dialect."""

    def __init__(self, dialect: Any, supported: Iterable[str] = ()):
        self.dialect = dialect
        self.supported = tuple(supported)
        message = f"Unsupported SQL dialect: {dialect!r}"
        if self.supported:
            message = f"{message} (supported: {', '.join(self.supported)})"
        super().__init__(message)


class UnsupportedColumnTypeError(GenerationError):
    """Raised when a column type has no representation in the requested backend."""

    def __init__(
        self,
        column: str,
        column_type: str,
        backend: str,
        entity_name: Optional[str] = None,
    ):
        self.column = column
        self.column_type = column_type
        self.backend = backend
        super().__init__(
            f"Column {column!r} of entity {entity_name!r}: type {column_type} "
            f"has no representation in {backend}",
            entity_name=entity_name,
        )


__all__ = [
    "EntityError",
    "EntityValidationError",
    "InvalidSpecificationError",
    "InvalidNameError",
    "InvalidColumnTypeError",
    "InvalidDefaultError",
    "GenerationError",
    "UnsupportedDialectError",
    "UnsupportedColumnTypeError",
]
