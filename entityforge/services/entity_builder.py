# ============================================================================
# ENTITY BUILDER
# ============================================================================
# STATUS: Service - Validate raw specifications and freeze them into the IR
# PURPOSE: Single entry point producing EntityDefinition or failing atomically
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: build_entity, EntityBuilder, fingerprint_specification, get_builder
# DEPENDENCIES: pydantic, hashlib, threading
# ============================================================================
"""
Entity Builder

Turns a raw EntitySpecification (or a plain mapping) into a frozen
EntityDefinition. Validation order:

1. Entity name is PascalCase            -> InvalidNameError
2. Specification shape (pydantic)       -> InvalidSpecificationError
3. At least one column                  -> InvalidSpecificationError
4. Per column: name, type, default, example, db metadata

Nothing is returned until every check passes, so no partially built
definition is ever observable. The builder copies every value it keeps;
the returned definition holds no reference to the caller's specification.

Usage:
    from entityforge.services import build_entity

    user = build_entity({
        "name": "User",
        "table": True,
        "columns": {"id": {"type": "string"}},
    })

    # Memoized by specification fingerprint
    builder = EntityBuilder(cache_size=64)
    user = builder.build(spec)
"""

import hashlib
import json
import re
import threading
from collections import OrderedDict
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from entityforge.config.defaults import BuilderDefaults
from entityforge.errors import (
    InvalidColumnTypeError,
    InvalidDefaultError,
    InvalidNameError,
    InvalidSpecificationError,
)
from entityforge.logging import ComponentType, get_logger, log_context
from entityforge.models.column_types import (
    ColumnType,
    PrimitiveType,
    column_type_to_raw,
    describe_column_type,
    is_array_column_type,
    literal_mismatch,
    parse_column_type,
)
from entityforge.models.entity import (
    NO_DEFAULT,
    ColumnDbMetadata,
    ColumnDefinition,
    ColumnSpecification,
    DocsMetadata,
    EntityDefinition,
    EntityMetadata,
    EntitySpecification,
    OpenAPIMetadata,
    freeze_value,
)

logger = get_logger(__name__, ComponentType.BUILDER)

PASCAL_CASE_PATTERN = r"^[A-Z][A-Za-z0-9]*$"
COLUMN_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"

_PASCAL_CASE_RE = re.compile(PASCAL_CASE_PATTERN)
_COLUMN_NAME_RE = re.compile(COLUMN_NAME_PATTERN)

SpecificationInput = Union[EntitySpecification, Mapping[str, Any]]


def is_pascal_case(value: Any) -> bool:
    """Check the entity naming convention."""
    return isinstance(value, str) and _PASCAL_CASE_RE.fullmatch(value) is not None


# ============================================================================
# SPECIFICATION PARSING
# ============================================================================

def _check_entity_name(name: Any) -> None:
    if not is_pascal_case(name):
        raise InvalidNameError(name, PASCAL_CASE_PATTERN, kind="entity")


def _coerce_specification(spec: SpecificationInput) -> EntitySpecification:
    """Validate the raw input into an EntitySpecification."""
    if isinstance(spec, EntitySpecification):
        _check_entity_name(spec.name)
        return spec

    if not isinstance(spec, Mapping):
        raise InvalidSpecificationError(
            f"Entity specification must be a mapping or EntitySpecification, "
            f"got {type(spec).__name__}"
        )

    raw_name = spec.get("name")
    if isinstance(raw_name, str):
        _check_entity_name(raw_name)

    try:
        parsed = EntitySpecification.model_validate(dict(spec))
    except ValidationError as exc:
        entity_name = raw_name if isinstance(raw_name, str) else None
        raise InvalidSpecificationError(
            f"Invalid specification for entity {entity_name!r}: {exc}",
            entity_name=entity_name,
        ) from exc

    _check_entity_name(parsed.name)
    return parsed


def _normalize_literal(column_type: ColumnType, value: Any) -> Any:
    """Date literals become ISO strings; containers are left for freeze_value."""
    if is_array_column_type(column_type) and isinstance(value, (list, tuple)):
        return [_normalize_literal(column_type.element, item) for item in value]
    if column_type is PrimitiveType.DATE and isinstance(value, datetime):
        return value.isoformat()
    return value


def _check_literal(
    entity_name: str,
    column_name: str,
    column_type: ColumnType,
    accepts_null: bool,
    value: Any,
    attribute: str,
) -> Any:
    """Type-check a default/example literal and return its frozen form."""
    if value is None:
        if not accepts_null:
            raise InvalidDefaultError(
                column_name,
                describe_column_type(column_type),
                value,
                reason="column does not accept null",
                entity_name=entity_name,
                attribute=attribute,
            )
        return None

    reason = literal_mismatch(column_type, value)
    if reason:
        raise InvalidDefaultError(
            column_name,
            describe_column_type(column_type),
            value,
            reason=reason,
            entity_name=entity_name,
            attribute=attribute,
        )
    return freeze_value(_normalize_literal(column_type, value))


def _build_column(
    entity_name: str,
    column_name: str,
    spec: ColumnSpecification,
) -> ColumnDefinition:
    if not isinstance(column_name, str) or not _COLUMN_NAME_RE.fullmatch(column_name):
        raise InvalidNameError(
            column_name, COLUMN_NAME_PATTERN, kind="column", entity_name=entity_name,
        )

    try:
        column_type = parse_column_type(spec.type)
    except (ValueError, TypeError) as exc:
        raise InvalidColumnTypeError(column_name, spec.type, entity_name=entity_name) from exc

    accepts_null = spec.nullable or spec.optional

    default = NO_DEFAULT
    if spec.has_default:
        default = _check_literal(
            entity_name, column_name, column_type, accepts_null, spec.default, "default",
        )

    example = NO_DEFAULT
    if spec.has_example:
        example = _check_literal(
            entity_name, column_name, column_type, True, spec.example, "example",
        )

    db = spec.db
    if db.default_now:
        if column_type is not PrimitiveType.DATE:
            raise InvalidSpecificationError(
                f"Column {column_name!r} of entity {entity_name!r}: default_now requires "
                f"type date, got {describe_column_type(column_type)}",
                entity_name=entity_name,
            )
        if default is not NO_DEFAULT:
            raise InvalidSpecificationError(
                f"Column {column_name!r} of entity {entity_name!r}: default and "
                f"default_now are mutually exclusive",
                entity_name=entity_name,
            )
    if db.primary and accepts_null:
        raise InvalidSpecificationError(
            f"Column {column_name!r} of entity {entity_name!r}: a primary key cannot "
            f"be optional or nullable",
            entity_name=entity_name,
        )

    return ColumnDefinition(
        type=column_type,
        optional=spec.optional,
        nullable=spec.nullable,
        default=default,
        description=spec.description,
        visibility=spec.visibility,
        immutable=spec.immutable,
        stored=spec.stored,
        example=example,
        db=ColumnDbMetadata(
            primary=db.primary,
            unique=db.unique,
            index=db.index,
            default_now=db.default_now,
        ),
    )


def _build_metadata(spec: EntitySpecification) -> EntityMetadata:
    openapi = spec.openapi
    docs = spec.docs
    return EntityMetadata(
        doc=spec.doc,
        test=spec.test,
        active=spec.active,
        openapi=OpenAPIMetadata(
            enabled=openapi.enabled,
            tags=tuple(openapi.tags),
            summary=openapi.summary,
            description=openapi.description,
        ) if openapi is not None else OpenAPIMetadata(),
        docs=DocsMetadata(
            description=docs.description,
            examples=freeze_value(docs.examples),
        ) if docs is not None else DocsMetadata(),
    )


# ============================================================================
# FINGERPRINT
# ============================================================================

def _canonical_literal(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _canonical_literal(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical_literal(item) for item in value]
    return value


def _canonical_form(
    spec: EntitySpecification,
    columns: Mapping[str, ColumnDefinition],
) -> Dict[str, Any]:
    """Canonical JSON-able form; equal forms build equal definitions."""
    canonical_columns = []
    for name, column in columns.items():
        entry: Dict[str, Any] = {
            "type": column_type_to_raw(column.type),
            "optional": column.optional,
            "nullable": column.nullable,
            "description": column.description,
            "visibility": column.visibility.value,
            "immutable": column.immutable,
            "stored": column.stored,
            "db": {
                "primary": column.db.primary,
                "unique": column.db.unique,
                "index": column.db.index,
                "default_now": column.db.default_now,
            },
        }
        if column.has_default:
            entry["default"] = _canonical_literal(column.default)
        if column.has_example:
            entry["example"] = _canonical_literal(column.example)
        # Column order is significant
        canonical_columns.append([name, entry])

    return {
        "name": spec.name,
        "table": spec.table,
        "doc": spec.doc,
        "test": spec.test.value if spec.test is not None else None,
        "active": spec.active,
        "openapi": spec.openapi.model_dump(mode="json") if spec.openapi else None,
        "docs": spec.docs.model_dump(mode="json") if spec.docs else None,
        "columns": canonical_columns,
    }


def _hash_canonical(canonical: Dict[str, Any]) -> str:
    payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _prepare(spec: SpecificationInput) -> Tuple[EntitySpecification, Dict[str, ColumnDefinition], str]:
    """Validate everything and compute the fingerprint; nothing frozen yet."""
    parsed = _coerce_specification(spec)

    if not parsed.columns:
        raise InvalidSpecificationError(
            f"Entity {parsed.name!r} must define at least one column",
            entity_name=parsed.name,
        )

    columns: Dict[str, ColumnDefinition] = {}
    with log_context(entity=parsed.name, operation="build"):
        for column_name, column_spec in parsed.columns.items():
            with log_context(column=column_name):
                column = _build_column(parsed.name, column_name, column_spec)
                logger.debug(f"Checked column {column_name}: {describe_column_type(column.type)}")
            columns[column_name] = column

    fingerprint = _hash_canonical(_canonical_form(parsed, columns))
    return parsed, columns, fingerprint


def fingerprint_specification(spec: SpecificationInput) -> str:
    """
    Deterministic SHA-256 fingerprint of a specification.

    Key order of the input mapping does not matter; column order does.
    Raises the same errors as build_entity for invalid specifications.
    """
    _, _, fingerprint = _prepare(spec)
    return fingerprint


# ============================================================================
# BUILD
# ============================================================================

def _freeze(
    parsed: EntitySpecification,
    columns: Dict[str, ColumnDefinition],
    fingerprint: str,
) -> EntityDefinition:
    return EntityDefinition(
        name=parsed.name,
        table=parsed.table,
        columns=MappingProxyType(dict(columns)),
        metadata=_build_metadata(parsed),
        fingerprint=fingerprint,
    )


def build_entity(spec: SpecificationInput) -> EntityDefinition:
    """
    Validate a raw specification and freeze it into an EntityDefinition.

    Args:
        spec: EntitySpecification or mapping with name/table/columns/...

    Returns:
        Deeply immutable EntityDefinition

    Raises:
        InvalidNameError, InvalidSpecificationError, InvalidColumnTypeError,
        InvalidDefaultError
    """
    parsed, columns, fingerprint = _prepare(spec)
    entity = _freeze(parsed, columns, fingerprint)
    logger.debug(
        f"Built entity {entity.name} ({len(entity.columns)} columns, "
        f"table={entity.table}, fingerprint={fingerprint[:12]})"
    )
    return entity


class EntityBuilder:
    """
    Entity builder with an LRU cache keyed by specification fingerprint.

    Thread-safe. A changed specification has a different fingerprint, so a
    cached definition is never returned for it.
    """

    def __init__(self, cache_size: Optional[int] = None):
        if cache_size is None:
            cache_size = BuilderDefaults.from_env().cache_size
        self.cache_size = max(0, cache_size)
        self._cache: "OrderedDict[str, EntityDefinition]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def build(self, spec: SpecificationInput) -> EntityDefinition:
        """Build (or reuse) the definition for a specification."""
        parsed, columns, fingerprint = _prepare(spec)

        if self.cache_size == 0:
            return _freeze(parsed, columns, fingerprint)

        with self._lock:
            cached = self._cache.get(fingerprint)
            if cached is not None:
                self._cache.move_to_end(fingerprint)
                self._hits += 1
                logger.debug(f"Cache hit for entity {cached.name} ({fingerprint[:12]})")
                return cached
            self._misses += 1

        entity = _freeze(parsed, columns, fingerprint)

        with self._lock:
            existing = self._cache.get(fingerprint)
            if existing is not None:
                return existing
            self._cache[fingerprint] = entity
            while len(self._cache) > self.cache_size:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted cached entity {evicted[:12]}")

        return entity

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def cache_info(self) -> Dict[str, int]:
        """Cache statistics: hits, misses, size, max_size."""
        with self._lock:
            info = {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
                "max_size": self.cache_size,
            }
        logger.info(f"Entity cache: {info}")
        return info


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_builder: Optional[EntityBuilder] = None
_builder_lock = threading.Lock()


def get_builder() -> EntityBuilder:
    """Get the shared memoizing builder."""
    global _builder
    with _builder_lock:
        if _builder is None:
            _builder = EntityBuilder()
        return _builder


__all__ = [
    "PASCAL_CASE_PATTERN",
    "COLUMN_NAME_PATTERN",
    "is_pascal_case",
    "build_entity",
    "fingerprint_specification",
    "EntityBuilder",
    "get_builder",
]
