# ============================================================================
# ENTITY SPECIFICATION & DEFINITION MODELS
# ============================================================================
# STATUS: Core model - Raw entity input and frozen IR
# PURPOSE: Shape-check raw specifications; hold the immutable hand-off artifact
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: EntitySpecification, ColumnSpecification, EntityDefinition,
#          ColumnDefinition, EntityMetadata, NO_DEFAULT, freeze_value, thaw_value
# DEPENDENCIES: pydantic, dataclasses
# ============================================================================
"""
Entity Models

Two layers:

    EntitySpecification (pydantic)  - raw input, shape-checked, mutable
    EntityDefinition (dataclass)    - frozen IR read by every generator

The builder (services.entity_builder) turns the first into the second. The
IR never references the raw specification: column maps are wrapped in
MappingProxyType and literal defaults are deep-frozen (dict -> mappingproxy,
list -> tuple). thaw_value() gives generators plain JSON values back.

Mappingproxy values are unhashable, so the frozen classes that hold them hash
on their remaining fields (EntityDefinition on name and fingerprint). Equal
objects still hash equal, so definitions can key dicts and sets.

Required/nullable classification lives on ColumnDefinition so that the DDL,
validation and API generators cannot disagree:

    required     = not optional
    accepts_null = nullable or optional
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, StrictBool, StrictStr, field_validator

from entityforge.contracts import FieldVisibility, TestMode
from entityforge.models.column_types import ColumnType


# ============================================================================
# SENTINEL & FREEZING
# ============================================================================

class _Missing:
    """Marker for an absent default/example (None is a valid literal)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())


NO_DEFAULT = _Missing()


def freeze_value(value: Any) -> Any:
    """Deep-freeze a JSON-like literal: dicts become mappingproxy, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_value(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_value(item) for item in value)
    return value


def thaw_value(value: Any) -> Any:
    """Inverse of freeze_value: fresh, caller-owned plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_value(item) for item in value]
    return value


def pascal_to_snake_case(value: str) -> str:
    """UserAccount -> user_account, HTTPRequest -> http_request."""
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    value = re.sub(r"([A-Z])([A-Z][a-z])", r"\1_\2", value)
    return value.lower()


# ============================================================================
# RAW SPECIFICATION (pydantic)
# ============================================================================

class ColumnDbSpecification(BaseModel):
    """DB-layer metadata for a column."""
    primary: StrictBool = False
    unique: StrictBool = False
    index: StrictBool = False
    default_now: StrictBool = Field(
        default=False,
        validation_alias=AliasChoices("default_now", "defaultNow"),
        description="DEFAULT CURRENT_TIMESTAMP (date columns only)",
    )

    model_config = {"extra": "forbid"}


class ColumnSpecification(BaseModel):
    """
    Raw column definition.

    `type` is kept raw here and parsed by the builder so that a bad type
    surfaces as InvalidColumnTypeError rather than a shape error.
    """
    type: Any
    optional: StrictBool = False
    nullable: StrictBool = False
    default: Any = None
    description: Optional[StrictStr] = Field(default=None, min_length=1)
    visibility: FieldVisibility = FieldVisibility.PUBLIC
    immutable: StrictBool = False
    stored: StrictBool = True
    example: Any = None
    db: ColumnDbSpecification = Field(default_factory=ColumnDbSpecification)

    model_config = {"extra": "forbid"}

    @property
    def has_default(self) -> bool:
        """True when `default` was given explicitly (even as None)."""
        return "default" in self.model_fields_set

    @property
    def has_example(self) -> bool:
        return "example" in self.model_fields_set


class OpenAPIConfig(BaseModel):
    """Per-entity API document settings."""
    enabled: StrictBool = True
    tags: List[StrictStr] = Field(default_factory=list)
    summary: Optional[StrictStr] = None
    description: Optional[StrictStr] = None

    model_config = {"extra": "forbid"}


class DocsConfig(BaseModel):
    """Per-entity documentation settings."""
    description: Optional[StrictStr] = None
    examples: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


class EntitySpecification(BaseModel):
    """
    Raw entity specification.

    Column insertion order is preserved and becomes the emitted column order.
    `doc` and `test` are consumed by external tooling only.
    """
    name: StrictStr
    table: StrictBool = False
    columns: Dict[str, ColumnSpecification] = Field(
        validation_alias=AliasChoices("columns", "fields"),
    )
    doc: StrictBool = False
    test: Optional[TestMode] = None
    active: StrictBool = True
    openapi: Optional[OpenAPIConfig] = None
    docs: Optional[DocsConfig] = None

    model_config = {"extra": "forbid"}

    @field_validator("test", mode="before")
    @classmethod
    def handle_disabled_test(cls, v):
        """Allow `test: false` as shorthand for no test scaffolding."""
        if v is False:
            return None
        return v


# ============================================================================
# FROZEN IR (dataclasses)
# ============================================================================

@dataclass(frozen=True)
class ColumnDbMetadata:
    """Frozen DB-layer metadata."""
    primary: bool = False
    unique: bool = False
    index: bool = False
    default_now: bool = False


@dataclass(frozen=True)
class ColumnDefinition:
    """
    Frozen column definition.

    `default` and `example` hold NO_DEFAULT when absent.
    """
    type: ColumnType
    optional: bool = False
    nullable: bool = False
    default: Any = NO_DEFAULT
    description: Optional[str] = None
    visibility: FieldVisibility = FieldVisibility.PUBLIC
    immutable: bool = False
    stored: bool = True
    example: Any = NO_DEFAULT
    db: ColumnDbMetadata = field(default_factory=ColumnDbMetadata)

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    @property
    def has_example(self) -> bool:
        return self.example is not NO_DEFAULT

    @property
    def required(self) -> bool:
        """Must be present in a record."""
        return not self.optional

    @property
    def accepts_null(self) -> bool:
        """May hold NULL in storage and null in a validated record."""
        return self.nullable or self.optional

    @property
    def is_public(self) -> bool:
        return self.visibility.is_exposed()

    def default_value(self) -> Any:
        """Plain (thawed) copy of the default, or NO_DEFAULT."""
        if not self.has_default:
            return NO_DEFAULT
        return thaw_value(self.default)

    def example_value(self) -> Any:
        """Plain (thawed) copy of the example, or NO_DEFAULT."""
        if not self.has_example:
            return NO_DEFAULT
        return thaw_value(self.example)

    def __hash__(self) -> int:
        # default and example may hold mappingproxy values
        return hash((
            self.type, self.optional, self.nullable, self.description,
            self.visibility, self.immutable, self.stored, self.db,
        ))


@dataclass(frozen=True)
class OpenAPIMetadata:
    enabled: bool = True
    tags: Tuple[str, ...] = ()
    summary: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class DocsMetadata:
    description: Optional[str] = None
    examples: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __hash__(self) -> int:
        return hash(self.description)


@dataclass(frozen=True)
class EntityMetadata:
    """
    Side-channel flags carried through the IR.

    Generators do not interpret doc/test; the API generator reads openapi and
    docs descriptions; the pipeline reads active.
    """
    doc: bool = False
    test: Optional[TestMode] = None
    active: bool = True
    openapi: OpenAPIMetadata = field(default_factory=OpenAPIMetadata)
    docs: DocsMetadata = field(default_factory=DocsMetadata)


@dataclass(frozen=True)
class EntityDefinition:
    """
    Frozen intermediate representation of one entity.

    Created only by the entity builder. `columns` is a read-only mapping in
    insertion order; `fingerprint` is the SHA-256 of the canonical
    specification it was built from.
    """
    name: str
    table: bool
    columns: Mapping[str, ColumnDefinition]
    metadata: EntityMetadata = field(default_factory=EntityMetadata)
    fingerprint: str = ""

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(self.columns)

    @property
    def required_columns(self) -> Tuple[str, ...]:
        return tuple(name for name, column in self.columns.items() if column.required)

    def __hash__(self) -> int:
        # Equal definitions share a fingerprint; columns is a mappingproxy
        return hash((self.name, self.fingerprint))


# ============================================================================
# PROJECTIONS
# ============================================================================

def filter_stored_columns(entity: EntityDefinition) -> Dict[str, ColumnDefinition]:
    """Columns persisted in the database (stored=True), in order."""
    return {name: column for name, column in entity.columns.items() if column.stored}


def filter_public_columns(entity: EntityDefinition) -> Dict[str, ColumnDefinition]:
    """Columns exposed in API artifacts (visibility=public), in order."""
    return {name: column for name, column in entity.columns.items() if column.is_public}


def mask_secret_fields(record: Mapping[str, Any], entity: EntityDefinition) -> Dict[str, Any]:
    """Copy of record with values of secret columns replaced by '***'."""
    masked = dict(record)
    for name, column in entity.columns.items():
        if column.visibility is FieldVisibility.SECRET and name in masked:
            masked[name] = "***"
    return masked


__all__ = [
    "NO_DEFAULT",
    "freeze_value",
    "thaw_value",
    "pascal_to_snake_case",
    "ColumnDbSpecification",
    "ColumnSpecification",
    "OpenAPIConfig",
    "DocsConfig",
    "EntitySpecification",
    "ColumnDbMetadata",
    "ColumnDefinition",
    "OpenAPIMetadata",
    "DocsMetadata",
    "EntityMetadata",
    "EntityDefinition",
    "filter_stored_columns",
    "filter_public_columns",
    "mask_secret_fields",
]
