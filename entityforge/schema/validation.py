# ============================================================================
# VALIDATION SCHEMA GENERATOR
# ============================================================================
# STATUS: Core - Runtime validation schema from entity definitions
# PURPOSE: Map an EntityDefinition to a comparable schema tree and an
#          executable pydantic model built from it
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PrimitiveNode, SequenceNode, FieldSchema, ValidationSchema,
#          InputSchemas, to_validation_schema, to_public_schema, to_input_schemas
# DEPENDENCIES: pydantic
# ============================================================================
"""
Validation Schema Generator.

An EntityDefinition becomes a ValidationSchema: a frozen tree of FieldSchema
entries whose nodes are PrimitiveNode (one per primitive type) or SequenceNode
(array-of, recursive). Two schemas built from equal entities compare equal.

The tree is executable. ValidationSchema.model builds a pydantic model with
create_model() on first use:

    string  -> StrictStr
    number  -> StrictInt | StrictFloat
    integer -> StrictInt
    boolean -> StrictBool
    date    -> datetime (extended ISO-8601 strings or datetime only)
    json    -> JsonValue (top-level null only when the field is nullable)
    arrayOf -> List[...]

Unknown keys are rejected. Omitted optional fields resolve to their default
when one exists and stay absent otherwise.

Usage:
    schema = to_validation_schema(user_entity)
    record = schema.validate({"id": "u1", "email": "a@b.c"})
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from pydantic import (
    AfterValidator,
    BeforeValidator,
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    create_model,
)

from entityforge.logging import ComponentType, get_logger, log_context
from entityforge.models.column_types import (
    ColumnType,
    PrimitiveType,
    element_type,
    is_array_column_type,
    parse_iso_instant,
)
from entityforge.models.entity import (
    NO_DEFAULT,
    ColumnDefinition,
    EntityDefinition,
    filter_public_columns,
    thaw_value,
)

logger = get_logger(__name__, ComponentType.VALIDATION)


# ============================================================================
# SCHEMA NODES
# ============================================================================

@dataclass(frozen=True)
class PrimitiveNode:
    """Validator for one primitive type."""
    type: PrimitiveType


@dataclass(frozen=True)
class SequenceNode:
    """Validator for a sequence whose items all match `element`."""
    element: "SchemaNode"


SchemaNode = Union[PrimitiveNode, SequenceNode]


def node_for(column_type: ColumnType) -> SchemaNode:
    """Schema node for a column type (recursive for arrays)."""
    if is_array_column_type(column_type):
        return SequenceNode(node_for(element_type(column_type)))
    return PrimitiveNode(column_type)


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("null is not allowed")
    return value


# JsonValue admits None; a non-nullable json field must reject a top-level null
NonNullJson = Annotated[JsonValue, AfterValidator(_reject_null)]

# Same parser as date literals in the builder; no Unix timestamps
IsoInstant = Annotated[datetime, BeforeValidator(parse_iso_instant)]


PRIMITIVE_ANNOTATIONS: Dict[PrimitiveType, Any] = {
    PrimitiveType.STRING: StrictStr,
    PrimitiveType.NUMBER: Union[StrictInt, StrictFloat],
    PrimitiveType.INTEGER: StrictInt,
    PrimitiveType.BOOLEAN: StrictBool,
    PrimitiveType.DATE: IsoInstant,
    PrimitiveType.JSON: JsonValue,
}


def node_annotation(node: SchemaNode) -> Any:
    """Python type annotation that pydantic validates for a node."""
    if isinstance(node, SequenceNode):
        return List[node_annotation(node.element)]
    annotation = PRIMITIVE_ANNOTATIONS.get(node.type)
    if annotation is None:
        raise TypeError(f"Unhandled primitive type: {node.type!r}")
    return annotation


# ============================================================================
# FIELD & SCHEMA
# ============================================================================

@dataclass(frozen=True)
class FieldSchema:
    """
    One field of a validation schema.

    required: must be present in the record
    nullable: may be null when present
    default:  frozen literal applied to an omitted optional field, or NO_DEFAULT
    """
    name: str
    node: SchemaNode
    required: bool
    nullable: bool
    default: Any = NO_DEFAULT
    description: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def __hash__(self) -> int:
        # default may hold mappingproxy values
        return hash((self.name, self.node, self.required, self.nullable, self.description))

    def annotation(self) -> Any:
        if self.nullable:
            return Optional[node_annotation(self.node)]
        if self.node == PrimitiveNode(PrimitiveType.JSON):
            return NonNullJson
        return node_annotation(self.node)


@dataclass(frozen=True)
class ValidationSchema:
    """
    Frozen validation schema for one entity.

    Equality covers name, fields and strict only; the compiled model is a
    lazily built cache.
    """
    name: str
    fields: Tuple[FieldSchema, ...]
    strict: bool = True

    _model: Optional[Type[BaseModel]] = field(default=None, init=False, repr=False, compare=False)
    _lock: Any = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    @property
    def optional_fields(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields if not f.required)

    def get_field(self, name: str) -> FieldSchema:
        """
        Look up a field by column name.

        Raises:
            KeyError: no such field
        """
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    # =========================================================================
    # EXECUTION
    # =========================================================================

    @property
    def model(self) -> Type[BaseModel]:
        """Pydantic model compiled from this schema (built once)."""
        if self._model is None:
            with self._lock:
                if self._model is None:
                    object.__setattr__(self, "_model", self._compile())
        return self._model

    def _compile(self) -> Type[BaseModel]:
        # Internal names f_<n> with the column name as alias, so column names
        # never collide with BaseModel attributes.
        definitions: Dict[str, Any] = {}
        for index, fs in enumerate(self.fields):
            annotation = fs.annotation()
            if fs.required:
                info = Field(..., alias=fs.name, description=fs.description)
            elif fs.has_default:
                info = Field(
                    default_factory=partial(thaw_value, fs.default),
                    alias=fs.name,
                    description=fs.description,
                    validate_default=True,
                )
            else:
                # Left out of the result when unset; the None default is never validated
                info = Field(default=None, alias=fs.name, description=fs.description)
            definitions[f"f_{index}"] = (annotation, info)

        model = create_model(
            f"{self.name}Record",
            __config__=ConfigDict(extra="forbid" if self.strict else "ignore"),
            **definitions,
        )
        logger.debug(f"Compiled validation model {model.__name__} ({len(definitions)} fields)")
        return model

    def validate(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate a record.

        Returns:
            Validated record keyed by column name, defaults applied, omitted
            optional fields without a default left out

        Raises:
            pydantic.ValidationError: record does not satisfy the schema
        """
        instance = self.model.model_validate(dict(record))
        present = instance.model_fields_set
        result: Dict[str, Any] = {}
        for index, fs in enumerate(self.fields):
            key = f"f_{index}"
            if key in present or fs.has_default:
                result[fs.name] = getattr(instance, key)
        return result

    def is_valid(self, record: Mapping[str, Any]) -> bool:
        """True when validate() would succeed."""
        try:
            self.model.model_validate(dict(record))
        except ValueError:
            return False
        return True


@dataclass(frozen=True)
class InputSchemas:
    """Derived schemas for create and update payloads."""
    create: ValidationSchema
    update: ValidationSchema


# ============================================================================
# GENERATORS
# ============================================================================

def field_for(name: str, column: ColumnDefinition) -> FieldSchema:
    """FieldSchema for a column, using the shared required/nullable classification."""
    return FieldSchema(
        name=name,
        node=node_for(column.type),
        required=column.required,
        nullable=column.accepts_null,
        default=column.default,
        description=column.description,
    )


def _schema_from(name: str, columns: Mapping[str, ColumnDefinition]) -> ValidationSchema:
    return ValidationSchema(
        name=name,
        fields=tuple(field_for(col_name, column) for col_name, column in columns.items()),
    )


def to_validation_schema(entity: EntityDefinition) -> ValidationSchema:
    """
    Validation schema over every column of an entity, in column order.

    Deterministic: equal entities give equal schemas.
    """
    with log_context(entity=entity.name, artifact="validation"):
        schema = _schema_from(entity.name, entity.columns)
        logger.debug(
            f"Validation schema for {entity.name}: "
            f"{len(schema.fields)} fields, required={list(schema.required_fields)}"
        )
    return schema


def to_public_schema(entity: EntityDefinition) -> ValidationSchema:
    """Validation schema over public columns only (API responses)."""
    with log_context(entity=entity.name, artifact="public"):
        schema = _schema_from(f"{entity.name}Public", filter_public_columns(entity))
        logger.debug(f"Public schema for {entity.name}: {list(schema.field_names)}")
    return schema


def _is_server_managed(name: str, column: ColumnDefinition) -> bool:
    """Columns clients never send: id, immutable fields, default_now timestamps."""
    return name == "id" or column.immutable or column.db.default_now


def to_input_schemas(entity: EntityDefinition) -> InputSchemas:
    """
    Create and update payload schemas.

    create: every column except id, immutable and default_now columns
    update: same columns, all optional, no defaults applied
    """
    writable = {
        name: column
        for name, column in entity.columns.items()
        if not _is_server_managed(name, column)
    }

    create = _schema_from(f"{entity.name}InputCreate", writable)
    update = ValidationSchema(
        name=f"{entity.name}InputUpdate",
        fields=tuple(
            FieldSchema(
                name=name,
                node=node_for(column.type),
                required=False,
                nullable=column.accepts_null,
                description=column.description,
            )
            for name, column in writable.items()
        ),
    )
    with log_context(entity=entity.name, artifact="inputs"):
        logger.debug(
            f"Input schemas for {entity.name}: writable={list(writable)}, "
            f"create requires {list(create.required_fields)}"
        )
    return InputSchemas(create=create, update=update)


__all__ = [
    "PrimitiveNode",
    "SequenceNode",
    "SchemaNode",
    "FieldSchema",
    "ValidationSchema",
    "InputSchemas",
    "node_for",
    "node_annotation",
    "field_for",
    "to_validation_schema",
    "to_public_schema",
    "to_input_schemas",
]
