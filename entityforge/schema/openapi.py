# ============================================================================
# API DOCUMENT GENERATOR
# ============================================================================
# STATUS: Core - OpenAPI components from entity definitions
# PURPOSE: Map EntityDefinitions to OpenAPI 3.1 component schemas and documents
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: DocumentOptions, column_to_schema, entity_to_component,
#          to_api_document, generate_api_document
# DEPENDENCIES: fastapi.openapi.models, pydantic
# ============================================================================
"""
API Document Generator.

Each entity becomes one component under components.schemas[<Name>]:

    {
        "type": "object",
        "title": "User",
        "description": "...",
        "properties": {...},      # public columns, column order
        "required": [...],        # columns with required=True (omitted if none)
        "additionalProperties": false
    }

Property mapping:
    string  -> {"type": "string"}
    number  -> {"type": "number"}
    integer -> {"type": "integer"}
    boolean -> {"type": "boolean"}
    date    -> {"type": "string", "format": "date-time"}
    json    -> {} (any JSON value)
    arrayOf -> {"type": "array", "items": ...}

Columns that accept null carry "nullable": true. Required and nullable come
from ColumnDefinition, the same classification the DDL and validation
generators read.

The document is assembled from fastapi.openapi.models and dumped with
by_alias/exclude_none, so the result is a plain JSON-serializable dict.
"""

from typing import Any, Dict, Iterable, List, Optional

from fastapi.openapi.models import Components, Info, OpenAPI, Schema, Tag
from pydantic import BaseModel, Field

from entityforge.config.defaults import DocumentDefaults
from entityforge.logging import ComponentType, get_logger, log_context
from entityforge.models.column_types import (
    ColumnType,
    PrimitiveType,
    element_type,
    is_array_column_type,
)
from entityforge.models.entity import (
    ColumnDefinition,
    EntityDefinition,
    filter_public_columns,
)

logger = get_logger(__name__, ComponentType.OPENAPI)


class DocumentOptions(BaseModel):
    """Document-level settings for generated API documents."""
    title: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    description: Optional[str] = None
    openapi_version: str = "3.1.0"

    model_config = {"frozen": True, "extra": "forbid"}

    @classmethod
    def from_defaults(cls, defaults: Optional[DocumentDefaults] = None) -> "DocumentOptions":
        """Options from DocumentDefaults (environment-aware when from_env() is used)."""
        defaults = defaults or DocumentDefaults()
        return cls(
            title=defaults.title,
            version=defaults.version,
            openapi_version=defaults.openapi_version,
        )


# ============================================================================
# PROPERTY SCHEMAS
# ============================================================================

PRIMITIVE_SCHEMAS: Dict[PrimitiveType, Dict[str, Any]] = {
    PrimitiveType.STRING: {"type": "string"},
    PrimitiveType.NUMBER: {"type": "number"},
    PrimitiveType.INTEGER: {"type": "integer"},
    PrimitiveType.BOOLEAN: {"type": "boolean"},
    PrimitiveType.DATE: {"type": "string", "format": "date-time"},
    PrimitiveType.JSON: {},
}


def _type_fields(column_type: ColumnType) -> Dict[str, Any]:
    if is_array_column_type(column_type):
        return {
            "type": "array",
            "items": Schema(**_type_fields(element_type(column_type))),
        }
    fields = PRIMITIVE_SCHEMAS.get(column_type)
    if fields is None:
        raise TypeError(f"Unhandled primitive type: {column_type!r}")
    return dict(fields)


def column_to_schema(column: ColumnDefinition) -> Schema:
    """OpenAPI property schema for one column."""
    fields = _type_fields(column.type)
    if column.accepts_null:
        fields["nullable"] = True
    if column.description:
        fields["description"] = column.description
    if column.immutable:
        fields["readOnly"] = True
    # A null default is implied by nullable and dropped by exclude_none
    if column.has_default and column.default is not None:
        fields["default"] = column.default_value()
    if column.has_example:
        fields["examples"] = [column.example_value()]
    return Schema(**fields)


# ============================================================================
# COMPONENTS
# ============================================================================

def _component_description(entity: EntityDefinition) -> str:
    metadata = entity.metadata
    return (
        metadata.openapi.description
        or metadata.docs.description
        or f"{entity.name} entity"
    )


def _component_schema(entity: EntityDefinition) -> Schema:
    public = filter_public_columns(entity)
    with log_context(entity=entity.name, artifact="component"):
        properties: Dict[str, Schema] = {}
        for name, column in public.items():
            with log_context(column=name):
                properties[name] = column_to_schema(column)

        fields: Dict[str, Any] = {
            "type": "object",
            "title": entity.name,
            "description": _component_description(entity),
            "properties": properties,
            "additionalProperties": False,
        }
        required = [name for name, column in public.items() if column.required]
        if required:
            fields["required"] = required

        logger.debug(
            f"Component {entity.name}: {len(properties)} properties "
            f"({len(entity.columns) - len(properties)} hidden)"
        )
        return Schema(**fields)


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def entity_to_component(entity: EntityDefinition) -> Dict[str, Any]:
    """Component schema dict for one entity (public columns only)."""
    return _dump(_component_schema(entity))


# ============================================================================
# DOCUMENTS
# ============================================================================

def _document(
    schemas: Dict[str, Schema],
    options: DocumentOptions,
    tags: List[str],
) -> Dict[str, Any]:
    info_fields: Dict[str, Any] = {"title": options.title, "version": options.version}
    if options.description:
        info_fields["description"] = options.description

    doc_fields: Dict[str, Any] = {
        "openapi": options.openapi_version,
        "info": Info(**info_fields),
        "paths": {},
        "components": Components(schemas=schemas),
    }
    if tags:
        doc_fields["tags"] = [Tag(name=tag) for tag in tags]

    return _dump(OpenAPI(**doc_fields))


def to_api_document(
    entity: EntityDefinition,
    options: Optional[DocumentOptions] = None,
) -> Dict[str, Any]:
    """
    OpenAPI document holding one component under components.schemas[<Name>].

    Args:
        entity: Frozen entity definition
        options: Document title/version (DocumentOptions.from_defaults() if omitted)
    """
    options = options or DocumentOptions.from_defaults()
    document = _document(
        {entity.name: _component_schema(entity)},
        options,
        list(entity.metadata.openapi.tags),
    )
    with log_context(entity=entity.name, artifact="document"):
        logger.debug(f"API document for {entity.name} ({options.openapi_version})")
    return document


def is_documented(entity: EntityDefinition) -> bool:
    """Entity is included in project-level API documents."""
    return entity.metadata.active and entity.metadata.openapi.enabled


def generate_api_document(
    entities: Iterable[EntityDefinition],
    options: Optional[DocumentOptions] = None,
) -> Dict[str, Any]:
    """
    Project-level OpenAPI document over many entities.

    Skips inactive entities and entities with openapi.enabled=False. Tags are
    collected in first-seen order.
    """
    options = options or DocumentOptions.from_defaults()

    schemas: Dict[str, Schema] = {}
    tags: List[str] = []
    skipped = []
    for entity in entities:
        if not is_documented(entity):
            skipped.append(entity.name)
            continue
        schemas[entity.name] = _component_schema(entity)
        for tag in entity.metadata.openapi.tags:
            if tag not in tags:
                tags.append(tag)

    with log_context(artifact="document"):
        if skipped:
            logger.debug(f"Skipped undocumented entities: {skipped}")
        logger.info(f"Generated API document with {len(schemas)} component(s)")
    return _document(schemas, options, tags)


__all__ = [
    "DocumentOptions",
    "PRIMITIVE_SCHEMAS",
    "column_to_schema",
    "entity_to_component",
    "to_api_document",
    "is_documented",
    "generate_api_document",
]
