# ============================================================================
# SCHEMA MODULE
# ============================================================================
# STATUS: Core - Artifact generation from entity definitions
# PURPOSE: DDL, validation schemas and API documents (entity is the single
#          source of truth)
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from entityforge.schema.ddl_utils import (
    DialectSpec,
    DIALECTS,
    IndexBuilder,
    CommentBuilder,
    SchemaUtils,
    get_dialect_spec,
)
from entityforge.schema.sql_generator import EntityToSQL, to_ddl
from entityforge.schema.validation import (
    PrimitiveNode,
    SequenceNode,
    FieldSchema,
    ValidationSchema,
    InputSchemas,
    to_validation_schema,
    to_public_schema,
    to_input_schemas,
)
from entityforge.schema.openapi import (
    DocumentOptions,
    entity_to_component,
    to_api_document,
    generate_api_document,
)

__all__ = [
    # DDL
    "EntityToSQL",
    "to_ddl",
    "DialectSpec",
    "DIALECTS",
    "get_dialect_spec",
    "IndexBuilder",
    "CommentBuilder",
    "SchemaUtils",
    # Validation
    "PrimitiveNode",
    "SequenceNode",
    "FieldSchema",
    "ValidationSchema",
    "InputSchemas",
    "to_validation_schema",
    "to_public_schema",
    "to_input_schemas",
    # API document
    "DocumentOptions",
    "entity_to_component",
    "to_api_document",
    "generate_api_document",
]
