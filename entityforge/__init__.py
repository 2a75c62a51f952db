# ============================================================================
# ENTITYFORGE
# ============================================================================
# STATUS: Package root
# PURPOSE: Entity definitions compiled into DDL, validation schemas and
#          OpenAPI components
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
entityforge - one entity definition, three consistent artifacts.

Usage:
    from entityforge import build_entity, to_ddl, to_validation_schema, to_api_document

    user = build_entity({
        "name": "User",
        "table": True,
        "columns": {
            "id": {"type": "string"},
            "email": {"type": "string"},
            "settings": {"type": {"arrayOf": "json"}, "optional": True},
        },
    })

    to_ddl(user, "postgres")
    to_validation_schema(user).validate({"id": "u1", "email": "a@b.c"})
    to_api_document(user)
"""

from entityforge.__version__ import __version__
from entityforge.contracts import Dialect, FieldVisibility, TableNaming, TestMode
from entityforge.errors import (
    EntityError,
    EntityValidationError,
    InvalidSpecificationError,
    InvalidNameError,
    InvalidColumnTypeError,
    InvalidDefaultError,
    GenerationError,
    UnsupportedDialectError,
    UnsupportedColumnTypeError,
)
from entityforge.models import (
    PrimitiveType,
    ArrayOf,
    ColumnType,
    EntitySpecification,
    ColumnSpecification,
    EntityDefinition,
    ColumnDefinition,
    NO_DEFAULT,
    mask_secret_fields,
)
from entityforge.services import (
    EntityBuilder,
    build_entity,
    fingerprint_specification,
    build_entity_artifacts,
    build_project_artifacts,
)
from entityforge.schema import (
    EntityToSQL,
    to_ddl,
    ValidationSchema,
    to_validation_schema,
    to_input_schemas,
    DocumentOptions,
    to_api_document,
    generate_api_document,
)

__all__ = [
    "__version__",
    # Contracts
    "Dialect",
    "FieldVisibility",
    "TableNaming",
    "TestMode",
    # Errors
    "EntityError",
    "EntityValidationError",
    "InvalidSpecificationError",
    "InvalidNameError",
    "InvalidColumnTypeError",
    "InvalidDefaultError",
    "GenerationError",
    "UnsupportedDialectError",
    "UnsupportedColumnTypeError",
    # Models
    "PrimitiveType",
    "ArrayOf",
    "ColumnType",
    "EntitySpecification",
    "ColumnSpecification",
    "EntityDefinition",
    "ColumnDefinition",
    "NO_DEFAULT",
    "mask_secret_fields",
    # Building
    "EntityBuilder",
    "build_entity",
    "fingerprint_specification",
    "build_entity_artifacts",
    "build_project_artifacts",
    # Generators
    "EntityToSQL",
    "to_ddl",
    "ValidationSchema",
    "to_validation_schema",
    "to_input_schemas",
    "DocumentOptions",
    "to_api_document",
    "generate_api_document",
]
