# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Core - Column types, raw specifications and the frozen IR
# PURPOSE: Data structures shared by the builder and every generator
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Entity models.

Column types:
    PrimitiveType, ArrayOf, ColumnType

Raw input (pydantic):
    EntitySpecification, ColumnSpecification

Frozen IR (dataclasses):
    EntityDefinition, ColumnDefinition, EntityMetadata
"""

from entityforge.models.column_types import (
    PrimitiveType,
    ArrayOf,
    ColumnType,
    is_array_column_type,
    element_type,
    base_primitive,
    array_depth,
    describe_column_type,
    parse_column_type,
)
from entityforge.models.entity import (
    NO_DEFAULT,
    ColumnDbSpecification,
    ColumnSpecification,
    OpenAPIConfig,
    DocsConfig,
    EntitySpecification,
    ColumnDbMetadata,
    ColumnDefinition,
    OpenAPIMetadata,
    DocsMetadata,
    EntityMetadata,
    EntityDefinition,
    freeze_value,
    thaw_value,
    filter_stored_columns,
    filter_public_columns,
    mask_secret_fields,
)

__all__ = [
    # Column types
    "PrimitiveType",
    "ArrayOf",
    "ColumnType",
    "is_array_column_type",
    "element_type",
    "base_primitive",
    "array_depth",
    "describe_column_type",
    "parse_column_type",
    # Raw specification
    "ColumnDbSpecification",
    "ColumnSpecification",
    "OpenAPIConfig",
    "DocsConfig",
    "EntitySpecification",
    # Frozen IR
    "NO_DEFAULT",
    "ColumnDbMetadata",
    "ColumnDefinition",
    "OpenAPIMetadata",
    "DocsMetadata",
    "EntityMetadata",
    "EntityDefinition",
    "freeze_value",
    "thaw_value",
    # Projections
    "filter_stored_columns",
    "filter_public_columns",
    "mask_secret_fields",
]
