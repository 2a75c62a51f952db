# ============================================================================
# COLUMN TYPE TAXONOMY
# ============================================================================
# STATUS: Core model - Shared type vocabulary for every generator
# PURPOSE: Primitive types, the arrayOf wrapper, and the discrimination helpers
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PrimitiveType, ArrayOf, ColumnType, is_array_column_type, element_type
# DEPENDENCIES: enum, dataclasses, pydantic
# ============================================================================
"""
Column Type Taxonomy

A column type is either a PrimitiveType or an ArrayOf wrapper holding exactly
one column type. This module is the only place that tells the two apart;
generators branch on is_array_column_type() and element_type().

Raw forms accepted by parse_column_type():
    "string"                      -> PrimitiveType.STRING
    {"arrayOf": "json"}           -> ArrayOf(PrimitiveType.JSON)
    {"arrayOf": {"arrayOf": ...}} -> nested ArrayOf
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import TypeAdapter, ValidationError


class PrimitiveType(str, Enum):
    """Primitive column types. Closed set: adding one touches every generator."""
    STRING = "string"
    NUMBER = "number"        # int or float
    INTEGER = "integer"      # int only
    BOOLEAN = "boolean"
    DATE = "date"            # ISO-8601 instant
    JSON = "json"            # opaque JSON value


@dataclass(frozen=True)
class ArrayOf:
    """Sequence of values of a single inner column type."""
    element: "ColumnType"

    def __post_init__(self):
        if not isinstance(self.element, (PrimitiveType, ArrayOf)):
            raise TypeError(f"ArrayOf element must be a column type, got {self.element!r}")


ColumnType = Union[PrimitiveType, ArrayOf]

ARRAY_KEYS = ("arrayOf", "array_of")


# ============================================================================
# DISCRIMINATION
# ============================================================================

def is_array_column_type(column_type: ColumnType) -> bool:
    """Check if a column type is an arrayOf wrapper."""
    return isinstance(column_type, ArrayOf)


def element_type(column_type: ColumnType) -> ColumnType:
    """
    Get the wrapped element type of an arrayOf column type.

    Raises:
        TypeError: if column_type is a primitive
    """
    if not isinstance(column_type, ArrayOf):
        raise TypeError(f"{describe_column_type(column_type)} is not an array type")
    return column_type.element


def base_primitive(column_type: ColumnType) -> PrimitiveType:
    """Innermost primitive of a (possibly nested) column type."""
    while isinstance(column_type, ArrayOf):
        column_type = column_type.element
    return column_type


def array_depth(column_type: ColumnType) -> int:
    """Number of arrayOf wrappers around the base primitive."""
    depth = 0
    while isinstance(column_type, ArrayOf):
        column_type = column_type.element
        depth += 1
    return depth


def describe_column_type(column_type: ColumnType) -> str:
    """Human-readable form, e.g. "string" or "arrayOf(json)"."""
    if isinstance(column_type, ArrayOf):
        return f"arrayOf({describe_column_type(column_type.element)})"
    return column_type.value


def column_type_to_raw(column_type: ColumnType) -> Union[str, dict]:
    """Inverse of parse_column_type (canonical raw form)."""
    if isinstance(column_type, ArrayOf):
        return {"arrayOf": column_type_to_raw(column_type.element)}
    return column_type.value


def parse_column_type(raw: Any) -> ColumnType:
    """
    Parse a raw column type into a ColumnType.

    Raises:
        ValueError: if raw is not a primitive name or a well-formed arrayOf
    """
    if isinstance(raw, (PrimitiveType, ArrayOf)):
        return raw

    if isinstance(raw, str):
        try:
            return PrimitiveType(raw)
        except ValueError:
            raise ValueError(f"Unknown primitive type: {raw!r}") from None

    if isinstance(raw, Mapping):
        keys = [key for key in ARRAY_KEYS if key in raw]
        if len(keys) != 1 or len(raw) != 1:
            raise ValueError(f"Array type must have exactly one 'arrayOf' key: {raw!r}")
        return ArrayOf(parse_column_type(raw[keys[0]]))

    raise ValueError(f"Unrecognized column type: {raw!r}")


# ============================================================================
# LITERAL CHECKS
# ============================================================================

# Extended ISO-8601 only: calendar date, optional time with seconds, optional offset
ISO_INSTANT_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?(?:Z|[+-]\d{2}:\d{2})?)?"
)

_DATETIME_ADAPTER = TypeAdapter(datetime)


def parse_iso_instant(value: Any) -> datetime:
    """
    Parse an ISO-8601 instant.

    Both date literals in specifications and date fields of validated records
    go through this function, so a default accepted at build time is always
    accepted at validation time. Basic-format strings ("20260101T000000Z")
    and numeric timestamps are rejected.

    Args:
        value: datetime (returned unchanged) or extended ISO-8601 string

    Raises:
        ValueError: if value is not a datetime or an extended ISO-8601 string
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 string, got {type(value).__name__}")
    if not ISO_INSTANT_RE.fullmatch(value):
        raise ValueError(f"Not an extended ISO-8601 instant: {value!r}")
    try:
        return _DATETIME_ADAPTER.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"Invalid ISO-8601 instant {value!r}: {e.errors()[0]['msg']}") from None


def is_json_value(value: Any) -> bool:
    """Check if value is representable as JSON."""
    if value is None or isinstance(value, (bool, str, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, (list, tuple)):
        return all(is_json_value(item) for item in value)
    if isinstance(value, Mapping):
        return all(isinstance(key, str) and is_json_value(item) for key, item in value.items())
    return False


def literal_mismatch(column_type: ColumnType, value: Any) -> Optional[str]:
    """
    Check a literal against a column type.

    Returns:
        None if value satisfies column_type, otherwise the reason it does not
    """
    if isinstance(column_type, ArrayOf):
        if not isinstance(value, (list, tuple)):
            return f"expected an array literal, got {type(value).__name__}"
        for index, item in enumerate(value):
            reason = literal_mismatch(column_type.element, item)
            if reason:
                return f"element {index}: {reason}"
        return None

    if column_type is PrimitiveType.STRING:
        if isinstance(value, str):
            return None
        return f"expected a string, got {type(value).__name__}"

    if column_type is PrimitiveType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"expected a number, got {type(value).__name__}"
        if isinstance(value, float) and not math.isfinite(value):
            return "expected a finite number"
        return None

    if column_type is PrimitiveType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            return f"expected an integer, got {type(value).__name__}"
        return None

    if column_type is PrimitiveType.BOOLEAN:
        if isinstance(value, bool):
            return None
        return f"expected a boolean, got {type(value).__name__}"

    if column_type is PrimitiveType.DATE:
        if isinstance(value, datetime):
            return None
        try:
            parse_iso_instant(value)
        except ValueError:
            return "expected an ISO-8601 date string"
        return None

    if column_type is PrimitiveType.JSON:
        if is_json_value(value):
            return None
        return "expected a JSON-serializable value"

    raise TypeError(f"Unhandled column type: {column_type!r}")


__all__ = [
    "PrimitiveType",
    "ArrayOf",
    "ColumnType",
    "is_array_column_type",
    "element_type",
    "base_primitive",
    "array_depth",
    "describe_column_type",
    "column_type_to_raw",
    "parse_column_type",
    "ISO_INSTANT_RE",
    "parse_iso_instant",
    "is_json_value",
    "literal_mismatch",
]
