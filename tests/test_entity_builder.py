# ============================================================================
# ENTITY BUILDER TESTS
# ============================================================================
# STATUS: Tests - Construction-time validation and the frozen IR
# PURPOSE: Verify naming rules, default checks, deep immutability and caching
# CREATED: 18 OCT 2026
# ============================================================================
"""
Entity Builder Tests

Pure unit tests - no I/O.

Run with:
    pytest tests/test_entity_builder.py -v
"""

import dataclasses
import threading
from datetime import datetime, timezone

import pytest

from entityforge.contracts import FieldVisibility, TestMode
from entityforge.errors import (
    EntityValidationError,
    InvalidColumnTypeError,
    InvalidDefaultError,
    InvalidNameError,
    InvalidSpecificationError,
)
from entityforge.models.column_types import ArrayOf, PrimitiveType
from entityforge.models.entity import (
    NO_DEFAULT,
    EntityDefinition,
    EntitySpecification,
    filter_public_columns,
    filter_stored_columns,
    mask_secret_fields,
)
from entityforge.services.entity_builder import (
    EntityBuilder,
    build_entity,
    fingerprint_specification,
    is_pascal_case,
)


# ============================================================================
# HELPERS
# ============================================================================

def _make_user_spec(**overrides):
    """The User entity used throughout the suite."""
    spec = {
        "name": "User",
        "table": True,
        "columns": {
            "id": {"type": "string"},
            "email": {"type": "string"},
            "createdAt": {"type": "date", "default": "1970-01-01T00:00:00.000Z"},
            "settings": {"type": {"arrayOf": "json"}, "optional": True},
        },
    }
    spec.update(overrides)
    return spec


def _make_spec(columns, name="Thing", **overrides):
    spec = {"name": name, "table": True, "columns": columns}
    spec.update(overrides)
    return spec


# ============================================================================
# SUCCESSFUL CONSTRUCTION
# ============================================================================

class TestBuildEntity:
    def test_user_entity(self):
        user = build_entity(_make_user_spec())

        assert isinstance(user, EntityDefinition)
        assert user.name == "User"
        assert user.table is True
        assert user.column_names == ("id", "email", "createdAt", "settings")

    def test_column_types_parsed(self):
        user = build_entity(_make_user_spec())

        assert user.columns["id"].type is PrimitiveType.STRING
        assert user.columns["createdAt"].type is PrimitiveType.DATE
        assert user.columns["settings"].type == ArrayOf(PrimitiveType.JSON)

    def test_required_and_accepts_null(self):
        user = build_entity(_make_user_spec())

        assert user.required_columns == ("id", "email", "createdAt")
        assert user.columns["settings"].required is False
        assert user.columns["settings"].accepts_null is True
        assert user.columns["email"].accepts_null is False

    def test_nullable_is_independent_of_optional(self):
        entity = build_entity(_make_spec({"note": {"type": "string", "nullable": True}}))
        note = entity.columns["note"]

        assert note.required is True
        assert note.accepts_null is True

    def test_defaults(self):
        user = build_entity(_make_user_spec())

        assert user.columns["createdAt"].default == "1970-01-01T00:00:00.000Z"
        assert user.columns["id"].default is NO_DEFAULT
        assert user.columns["id"].has_default is False

    def test_null_default_on_nullable_column(self):
        entity = build_entity(_make_spec({"note": {"type": "string", "nullable": True, "default": None}}))

        assert entity.columns["note"].has_default is True
        assert entity.columns["note"].default is None

    def test_datetime_default_normalized(self):
        instant = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        entity = build_entity(_make_spec({"at": {"type": "date", "default": instant}}))

        assert entity.columns["at"].default == "2026-10-18T12:00:00+00:00"

    def test_table_defaults_false(self):
        entity = build_entity({"name": "Shape", "columns": {"x": {"type": "number"}}})
        assert entity.table is False

    def test_fields_alias(self):
        entity = build_entity({"name": "Shape", "fields": {"x": {"type": "number"}}})
        assert entity.column_names == ("x",)

    def test_accepts_specification_model(self):
        spec = EntitySpecification.model_validate(_make_user_spec())
        assert build_entity(spec).name == "User"

    def test_metadata(self):
        entity = build_entity(_make_user_spec(
            doc=True,
            test="smoke",
            openapi={"tags": ["users"], "description": "Application user"},
            docs={"description": "A user", "examples": {"basic": {"id": "u1"}}},
        ))

        assert entity.metadata.doc is True
        assert entity.metadata.test is TestMode.SMOKE
        assert entity.metadata.active is True
        assert entity.metadata.openapi.tags == ("users",)
        assert entity.metadata.openapi.description == "Application user"
        assert entity.metadata.docs.examples["basic"]["id"] == "u1"

    def test_test_false_means_none(self):
        entity = build_entity(_make_user_spec(test=False))
        assert entity.metadata.test is None

    def test_column_options(self):
        entity = build_entity(_make_spec({
            "id": {"type": "string", "immutable": True, "db": {"primary": True}},
            "password": {"type": "string", "visibility": "secret", "stored": True},
            "score": {"type": "integer", "visibility": "internal", "example": 7},
            "createdAt": {"type": "date", "db": {"defaultNow": True}},
        }))

        assert entity.columns["id"].immutable is True
        assert entity.columns["id"].db.primary is True
        assert entity.columns["password"].visibility is FieldVisibility.SECRET
        assert entity.columns["score"].example == 7
        assert entity.columns["createdAt"].db.default_now is True


# ============================================================================
# NAMING
# ============================================================================

class TestNaming:
    def test_lowercase_entity_name(self):
        with pytest.raises(InvalidNameError, match="'user'") as exc_info:
            build_entity({"name": "user", "columns": {"id": {"type": "string"}}})

        assert exc_info.value.name == "user"
        assert exc_info.value.kind == "entity"

    def test_lowercase_name_on_model_input(self):
        spec = EntitySpecification(name="user", columns={"id": {"type": "string"}})
        with pytest.raises(InvalidNameError):
            build_entity(spec)

    @pytest.mark.parametrize("name", ["User_Account", "1User", "", "User Account", "Üser"])
    def test_invalid_entity_names(self, name):
        with pytest.raises(InvalidNameError):
            build_entity(_make_spec({"id": {"type": "string"}}, name=name))

    def test_pascal_case_helper(self):
        assert is_pascal_case("UserAccount2")
        assert not is_pascal_case("userAccount")
        assert not is_pascal_case(None)

    @pytest.mark.parametrize("column", ["1st", "_id", "first-name", "with space"])
    def test_invalid_column_names(self, column):
        with pytest.raises(InvalidNameError) as exc_info:
            build_entity(_make_spec({column: {"type": "string"}}))

        assert exc_info.value.kind == "column"
        assert exc_info.value.entity_name == "Thing"


# ============================================================================
# SHAPE & TYPES
# ============================================================================

class TestSpecificationShape:
    def test_zero_columns_rejected(self):
        with pytest.raises(InvalidSpecificationError, match="at least one column"):
            build_entity({"name": "Empty", "columns": {}})

    def test_unknown_entity_key(self):
        with pytest.raises(InvalidSpecificationError) as exc_info:
            build_entity(_make_user_spec(colour="blue"))

        assert isinstance(exc_info.value.__cause__, Exception)
        assert exc_info.value.entity_name == "User"

    def test_unknown_column_key(self):
        with pytest.raises(InvalidSpecificationError):
            build_entity(_make_spec({"id": {"type": "string", "maxLength": 3}}))

    def test_wrong_flag_type(self):
        with pytest.raises(InvalidSpecificationError):
            build_entity(_make_spec({"id": {"type": "string", "optional": "yes"}}))

    def test_non_mapping_input(self):
        with pytest.raises(InvalidSpecificationError, match="must be a mapping"):
            build_entity(["User"])

    def test_missing_name(self):
        with pytest.raises(InvalidSpecificationError):
            build_entity({"columns": {"id": {"type": "string"}}})

    def test_invalid_column_type(self):
        with pytest.raises(InvalidColumnTypeError, match="uuid") as exc_info:
            build_entity(_make_spec({"id": {"type": "uuid"}}))

        assert exc_info.value.column == "id"

    def test_invalid_nested_column_type(self):
        with pytest.raises(InvalidColumnTypeError):
            build_entity(_make_spec({"tags": {"type": {"arrayOf": {"arrayOf": "text"}}}}))

    def test_nested_arrays_accepted(self):
        entity = build_entity(_make_spec({"grid": {"type": {"arrayOf": {"arrayOf": "integer"}}}}))
        assert entity.columns["grid"].type == ArrayOf(ArrayOf(PrimitiveType.INTEGER))

    def test_errors_share_base(self):
        with pytest.raises(EntityValidationError):
            build_entity({"name": "user", "columns": {}})

    def test_default_now_requires_date(self):
        with pytest.raises(InvalidSpecificationError, match="default_now requires type date"):
            build_entity(_make_spec({"at": {"type": "string", "db": {"default_now": True}}}))

    def test_default_now_excludes_default(self):
        with pytest.raises(InvalidSpecificationError, match="mutually exclusive"):
            build_entity(_make_spec({"at": {
                "type": "date",
                "default": "2026-01-01T00:00:00Z",
                "db": {"default_now": True},
            }}))

    def test_primary_key_cannot_be_optional(self):
        with pytest.raises(InvalidSpecificationError, match="primary key"):
            build_entity(_make_spec({"id": {"type": "string", "optional": True, "db": {"primary": True}}}))


# ============================================================================
# DEFAULT LITERALS
# ============================================================================

class TestDefaults:
    def test_number_default_mismatch(self):
        with pytest.raises(InvalidDefaultError) as exc_info:
            build_entity({"name": "Counter", "columns": {"count": {"type": "number", "default": "five"}}})

        error = exc_info.value
        message = str(error)
        assert error.column == "count"
        assert error.declared_type == "number"
        assert error.value == "five"
        assert "count" in message
        assert "number" in message
        assert "'five'" in message

    def test_array_default_must_be_list(self):
        with pytest.raises(InvalidDefaultError, match="expected an array literal"):
            build_entity(_make_spec({"tags": {"type": {"arrayOf": "string"}, "default": "a"}}))

    def test_array_default_elements_checked(self):
        with pytest.raises(InvalidDefaultError, match="element 1"):
            build_entity(_make_spec({"tags": {"type": {"arrayOf": "string"}, "default": ["a", 2]}}))

    def test_nested_array_default(self):
        entity = build_entity(_make_spec({
            "grid": {"type": {"arrayOf": {"arrayOf": "integer"}}, "default": [[1, 2], [3]]},
        }))
        assert entity.columns["grid"].default == ((1, 2), (3,))

    def test_null_default_on_required_non_nullable(self):
        with pytest.raises(InvalidDefaultError, match="does not accept null"):
            build_entity(_make_spec({"name": {"type": "string", "default": None}}))

    def test_bad_date_default(self):
        with pytest.raises(InvalidDefaultError, match="ISO-8601"):
            build_entity(_make_spec({"at": {"type": "date", "default": "yesterday"}}))

    def test_basic_format_date_default_rejected(self):
        spec = {
            "name": "Event",
            "columns": {"at": {"type": "date", "optional": True, "default": "20260101T000000Z"}},
        }
        with pytest.raises(InvalidDefaultError, match="ISO-8601"):
            build_entity(spec)

    def test_out_of_range_date_default_rejected(self):
        with pytest.raises(InvalidDefaultError):
            build_entity(_make_spec({"at": {"type": "date", "default": "2026-13-01T00:00:00Z"}}))

    def test_bool_is_not_integer(self):
        with pytest.raises(InvalidDefaultError):
            build_entity(_make_spec({"n": {"type": "integer", "default": True}}))

    def test_example_checked(self):
        with pytest.raises(InvalidDefaultError) as exc_info:
            build_entity(_make_spec({"n": {"type": "integer", "example": "seven"}}))

        assert exc_info.value.attribute == "example"
        assert "Invalid example" in str(exc_info.value)


# ============================================================================
# IMMUTABILITY & OWNERSHIP
# ============================================================================

class TestImmutability:
    """The returned definition rejects every mutation."""

    def _build(self):
        return build_entity(_make_spec({
            "id": {"type": "string"},
            "settings": {"type": "json", "default": {"theme": "dark", "flags": [1, 2]}},
            "tags": {"type": {"arrayOf": "string"}, "default": ["a"]},
        }))

    def test_entity_attribute(self):
        entity = self._build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            entity.name = "Other"

    def test_column_map_item_assignment(self):
        entity = self._build()
        with pytest.raises(TypeError):
            entity.columns["extra"] = entity.columns["id"]

    def test_column_map_item_deletion(self):
        entity = self._build()
        with pytest.raises(TypeError):
            del entity.columns["id"]

    def test_column_attribute(self):
        entity = self._build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            entity.columns["id"].optional = True

    def test_metadata_attribute(self):
        entity = self._build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            entity.metadata.active = False

    def test_json_default_frozen(self):
        entity = self._build()
        default = entity.columns["settings"].default
        with pytest.raises(TypeError):
            default["theme"] = "light"
        with pytest.raises(TypeError):
            default["flags"][0] = 9

    def test_array_default_frozen(self):
        entity = self._build()
        with pytest.raises(TypeError):
            entity.columns["tags"].default[0] = "b"

    def test_default_value_is_plain_copy(self):
        entity = self._build()
        value = entity.columns["settings"].default_value()

        assert value == {"theme": "dark", "flags": [1, 2]}
        value["theme"] = "light"
        assert entity.columns["settings"].default["theme"] == "dark"

    def test_no_reference_to_raw_spec(self):
        spec = _make_spec({
            "id": {"type": "string"},
            "settings": {"type": "json", "default": {"theme": "dark"}},
        })
        entity = build_entity(spec)

        spec["columns"]["settings"]["default"]["theme"] = "light"
        spec["columns"]["extra"] = {"type": "string"}
        spec["name"] = "Changed"

        assert entity.name == "Thing"
        assert entity.column_names == ("id", "settings")
        assert entity.columns["settings"].default["theme"] == "dark"


# ============================================================================
# FINGERPRINT & CACHE
# ============================================================================

class TestFingerprint:
    def test_deterministic(self):
        assert fingerprint_specification(_make_user_spec()) == fingerprint_specification(_make_user_spec())

    def test_sha256_hex(self):
        fingerprint = fingerprint_specification(_make_user_spec())
        assert len(fingerprint) == 64
        int(fingerprint, 16)

    def test_key_order_independent(self):
        spec = _make_user_spec()
        reordered = {
            "columns": {
                name: dict(reversed(list(column.items())))
                for name, column in spec["columns"].items()
            },
            "table": True,
            "name": "User",
        }
        assert fingerprint_specification(spec) == fingerprint_specification(reordered)

    def test_column_order_matters(self):
        spec = _make_user_spec()
        swapped = _make_user_spec(columns=dict(reversed(list(spec["columns"].items()))))
        assert fingerprint_specification(spec) != fingerprint_specification(swapped)

    def test_any_change_changes_fingerprint(self):
        spec = _make_user_spec()
        changed = _make_user_spec()
        changed["columns"]["email"] = {"type": "string", "nullable": True}
        assert fingerprint_specification(spec) != fingerprint_specification(changed)

    def test_entity_carries_fingerprint(self):
        spec = _make_user_spec()
        assert build_entity(spec).fingerprint == fingerprint_specification(spec)

    def test_equal_builds_hash_equal(self):
        spec = _make_spec({
            "settings": {"type": "json", "default": {"theme": "dark", "flags": [1, 2]}},
        })
        first = build_entity(spec)
        second = build_entity(spec)

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_column_with_object_default_is_hashable(self):
        entity = build_entity(_make_spec({"settings": {"type": "json", "default": {"a": {"b": 1}}}}))
        column = entity.columns["settings"]

        assert {column: "settings"}[column] == "settings"
        assert hash(column) == hash(dataclasses.replace(column))

    def test_entity_with_docs_examples_is_hashable(self):
        spec = _make_user_spec(docs={"examples": {"basic": {"id": "u1"}}})
        assert hash(build_entity(spec)) == hash(build_entity(spec))


class TestEntityBuilderCache:
    def test_cache_hit_returns_same_definition(self):
        builder = EntityBuilder(cache_size=4)
        first = builder.build(_make_user_spec())
        second = builder.build(_make_user_spec())

        assert first is second
        info = builder.cache_info()
        assert info["hits"] == 1
        assert info["misses"] == 1
        assert info["size"] == 1

    def test_changed_spec_is_never_stale(self):
        builder = EntityBuilder(cache_size=4)
        spec = _make_user_spec()
        first = builder.build(spec)

        spec["columns"]["email"]["nullable"] = True
        second = builder.build(spec)

        assert second is not first
        assert second.columns["email"].accepts_null is True
        assert first.columns["email"].accepts_null is False

    def test_lru_eviction(self):
        builder = EntityBuilder(cache_size=2)
        for name in ("Alpha", "Beta", "Gamma"):
            builder.build(_make_spec({"id": {"type": "string"}}, name=name))

        assert builder.cache_info()["size"] == 2

    def test_cache_disabled(self):
        builder = EntityBuilder(cache_size=0)
        first = builder.build(_make_user_spec())
        second = builder.build(_make_user_spec())

        assert first is not second
        assert first == second
        assert builder.cache_info()["size"] == 0

    def test_clear_cache(self):
        builder = EntityBuilder(cache_size=4)
        builder.build(_make_user_spec())
        builder.clear_cache()

        assert builder.cache_info() == {"hits": 0, "misses": 0, "size": 0, "max_size": 4}

    def test_invalid_spec_not_cached(self):
        builder = EntityBuilder(cache_size=4)
        with pytest.raises(InvalidNameError):
            builder.build({"name": "user", "columns": {"id": {"type": "string"}}})
        assert builder.cache_info()["size"] == 0

    def test_concurrent_builds(self):
        builder = EntityBuilder(cache_size=4)
        results = []
        lock = threading.Lock()

        def worker():
            entity = builder.build(_make_user_spec())
            with lock:
                results.append(entity)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert len({entity.fingerprint for entity in results}) == 1
        assert builder.cache_info()["size"] == 1


# ============================================================================
# PROJECTIONS
# ============================================================================

class TestProjections:
    def _build(self):
        return build_entity(_make_spec({
            "id": {"type": "string"},
            "password": {"type": "string", "visibility": "secret"},
            "internalScore": {"type": "number", "visibility": "internal"},
            "display": {"type": "string", "stored": False, "optional": True},
        }))

    def test_public_columns(self):
        assert list(filter_public_columns(self._build())) == ["id", "display"]

    def test_stored_columns(self):
        assert list(filter_stored_columns(self._build())) == ["id", "password", "internalScore"]

    def test_mask_secret_fields(self):
        record = {"id": "u1", "password": "hunter2", "internalScore": 1.0}
        masked = mask_secret_fields(record, self._build())

        assert masked == {"id": "u1", "password": "***", "internalScore": 1.0}
        assert record["password"] == "hunter2"
