# ============================================================================
# ARTIFACT PIPELINE TESTS
# ============================================================================
# STATUS: Tests - End-to-end generation over a set of entities
# PURPOSE: Verify ordering, skipping, non-table handling and failure behavior
# CREATED: 18 OCT 2026
# ============================================================================
"""
Artifact Pipeline Tests

Run with:
    pytest tests/test_artifacts.py -v
"""

import logging

import pytest

from entityforge.config.defaults import DDLDefaults
from entityforge.errors import (
    InvalidDefaultError,
    InvalidNameError,
    UnsupportedColumnTypeError,
    UnsupportedDialectError,
)
from entityforge.schema.openapi import DocumentOptions, entity_to_component
from entityforge.schema.sql_generator import to_ddl
from entityforge.schema.validation import to_validation_schema
from entityforge.services.artifacts import (
    build_entity_artifacts,
    build_project_artifacts,
)
from entityforge.services.entity_builder import build_entity, get_builder


# ============================================================================
# HELPERS
# ============================================================================

OPTIONS = DocumentOptions(title="Pipeline API", version="2.0.0")

USER_SPEC = {
    "name": "User",
    "table": True,
    "columns": {
        "id": {"type": "string", "db": {"primary": True}},
        "email": {"type": "string", "db": {"unique": True}},
        "tags": {"type": {"arrayOf": "string"}, "optional": True},
    },
}

SHAPE_SPEC = {
    "name": "Shape",
    "table": False,
    "columns": {
        "points": {"type": {"arrayOf": {"arrayOf": "number"}}},
    },
}

LEGACY_SPEC = {
    "name": "Legacy",
    "table": True,
    "active": False,
    "columns": {"id": {"type": "string"}},
}


def _make_project(dialect="sqlite", **kwargs):
    entities = [build_entity(USER_SPEC), build_entity(SHAPE_SPEC), build_entity(LEGACY_SPEC)]
    return build_project_artifacts(entities, dialect=dialect, options=OPTIONS, **kwargs)


# ============================================================================
# SINGLE ENTITY
# ============================================================================

class TestEntityArtifacts:
    def test_matches_individual_generators(self):
        user = build_entity(USER_SPEC)
        artifacts = build_entity_artifacts(user, "postgres")

        assert artifacts.name == "User"
        assert artifacts.entity is user
        assert artifacts.ddl == to_ddl(user, "postgres")
        assert artifacts.validation == to_validation_schema(user)
        assert artifacts.component == entity_to_component(user)

    def test_derived_schemas_included(self):
        artifacts = build_entity_artifacts(build_entity(USER_SPEC))

        assert artifacts.public.name == "UserPublic"
        assert artifacts.inputs.create.name == "UserInputCreate"
        assert artifacts.inputs.update.name == "UserInputUpdate"

    def test_non_table_entity_has_no_ddl(self):
        artifacts = build_entity_artifacts(build_entity(SHAPE_SPEC), "postgres")

        assert artifacts.ddl is None
        assert artifacts.validation.field_names == ("points",)

    def test_raw_specification(self):
        artifacts = build_entity_artifacts(USER_SPEC, "mysql")
        assert artifacts.ddl.startswith("CREATE TABLE IF NOT EXISTS `User`")

    def test_invalid_raw_specification(self):
        with pytest.raises(InvalidNameError):
            build_entity_artifacts({"name": "user", "columns": {"id": {"type": "string"}}})


# ============================================================================
# PROJECT
# ============================================================================

class TestProjectArtifacts:
    def test_entities_and_skipped(self):
        project = _make_project()

        assert project.dialect == "sqlite"
        assert project.entity_names == ("User", "Shape")
        assert project.skipped == ("Legacy",)

    def test_ddl_only_for_tables(self):
        project = _make_project()

        assert project.get("User").ddl == to_ddl(build_entity(USER_SPEC), "sqlite")
        assert project.get("Shape").ddl is None
        assert project.ddl_script() == project.get("User").ddl

    def test_ddl_script_joins_tables(self):
        post = {"name": "Post", "table": True, "columns": {"id": {"type": "string"}}}
        project = build_project_artifacts([USER_SPEC, post], dialect="postgres")

        assert project.ddl_script() == (
            to_ddl(build_entity(USER_SPEC), "postgres")
            + "\n\n"
            + to_ddl(build_entity(post), "postgres")
        )

    def test_document_covers_active_entities(self):
        document = _make_project().document

        assert document["info"] == {"title": "Pipeline API", "version": "2.0.0"}
        assert list(document["components"]["schemas"]) == ["User", "Shape"]

    def test_unknown_entity(self):
        with pytest.raises(KeyError):
            _make_project().get("Legacy")

    def test_input_order_preserved(self):
        specs = [
            {"name": f"Entity{i}", "table": True, "columns": {"id": {"type": "string"}}}
            for i in range(24)
        ]
        project = build_project_artifacts(specs, dialect="postgres", max_workers=8)

        assert project.entity_names == tuple(f"Entity{i}" for i in range(24))

    def test_empty_project(self):
        project = build_project_artifacts([], options=OPTIONS)

        assert project.entities == ()
        assert project.ddl_script() == ""
        assert project.document["components"] == {"schemas": {}}

    def test_raw_specifications_share_builder_cache(self):
        first = build_project_artifacts([USER_SPEC]).get("User").entity
        second = build_project_artifacts([USER_SPEC]).get("User").entity

        assert first is second
        assert get_builder().build(USER_SPEC) is first

    def test_default_dialect_from_defaults(self):
        project = build_project_artifacts([USER_SPEC], defaults=DDLDefaults(dialect="mysql"))
        assert project.dialect == "mysql"


class TestProjectFailures:
    def test_unknown_dialect_fails_first(self):
        with pytest.raises(UnsupportedDialectError):
            build_project_artifacts([USER_SPEC], dialect="oracle")

    def test_generator_error_aborts_run(self):
        defaults = DDLDefaults(json_array_fallback=False)
        with pytest.raises(UnsupportedColumnTypeError):
            build_project_artifacts([USER_SPEC], dialect="sqlite", defaults=defaults)

    def test_invalid_specification_aborts_run(self):
        bad = {"name": "Broken", "columns": {"count": {"type": "number", "default": "five"}}}
        with pytest.raises(InvalidDefaultError) as exc_info:
            build_project_artifacts([USER_SPEC, bad])
        assert "count" in str(exc_info.value)


class TestProjectLogging:
    def test_checkpoint_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="entityforge.checkpoint")
        _make_project()

        records = [r for r in caplog.records if r.getMessage() == "CHECKPOINT: artifacts_generated"]
        assert len(records) == 1

        payload = records[0].extra
        assert payload["dialect"] == "sqlite"
        assert payload["data"]["entities"] == ["User", "Shape"]
        assert payload["data"]["skipped"] == ["Legacy"]
        assert payload["data"]["tables"] == 1
