# ============================================================================
# ARTIFACT PIPELINE
# ============================================================================
# STATUS: Service - Run every generator over a set of entities
# PURPOSE: Produce DDL, validation schemas and API documents in one pass
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: EntityArtifacts, ProjectArtifacts, build_entity_artifacts,
#          build_project_artifacts
# DEPENDENCIES: concurrent.futures
# ============================================================================
"""
Artifact Pipeline

Runs the three generators for each entity. The generators only read frozen
EntityDefinitions, so entities are processed in parallel without locking;
results come back in input order.

Inactive entities (active=False) are skipped entirely. Non-table entities get
no DDL. A generation error for any entity aborts the whole run and no
ProjectArtifacts is returned.

Usage:
    from entityforge.services import build_project_artifacts

    artifacts = build_project_artifacts([user, post], dialect="sqlite")
    print(artifacts.ddl_script())
    json.dumps(artifacts.document)
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from entityforge.config.defaults import DDLDefaults
from entityforge.contracts import Dialect
from entityforge.logging import ComponentType, get_logger, log_checkpoint, log_context
from entityforge.models.entity import EntityDefinition, EntitySpecification
from entityforge.schema.openapi import (
    DocumentOptions,
    entity_to_component,
    generate_api_document,
)
from entityforge.schema.sql_generator import EntityToSQL
from entityforge.schema.validation import (
    InputSchemas,
    ValidationSchema,
    to_input_schemas,
    to_public_schema,
    to_validation_schema,
)
from entityforge.services.entity_builder import get_builder

logger = get_logger(__name__, ComponentType.PIPELINE)

EntityInput = Union[EntityDefinition, EntitySpecification, Mapping[str, Any]]


@dataclass(frozen=True)
class EntityArtifacts:
    """Everything generated for one entity."""
    entity: EntityDefinition
    ddl: Optional[str]
    validation: ValidationSchema
    public: ValidationSchema
    inputs: InputSchemas
    component: Dict[str, Any]

    @property
    def name(self) -> str:
        return self.entity.name


@dataclass(frozen=True)
class ProjectArtifacts:
    """Artifacts for a set of entities plus the combined API document."""
    dialect: str
    entities: Tuple[EntityArtifacts, ...]
    skipped: Tuple[str, ...]
    document: Dict[str, Any]

    @property
    def entity_names(self) -> Tuple[str, ...]:
        return tuple(a.name for a in self.entities)

    def get(self, name: str) -> EntityArtifacts:
        """
        Artifacts for one entity by name.

        Raises:
            KeyError: entity not in this run
        """
        for artifacts in self.entities:
            if artifacts.name == name:
                return artifacts
        raise KeyError(name)

    def ddl_script(self) -> str:
        """DDL of every table entity, in input order, separated by blank lines."""
        return "\n\n".join(a.ddl for a in self.entities if a.ddl is not None)


def _as_definition(entity: EntityInput) -> EntityDefinition:
    if isinstance(entity, EntityDefinition):
        return entity
    return get_builder().build(entity)


def _generate(entity: EntityDefinition, generator: EntityToSQL) -> EntityArtifacts:
    with log_context(entity=entity.name, dialect=generator.spec.name, operation="generate"):
        ddl = generator.render(entity) if entity.table else None
        artifacts = EntityArtifacts(
            entity=entity,
            ddl=ddl,
            validation=to_validation_schema(entity),
            public=to_public_schema(entity),
            inputs=to_input_schemas(entity),
            component=entity_to_component(entity),
        )
        logger.debug(f"Generated artifacts for {entity.name}")
        return artifacts


def build_entity_artifacts(
    entity: EntityInput,
    dialect: Optional[Union[str, Dialect]] = None,
    defaults: Optional[DDLDefaults] = None,
) -> EntityArtifacts:
    """
    Run every generator for one entity.

    Args:
        entity: EntityDefinition, or a raw specification built via get_builder()
        dialect: DDL dialect (defaults.dialect when omitted)
        defaults: DDL settings

    Raises:
        EntityValidationError: raw specification is invalid
        GenerationError: a generator failed
    """
    generator = EntityToSQL(dialect=dialect, defaults=defaults)
    return _generate(_as_definition(entity), generator)


def build_project_artifacts(
    entities: Iterable[EntityInput],
    dialect: Optional[Union[str, Dialect]] = None,
    options: Optional[DocumentOptions] = None,
    defaults: Optional[DDLDefaults] = None,
    max_workers: Optional[int] = None,
) -> ProjectArtifacts:
    """
    Run every generator for a set of entities.

    Args:
        entities: EntityDefinitions or raw specifications
        dialect: DDL dialect (defaults.dialect when omitted)
        options: API document options
        defaults: DDL settings
        max_workers: Thread pool size (ThreadPoolExecutor default when None)

    Returns:
        ProjectArtifacts with active entities in input order

    Raises:
        UnsupportedDialectError: before any entity is processed
        EntityValidationError, GenerationError: first failure in input order
    """
    generator = EntityToSQL(dialect=dialect, defaults=defaults)
    definitions = [_as_definition(entity) for entity in entities]

    active: List[EntityDefinition] = [e for e in definitions if e.metadata.active]
    skipped = tuple(e.name for e in definitions if not e.metadata.active)

    start = time.time()
    with log_context(dialect=generator.spec.name, operation="build_project_artifacts"):
        logger.info(
            f"Generating artifacts for {len(active)} entities "
            f"({len(skipped)} inactive skipped)"
        )

        if active:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = tuple(pool.map(lambda e: _generate(e, generator), active))
        else:
            results = ()

        document = generate_api_document(active, options)

        log_checkpoint(
            "artifacts_generated",
            {
                "entities": [a.name for a in results],
                "skipped": list(skipped),
                "tables": sum(1 for a in results if a.ddl is not None),
                "duration_ms": int((time.time() - start) * 1000),
            },
        )

    return ProjectArtifacts(
        dialect=generator.spec.name,
        entities=results,
        skipped=skipped,
        document=document,
    )


__all__ = [
    "EntityArtifacts",
    "ProjectArtifacts",
    "build_entity_artifacts",
    "build_project_artifacts",
]
