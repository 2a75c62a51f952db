# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Service layer - Entity building and artifact pipeline
# PURPOSE: Entry points that turn raw specifications into artifacts
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from entityforge.services.entity_builder import (
    EntityBuilder,
    build_entity,
    fingerprint_specification,
    get_builder,
)
from entityforge.services.artifacts import (
    EntityArtifacts,
    ProjectArtifacts,
    build_entity_artifacts,
    build_project_artifacts,
)

__all__ = [
    "EntityBuilder",
    "build_entity",
    "fingerprint_specification",
    "get_builder",
    "EntityArtifacts",
    "ProjectArtifacts",
    "build_entity_artifacts",
    "build_project_artifacts",
]
