"""Pre-processing: fill kind-specific defaults before validation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from choreosync.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Callable

    from choreosync.domain.model import Entity

DEFAULT_SPEC_TYPES: Final[dict[str, str]] = {
    EntityKind.DATAPLANE: "kubernetes",
    EntityKind.BUILD_PLANE: "kubernetes",
    EntityKind.OBSERVABILITY_PLANE: "kubernetes",
    EntityKind.DEPLOYMENT_PIPELINE: "promotion-pipeline",
    EntityKind.COMPONENT_TYPE: "component-type",
    EntityKind.TRAIT_TYPE: "trait",
    EntityKind.WORKFLOW: "workflow",
    EntityKind.COMPONENT_WORKFLOW: "component-workflow",
}


def _default_spec_type(entity: Entity) -> None:
    default = DEFAULT_SPEC_TYPES.get(entity.kind)
    if default is not None and not entity.spec.get("type"):
        entity.spec["type"] = default


def _default_environment(entity: Entity) -> None:
    spec = entity.spec
    if not spec.get("type"):
        spec["type"] = "production" if spec.get("isProduction") else "development"
    if spec.get("isProduction") is None:
        spec["isProduction"] = spec["type"] == "production"


def _default_pipeline(entity: Entity) -> None:
    _default_spec_type(entity)
    refs = entity.spec.get("projectRefs")
    if refs is None:
        project = entity.spec.get("projectRef")
        entity.spec["projectRefs"] = [project] if project else []


_PRE_PROCESSORS: Final[dict[str, Callable[[Entity], None]]] = {
    EntityKind.ENVIRONMENT: _default_environment,
    EntityKind.DEPLOYMENT_PIPELINE: _default_pipeline,
}


def pre_process(entity: Entity) -> Entity:
    """Fill missing discriminators in place and return the entity."""

    handler = _PRE_PROCESSORS.get(entity.kind, _default_spec_type)
    handler(entity)
    return entity
