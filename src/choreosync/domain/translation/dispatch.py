"""Kind-dispatched entry point for resource translation."""

from __future__ import annotations

from functools import singledispatch
from typing import TYPE_CHECKING

from choreosync.domain.errors import TranslationError
from choreosync.domain.model import (
    RESOURCE_TYPES,
    BuildPlaneResource,
    ComponentResource,
    ComponentTypeResource,
    ComponentWorkflowResource,
    DataPlaneResource,
    DeploymentPipelineResource,
    EnvironmentResource,
    NamespaceResource,
    ObservabilityPlaneResource,
    ProjectResource,
    ResourceKind,
    ResourceRecord,
    TraitResource,
    WorkflowResource,
)

from .definitions import (
    translate_component_type,
    translate_component_workflow,
    translate_trait,
    translate_workflow,
)
from .platform import (
    translate_build_plane,
    translate_data_plane,
    translate_environment,
    translate_namespace,
    translate_observability_plane,
)
from .projects import translate_component, translate_deployment_pipeline, translate_project

if TYPE_CHECKING:
    from collections.abc import Callable

    from choreosync.domain.model import Entity

    from .context import TranslationContext


@singledispatch
def translate_resource(
    resource: ResourceRecord, context: TranslationContext
) -> tuple[Entity, ...]:
    """Translate one normalized resource into the entities it produces."""

    raise TranslationError(
        f"No translator registered for {type(resource).__name__} in namespace {context.namespace}"
    )


def _single(
    translator: Callable[[ResourceRecord, TranslationContext], Entity],
) -> Callable[[ResourceRecord, TranslationContext], tuple[Entity, ...]]:
    def wrapper(resource: ResourceRecord, context: TranslationContext) -> tuple[Entity, ...]:
        return (translator(resource, context),)

    wrapper.__name__ = translator.__name__
    return wrapper


_TRANSLATORS: dict[type[ResourceRecord], Callable[..., Entity]] = {
    NamespaceResource: translate_namespace,
    ProjectResource: translate_project,
    EnvironmentResource: translate_environment,
    DataPlaneResource: translate_data_plane,
    BuildPlaneResource: translate_build_plane,
    ObservabilityPlaneResource: translate_observability_plane,
    DeploymentPipelineResource: translate_deployment_pipeline,
    ComponentTypeResource: translate_component_type,
    TraitResource: translate_trait,
    WorkflowResource: translate_workflow,
    ComponentWorkflowResource: translate_component_workflow,
}

for _record_type, _translator in _TRANSLATORS.items():
    translate_resource.register(_record_type, _single(_translator))
translate_resource.register(ComponentResource, translate_component)


def missing_translators() -> set[ResourceKind]:
    """Return resource kinds that would fall through to the unregistered default."""

    base = translate_resource.dispatch(ResourceRecord)
    return {
        kind
        for kind, record_type in RESOURCE_TYPES.items()
        if translate_resource.dispatch(record_type) is base
    }
