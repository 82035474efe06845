"""Translators for platform type definitions: component types, traits and workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from choreosync.domain.model import EntityKind
from choreosync.domain.model import annotations as ann

from .context import managed_entity, provenance_annotations

if TYPE_CHECKING:
    from choreosync.domain.model import (
        ComponentTypeResource,
        ComponentWorkflowResource,
        Entity,
        TraitResource,
        WorkflowResource,
    )

    from .context import TranslationContext

COMPONENT_TYPE_TYPE: Final = "component-type"
TRAIT_TYPE: Final = "trait"
WORKFLOW_TYPE: Final = "workflow"
COMPONENT_WORKFLOW_TYPE: Final = "component-workflow"


def translate_component_type(
    resource: ComponentTypeResource, context: TranslationContext
) -> Entity:
    return managed_entity(
        EntityKind.COMPONENT_TYPE,
        resource,
        context,
        description=resource.description or f"{resource.name} component type",
        tags=("component-type", "platform-engineering"),
        annotations={
            **provenance_annotations(resource),
            ann.WORKLOAD_TYPE: resource.workload_type,
        },
        spec={
            "type": COMPONENT_TYPE_TYPE,
            "domain": context.domain_ref,
            "workloadType": resource.workload_type,
            "allowedWorkflows": list(resource.allowed_workflows),
            "allowedTraits": list(resource.allowed_traits),
        },
    )


def translate_trait(resource: TraitResource, context: TranslationContext) -> Entity:
    return managed_entity(
        EntityKind.TRAIT_TYPE,
        resource,
        context,
        description=resource.description or f"{resource.name} trait",
        tags=("trait", "platform-engineering"),
        annotations=provenance_annotations(resource),
        spec={"type": TRAIT_TYPE, "domain": context.domain_ref},
    )


def translate_workflow(resource: WorkflowResource, context: TranslationContext) -> Entity:
    return managed_entity(
        EntityKind.WORKFLOW,
        resource,
        context,
        description=resource.description or f"{resource.name} workflow",
        tags=("workflow", "platform-engineering"),
        annotations={ann.CREATED_AT: resource.created_at},
        spec={"type": WORKFLOW_TYPE, "domain": context.domain_ref},
    )


def translate_component_workflow(
    resource: ComponentWorkflowResource, context: TranslationContext
) -> Entity:
    return managed_entity(
        EntityKind.COMPONENT_WORKFLOW,
        resource,
        context,
        description=resource.description or f"{resource.name} component workflow",
        tags=("component-workflow", "platform-engineering"),
        annotations={ann.CREATED_AT: resource.created_at},
        spec={"type": COMPONENT_WORKFLOW_TYPE, "domain": context.domain_ref},
    )
