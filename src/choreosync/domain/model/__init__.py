"""Catalog entity model and normalized upstream resources."""

from .entity import (
    DEFAULT_NAMESPACE,
    Entity,
    EntityKind,
    EntityRef,
    InvalidEntityRefError,
    Relation,
    RelationType,
    canonical_kind,
    parse_entity_ref,
)
from .resources import (
    RESOURCE_TYPES,
    AgentConnection,
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
    PromotionPath,
    PromotionTarget,
    ResourceKind,
    ResourceRecord,
    TraitResource,
    WorkflowResource,
    WorkloadEndpoint,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "RESOURCE_TYPES",
    "AgentConnection",
    "BuildPlaneResource",
    "ComponentResource",
    "ComponentTypeResource",
    "ComponentWorkflowResource",
    "DataPlaneResource",
    "DeploymentPipelineResource",
    "Entity",
    "EntityKind",
    "EntityRef",
    "EnvironmentResource",
    "InvalidEntityRefError",
    "NamespaceResource",
    "ObservabilityPlaneResource",
    "ProjectResource",
    "PromotionPath",
    "PromotionTarget",
    "Relation",
    "RelationType",
    "ResourceKind",
    "ResourceRecord",
    "TraitResource",
    "WorkflowResource",
    "WorkloadEndpoint",
    "canonical_kind",
    "parse_entity_ref",
]
