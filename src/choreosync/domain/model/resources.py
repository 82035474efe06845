"""Normalized upstream resource records.

Both API versions are parsed into these records, so translators only ever see
one shape per kind. Each record class is a variant of :class:`ResourceKind`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar


class ResourceKind(StrEnum):
    NAMESPACE = "namespace"
    PROJECT = "project"
    COMPONENT = "component"
    ENVIRONMENT = "environment"
    DATA_PLANE = "dataplane"
    BUILD_PLANE = "buildplane"
    OBSERVABILITY_PLANE = "observabilityplane"
    DEPLOYMENT_PIPELINE = "deployment-pipeline"
    COMPONENT_TYPE = "component-type"
    TRAIT = "trait"
    WORKFLOW = "workflow"
    COMPONENT_WORKFLOW = "component-workflow"


@dataclass(slots=True, frozen=True, kw_only=True)
class ResourceRecord:
    kind: ClassVar[ResourceKind]

    name: str
    display_name: str | None = None
    description: str | None = None
    created_at: str | None = None
    status: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class AgentConnection:
    connected: bool = False
    connected_agents: int = 0
    last_heartbeat_time: str | None = None
    last_connected_time: str | None = None
    last_disconnected_time: str | None = None
    message: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class NamespaceResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.NAMESPACE


@dataclass(slots=True, frozen=True, kw_only=True)
class ProjectResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.PROJECT

    deployment_pipeline_ref: str | None = None
    deletion_timestamp: str | None = None

    @property
    def is_deleted(self) -> bool:
        return bool(self.deletion_timestamp)


@dataclass(slots=True, frozen=True, kw_only=True)
class WorkloadEndpoint:
    name: str
    type: str
    port: int
    schema_content: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ComponentResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.COMPONENT

    project_name: str
    type: str | None = None
    deletion_timestamp: str | None = None
    repository_url: str | None = None
    branch: str | None = None
    # None until the workload has been fetched
    endpoints: tuple[WorkloadEndpoint, ...] | None = None

    @property
    def is_deleted(self) -> bool:
        return bool(self.deletion_timestamp)


@dataclass(slots=True, frozen=True, kw_only=True)
class EnvironmentResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.ENVIRONMENT

    data_plane_ref: str | None = None
    is_production: bool | None = None
    dns_prefix: str | None = None
    public_virtual_host: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class DataPlaneResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.DATA_PLANE

    public_virtual_host: str | None = None
    namespace_virtual_host: str | None = None
    public_http_port: int | None = None
    public_https_port: int | None = None
    namespace_http_port: int | None = None
    namespace_https_port: int | None = None
    observability_plane_ref: str | None = None
    agent_connection: AgentConnection | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class BuildPlaneResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.BUILD_PLANE

    observability_plane_ref: str | None = None
    agent_connection: AgentConnection | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ObservabilityPlaneResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.OBSERVABILITY_PLANE

    observer_url: str | None = None
    agent_connection: AgentConnection | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class PromotionTarget:
    name: str
    requires_approval: bool | None = None
    is_manual_approval_required: bool | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class PromotionPath:
    source_environment: str | None
    targets: tuple[PromotionTarget, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class DeploymentPipelineResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.DEPLOYMENT_PIPELINE

    promotion_paths: tuple[PromotionPath, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class ComponentTypeResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.COMPONENT_TYPE

    workload_type: str | None = None
    allowed_workflows: tuple[str, ...] = ()
    allowed_traits: tuple[str, ...] = ()
    input_parameters_schema: dict[str, Any] | None = field(default=None, compare=False)


@dataclass(slots=True, frozen=True, kw_only=True)
class TraitResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.TRAIT


@dataclass(slots=True, frozen=True, kw_only=True)
class WorkflowResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.WORKFLOW


@dataclass(slots=True, frozen=True, kw_only=True)
class ComponentWorkflowResource(ResourceRecord):
    kind: ClassVar[ResourceKind] = ResourceKind.COMPONENT_WORKFLOW


RESOURCE_TYPES: dict[ResourceKind, type[ResourceRecord]] = {
    record_type.kind: record_type
    for record_type in (
        NamespaceResource,
        ProjectResource,
        ComponentResource,
        EnvironmentResource,
        DataPlaneResource,
        BuildPlaneResource,
        ObservabilityPlaneResource,
        DeploymentPipelineResource,
        ComponentTypeResource,
        TraitResource,
        WorkflowResource,
        ComponentWorkflowResource,
    )
}
