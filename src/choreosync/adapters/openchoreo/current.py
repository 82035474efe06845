"""Resource source for the versioned ``/api/v1`` OpenChoreo API.

Resources are Kubernetes-shaped (``metadata``/``spec``/``status``) and listings
are cursor paged through ``pagination.nextCursor``.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pydantic import Field, RootModel, field_validator

from choreosync.domain.model import (
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
    TraitResource,
    WorkflowResource,
)
from choreosync.domain.pagination import Page, fetch_all_pages

from .client import OpenChoreoClient
from .schema import (
    AgentConnectionPayload,
    EndpointPayload,
    OpenChoreoModel,
    PromotionPathPayload,
    RepositoryPayload,
    endpoint_records,
    ref_name,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from choreosync.domain.model import AgentConnection

log = getLogger(__name__)

API_PREFIX: Final = "/api/v1"
PAGE_LIMIT: Final = 100
DISPLAY_NAME_ANNOTATION: Final = "openchoreo.dev/display-name"
DESCRIPTION_ANNOTATION: Final = "openchoreo.dev/description"


class ObjectMeta(OpenChoreoModel):
    name: str
    namespace: str | None = None
    uid: str | None = None
    creation_timestamp: str | None = None
    deletion_timestamp: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class Condition(OpenChoreoModel):
    type: str
    status: str
    reason: str | None = None
    message: str | None = None


class ResourceStatus(OpenChoreoModel):
    conditions: list[Condition] = Field(default_factory=list)
    agent_connection: AgentConnectionPayload | None = None


class CurrentResource(OpenChoreoModel):
    metadata: ObjectMeta
    status: ResourceStatus = Field(default_factory=ResourceStatus)

    @property
    def ready_status(self) -> str | None:
        """``Ready`` when the Ready condition holds, otherwise its reason."""

        for condition in self.status.conditions:
            if condition.type == "Ready":
                return "Ready" if condition.status == "True" else condition.reason
        return None

    def base_fields(self) -> dict[str, Any]:
        annotations = self.metadata.annotations
        return {
            "name": self.metadata.name,
            "display_name": annotations.get(DISPLAY_NAME_ANNOTATION),
            "description": annotations.get(DESCRIPTION_ANNOTATION),
            "created_at": self.metadata.creation_timestamp,
            "status": self.ready_status,
        }

    def agent_connection(self) -> AgentConnection | None:
        connection = self.status.agent_connection
        return connection.to_record() if connection else None


class Pagination(OpenChoreoModel):
    next_cursor: str | None = None


class CursorList[T](OpenChoreoModel):
    items: list[T] = Field(default_factory=list)
    pagination: Pagination | None = None

    @property
    def next_cursor(self) -> str | None:
        return self.pagination.next_cursor if self.pagination else None


class SchemaDocument(RootModel[dict[str, Any]]):
    pass


class NamespaceItem(CurrentResource):
    def to_resource(self) -> NamespaceResource:
        return NamespaceResource(**self.base_fields())


class ProjectSpec(OpenChoreoModel):
    deployment_pipeline_ref: str | None = None

    _normalize_ref = field_validator("deployment_pipeline_ref", mode="before")(ref_name)


class ProjectItem(CurrentResource):
    spec: ProjectSpec = Field(default_factory=ProjectSpec)

    def to_resource(self) -> ProjectResource:
        return ProjectResource(
            **self.base_fields(),
            deployment_pipeline_ref=self.spec.deployment_pipeline_ref,
            deletion_timestamp=self.metadata.deletion_timestamp,
        )


class ComponentOwner(OpenChoreoModel):
    project_name: str | None = None


class SystemParameters(OpenChoreoModel):
    repository: RepositoryPayload | None = None


class ComponentWorkflowSpec(OpenChoreoModel):
    name: str | None = None
    system_parameters: SystemParameters | None = None


class ComponentSpec(OpenChoreoModel):
    owner: ComponentOwner = Field(default_factory=ComponentOwner)
    type: str | None = None
    component_type: str | None = None
    workflow: ComponentWorkflowSpec | None = None

    _normalize_type = field_validator("component_type", mode="before")(ref_name)

    @property
    def repository(self) -> RepositoryPayload | None:
        if self.workflow is None or self.workflow.system_parameters is None:
            return None
        return self.workflow.system_parameters.repository


class ComponentItem(CurrentResource):
    spec: ComponentSpec = Field(default_factory=ComponentSpec)

    def to_resource(self, project: str) -> ComponentResource:
        repository = self.spec.repository
        return ComponentResource(
            **self.base_fields(),
            project_name=self.spec.owner.project_name or project,
            type=self.spec.type or self.spec.component_type,
            deletion_timestamp=self.metadata.deletion_timestamp,
            repository_url=repository.url if repository else None,
            branch=repository.branch if repository else None,
        )


class WorkloadSpec(OpenChoreoModel):
    endpoints: dict[str, EndpointPayload] = Field(default_factory=dict)


class WorkloadItem(CurrentResource):
    spec: WorkloadSpec = Field(default_factory=WorkloadSpec)


class EnvironmentSpec(OpenChoreoModel):
    data_plane_ref: str | None = None
    is_production: bool = False
    dns_prefix: str | None = None

    _normalize_ref = field_validator("data_plane_ref", mode="before")(ref_name)


class EnvironmentItem(CurrentResource):
    spec: EnvironmentSpec = Field(default_factory=EnvironmentSpec)

    def to_resource(self) -> EnvironmentResource:
        return EnvironmentResource(
            **self.base_fields(),
            data_plane_ref=self.spec.data_plane_ref,
            is_production=self.spec.is_production,
            dns_prefix=self.spec.dns_prefix,
        )


class GatewaySpec(OpenChoreoModel):
    public_virtual_host: str | None = None
    organization_virtual_host: str | None = None
    public_http_port: int | None = Field(default=None, alias="publicHTTPPort")
    public_https_port: int | None = Field(default=None, alias="publicHTTPSPort")
    organization_http_port: int | None = Field(default=None, alias="organizationHTTPPort")
    organization_https_port: int | None = Field(default=None, alias="organizationHTTPSPort")


class PlaneSpec(OpenChoreoModel):
    observability_plane_ref: str | None = None
    gateway: GatewaySpec = Field(default_factory=GatewaySpec)
    observer_url: str | None = Field(default=None, alias="observerURL")

    _normalize_ref = field_validator("observability_plane_ref", mode="before")(ref_name)


class PlaneItem(CurrentResource):
    spec: PlaneSpec = Field(default_factory=PlaneSpec)

    def to_data_plane(self) -> DataPlaneResource:
        gateway = self.spec.gateway
        return DataPlaneResource(
            **self.base_fields(),
            public_virtual_host=gateway.public_virtual_host,
            namespace_virtual_host=gateway.organization_virtual_host,
            public_http_port=gateway.public_http_port,
            public_https_port=gateway.public_https_port,
            namespace_http_port=gateway.organization_http_port,
            namespace_https_port=gateway.organization_https_port,
            observability_plane_ref=self.spec.observability_plane_ref,
            agent_connection=self.agent_connection(),
        )

    def to_build_plane(self) -> BuildPlaneResource:
        return BuildPlaneResource(
            **self.base_fields(),
            observability_plane_ref=self.spec.observability_plane_ref,
            agent_connection=self.agent_connection(),
        )

    def to_observability_plane(self) -> ObservabilityPlaneResource:
        return ObservabilityPlaneResource(
            **self.base_fields(),
            observer_url=self.spec.observer_url,
            agent_connection=self.agent_connection(),
        )


class DeploymentPipelineSpec(OpenChoreoModel):
    promotion_paths: list[PromotionPathPayload] = Field(default_factory=list)


class DeploymentPipelineItem(CurrentResource):
    spec: DeploymentPipelineSpec = Field(default_factory=DeploymentPipelineSpec)

    def to_resource(self) -> DeploymentPipelineResource:
        return DeploymentPipelineResource(
            **self.base_fields(),
            promotion_paths=tuple(path.to_record() for path in self.spec.promotion_paths),
        )


def _names(value: object) -> object:
    if isinstance(value, list):
        return [ref_name(item) for item in value if ref_name(item)]
    return value


class ComponentTypeSpec(OpenChoreoModel):
    workload_type: str | None = None
    allowed_workflows: list[str] = Field(default_factory=list)
    allowed_traits: list[str] = Field(default_factory=list)

    _normalize_names = field_validator("allowed_workflows", "allowed_traits", mode="before")(
        _names
    )


class ComponentTypeItem(CurrentResource):
    spec: ComponentTypeSpec = Field(default_factory=ComponentTypeSpec)

    def to_resource(self) -> ComponentTypeResource:
        return ComponentTypeResource(
            **self.base_fields(),
            workload_type=self.spec.workload_type,
            allowed_workflows=tuple(self.spec.allowed_workflows),
            allowed_traits=tuple(self.spec.allowed_traits),
        )


class CurrentResourceSource(OpenChoreoClient):
    """Reads the resource graph from the ``/api/v1`` API."""

    async def _list[M: OpenChoreoModel](
        self, path: str, model: type[M], *, description: str
    ) -> list[M]:
        async def fetch_page(cursor: str | None) -> Page[M]:
            params: dict[str, Any] = {"limit": PAGE_LIMIT}
            if cursor:
                params["cursor"] = cursor
            listing = await self.fetch(f"{API_PREFIX}{path}", CursorList[model], params=params)
            return Page(items=listing.items, next_cursor=listing.next_cursor)

        return await fetch_all_pages(fetch_page, description=description)

    async def list_namespaces(self) -> Sequence[NamespaceResource]:
        items = await self._list("/namespaces", NamespaceItem, description="namespaces")
        return [item.to_resource() for item in items]

    async def list_environments(self, namespace: str) -> Sequence[EnvironmentResource]:
        items = await self._list(
            f"/namespaces/{namespace}/environments",
            EnvironmentItem,
            description=f"environments in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def list_data_planes(self, namespace: str) -> Sequence[DataPlaneResource]:
        items = await self._list(
            f"/namespaces/{namespace}/dataplanes",
            PlaneItem,
            description=f"dataplanes in {namespace}",
        )
        return [item.to_data_plane() for item in items]

    async def list_build_planes(self, namespace: str) -> Sequence[BuildPlaneResource]:
        items = await self._list(
            f"/namespaces/{namespace}/buildplanes",
            PlaneItem,
            description=f"buildplanes in {namespace}",
        )
        return [item.to_build_plane() for item in items]

    async def list_observability_planes(
        self, namespace: str
    ) -> Sequence[ObservabilityPlaneResource]:
        items = await self._list(
            f"/namespaces/{namespace}/observabilityplanes",
            PlaneItem,
            description=f"observabilityplanes in {namespace}",
        )
        return [item.to_observability_plane() for item in items]

    async def list_projects(self, namespace: str) -> Sequence[ProjectResource]:
        items = await self._list(
            f"/namespaces/{namespace}/projects",
            ProjectItem,
            description=f"projects in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def get_deployment_pipeline(
        self, namespace: str, project: ProjectResource
    ) -> DeploymentPipelineResource | None:
        if not project.deployment_pipeline_ref:
            return None
        path = (
            f"{API_PREFIX}/namespaces/{namespace}"
            f"/deploymentpipelines/{project.deployment_pipeline_ref}"
        )
        item = await self.fetch_optional(path, DeploymentPipelineItem)
        return item.to_resource() if item else None

    async def list_components(
        self, namespace: str, project: ProjectResource
    ) -> Sequence[ComponentResource]:
        items = await self._list(
            f"/namespaces/{namespace}/projects/{project.name}/components",
            ComponentItem,
            description=f"components in {namespace}/{project.name}",
        )
        return [item.to_resource(project.name) for item in items]

    async def get_component_workload(
        self, namespace: str, component: ComponentResource
    ) -> ComponentResource:
        path = f"{API_PREFIX}/namespaces/{namespace}/workloads/{component.name}"
        workload = await self.fetch_optional(path, WorkloadItem)
        endpoints = endpoint_records(workload.spec.endpoints) if workload else ()
        log.debug(
            "Fetched workload for component %s with %s endpoints", component.name, len(endpoints)
        )
        return replace(component, endpoints=endpoints)

    async def list_component_types(self, namespace: str) -> Sequence[ComponentTypeResource]:
        items = await self._list(
            f"/namespaces/{namespace}/componenttypes",
            ComponentTypeItem,
            description=f"component types in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def get_component_type_schema(
        self, namespace: str, component_type: str
    ) -> dict[str, Any]:
        path = f"{API_PREFIX}/namespaces/{namespace}/componenttypes/{component_type}/schema"
        document = await self.fetch(path, SchemaDocument)
        return document.root

    async def list_traits(self, namespace: str) -> Sequence[TraitResource]:
        items = await self._list(
            f"/namespaces/{namespace}/traits", CurrentResource, description=f"traits in {namespace}"
        )
        return [TraitResource(**item.base_fields()) for item in items]

    async def list_workflows(self, namespace: str) -> Sequence[WorkflowResource]:
        items = await self._list(
            f"/namespaces/{namespace}/workflows",
            CurrentResource,
            description=f"workflows in {namespace}",
        )
        return [WorkflowResource(**item.base_fields()) for item in items]

    async def list_component_workflows(
        self, namespace: str
    ) -> Sequence[ComponentWorkflowResource]:
        items = await self._list(
            f"/namespaces/{namespace}/componentworkflows",
            CurrentResource,
            description=f"component workflows in {namespace}",
        )
        return [ComponentWorkflowResource(**item.base_fields()) for item in items]
