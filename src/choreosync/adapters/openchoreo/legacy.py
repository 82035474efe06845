"""Resource source for the unversioned OpenChoreo API.

Every response is wrapped in ``{"success": ..., "data": ...}``. Listings carry
``{"items": [...], "totalCount": n}`` and are paged by ``offset``/``limit``; the
plane listings return a bare list in ``data``.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import Field, field_validator

from choreosync.domain.errors import FetchError
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
from choreosync.domain.pagination import OffsetPage, fetch_all_offset_pages

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

log = getLogger(__name__)

PAGE_SIZE = 100


class Envelope[T](OpenChoreoModel):
    success: bool = False
    data: T | None = None
    error: str | None = None
    message: str | None = None

    def unwrap(self, path: str) -> T:
        if not self.success or self.data is None:
            detail = self.message or self.error or "no data"
            raise FetchError(f"OpenChoreo request {path} was not successful: {detail}")
        return self.data


class ItemList[T](OpenChoreoModel):
    items: list[T] = Field(default_factory=list)
    total_count: int | None = None


class LegacyResource(OpenChoreoModel):
    name: str
    display_name: str | None = None
    description: str | None = None
    created_at: str | None = None
    status: str | None = None

    def base_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "created_at": self.created_at,
            "status": self.status,
        }


class LegacyNamespace(LegacyResource):
    def to_resource(self) -> NamespaceResource:
        return NamespaceResource(**self.base_fields())


class LegacyProject(LegacyResource):
    deployment_pipeline: str | None = None
    deletion_timestamp: str | None = None

    def to_resource(self) -> ProjectResource:
        return ProjectResource(
            **self.base_fields(),
            deployment_pipeline_ref=self.deployment_pipeline,
            deletion_timestamp=self.deletion_timestamp,
        )


class LegacyWorkflowSchema(OpenChoreoModel):
    repository: RepositoryPayload | None = None


class LegacyComponentWorkflow(OpenChoreoModel):
    name: str | None = None
    schema_: LegacyWorkflowSchema | None = Field(default=None, alias="schema")


class LegacyWorkload(OpenChoreoModel):
    endpoints: dict[str, EndpointPayload] | None = None


class LegacyComponent(LegacyResource):
    type: str | None = None
    project_name: str | None = None
    deletion_timestamp: str | None = None
    workflow: LegacyComponentWorkflow | None = None
    workload: LegacyWorkload | None = None

    def to_resource(self, project: str) -> ComponentResource:
        repository = (
            self.workflow.schema_.repository if self.workflow and self.workflow.schema_ else None
        )
        endpoints = None
        if self.workload is not None:
            endpoints = endpoint_records(self.workload.endpoints)
        return ComponentResource(
            **self.base_fields(),
            project_name=self.project_name or project,
            type=self.type,
            deletion_timestamp=self.deletion_timestamp,
            repository_url=repository.url if repository else None,
            branch=repository.branch if repository else None,
            endpoints=endpoints,
        )


class LegacyEnvironment(LegacyResource):
    data_plane_ref: str | None = None
    is_production: bool | None = None
    dns_prefix: str | None = None

    _normalize_ref = field_validator("data_plane_ref", mode="before")(ref_name)

    def to_resource(self) -> EnvironmentResource:
        return EnvironmentResource(
            **self.base_fields(),
            data_plane_ref=self.data_plane_ref,
            is_production=self.is_production,
            dns_prefix=self.dns_prefix,
        )


class LegacyPlane(LegacyResource):
    observability_plane_ref: str | None = None
    agent_connection: AgentConnectionPayload | None = None

    _normalize_ref = field_validator("observability_plane_ref", mode="before")(ref_name)


class LegacyDataPlane(LegacyPlane):
    public_virtual_host: str | None = None
    namespace_virtual_host: str | None = None
    public_http_port: int | None = Field(default=None, alias="publicHTTPPort")
    public_https_port: int | None = Field(default=None, alias="publicHTTPSPort")
    namespace_http_port: int | None = Field(default=None, alias="namespaceHTTPPort")
    namespace_https_port: int | None = Field(default=None, alias="namespaceHTTPSPort")

    def to_resource(self) -> DataPlaneResource:
        return DataPlaneResource(
            **self.base_fields(),
            public_virtual_host=self.public_virtual_host,
            namespace_virtual_host=self.namespace_virtual_host,
            public_http_port=self.public_http_port,
            public_https_port=self.public_https_port,
            namespace_http_port=self.namespace_http_port,
            namespace_https_port=self.namespace_https_port,
            observability_plane_ref=self.observability_plane_ref,
            agent_connection=self.agent_connection.to_record() if self.agent_connection else None,
        )


class LegacyBuildPlane(LegacyPlane):
    def to_resource(self) -> BuildPlaneResource:
        return BuildPlaneResource(
            **self.base_fields(),
            observability_plane_ref=self.observability_plane_ref,
            agent_connection=self.agent_connection.to_record() if self.agent_connection else None,
        )


class LegacyObservabilityPlane(LegacyPlane):
    observer_url: str | None = Field(default=None, alias="observerURL")

    def to_resource(self) -> ObservabilityPlaneResource:
        return ObservabilityPlaneResource(
            **self.base_fields(),
            observer_url=self.observer_url,
            agent_connection=self.agent_connection.to_record() if self.agent_connection else None,
        )


class LegacyDeploymentPipeline(LegacyResource):
    promotion_paths: list[PromotionPathPayload] = Field(default_factory=list)

    def to_resource(self) -> DeploymentPipelineResource:
        return DeploymentPipelineResource(
            **self.base_fields(),
            promotion_paths=tuple(path.to_record() for path in self.promotion_paths),
        )


class LegacyComponentType(LegacyResource):
    workload_type: str | None = None
    allowed_workflows: list[str] = Field(default_factory=list)
    allowed_traits: list[str] = Field(default_factory=list)

    def to_resource(self) -> ComponentTypeResource:
        return ComponentTypeResource(
            **self.base_fields(),
            workload_type=self.workload_type,
            allowed_workflows=tuple(self.allowed_workflows),
            allowed_traits=tuple(self.allowed_traits),
        )


class LegacyTrait(LegacyResource):
    def to_resource(self) -> TraitResource:
        return TraitResource(**self.base_fields())


class LegacyWorkflow(LegacyResource):
    def to_resource(self) -> WorkflowResource:
        return WorkflowResource(**self.base_fields())

    def to_component_workflow(self) -> ComponentWorkflowResource:
        return ComponentWorkflowResource(**self.base_fields())


class LegacyResourceSource(OpenChoreoClient):
    """Reads the resource graph from the unversioned ``/namespaces/...`` API."""

    async def _list[M: OpenChoreoModel](
        self, path: str, model: type[M], *, description: str
    ) -> list[M]:
        async def fetch_page(offset: int, limit: int) -> OffsetPage[M]:
            envelope = await self.fetch(
                path,
                Envelope[ItemList[model]],
                params={"offset": offset, "limit": limit},
            )
            data = envelope.unwrap(path)
            return OffsetPage(items=data.items, total_count=data.total_count)

        return await fetch_all_offset_pages(
            fetch_page, page_size=PAGE_SIZE, description=description
        )

    async def _list_unpaged[M: OpenChoreoModel](self, path: str, model: type[M]) -> list[M]:
        envelope = await self.fetch(path, Envelope[list[model]])
        return envelope.unwrap(path)

    async def list_namespaces(self) -> Sequence[NamespaceResource]:
        items = await self._list("/namespaces", LegacyNamespace, description="namespaces")
        return [item.to_resource() for item in items]

    async def list_environments(self, namespace: str) -> Sequence[EnvironmentResource]:
        items = await self._list(
            f"/namespaces/{namespace}/environments",
            LegacyEnvironment,
            description=f"environments in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def list_data_planes(self, namespace: str) -> Sequence[DataPlaneResource]:
        items = await self._list(
            f"/namespaces/{namespace}/dataplanes",
            LegacyDataPlane,
            description=f"dataplanes in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def list_build_planes(self, namespace: str) -> Sequence[BuildPlaneResource]:
        items = await self._list_unpaged(f"/namespaces/{namespace}/buildplanes", LegacyBuildPlane)
        return [item.to_resource() for item in items]

    async def list_observability_planes(
        self, namespace: str
    ) -> Sequence[ObservabilityPlaneResource]:
        items = await self._list_unpaged(
            f"/namespaces/{namespace}/observabilityplanes", LegacyObservabilityPlane
        )
        return [item.to_resource() for item in items]

    async def list_projects(self, namespace: str) -> Sequence[ProjectResource]:
        items = await self._list(
            f"/namespaces/{namespace}/projects",
            LegacyProject,
            description=f"projects in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def get_deployment_pipeline(
        self, namespace: str, project: ProjectResource
    ) -> DeploymentPipelineResource | None:
        path = f"/namespaces/{namespace}/projects/{project.name}/deployment-pipeline"
        envelope = await self.fetch_optional(path, Envelope[LegacyDeploymentPipeline])
        if envelope is None or not envelope.success or envelope.data is None:
            return None
        return envelope.data.to_resource()

    async def list_components(
        self, namespace: str, project: ProjectResource
    ) -> Sequence[ComponentResource]:
        items = await self._list(
            f"/namespaces/{namespace}/projects/{project.name}/components",
            LegacyComponent,
            description=f"components in {namespace}/{project.name}",
        )
        return [item.to_resource(project.name) for item in items]

    async def get_component_workload(
        self, namespace: str, component: ComponentResource
    ) -> ComponentResource:
        path = (
            f"/namespaces/{namespace}/projects/{component.project_name}"
            f"/components/{component.name}"
        )
        envelope = await self.fetch(path, Envelope[LegacyComponent], params={"include": "workload"})
        detail = envelope.unwrap(path).to_resource(component.project_name)
        log.debug(
            "Fetched workload for component %s with %s endpoints",
            component.name,
            len(detail.endpoints or ()),
        )
        if detail.endpoints is None:
            return replace(detail, endpoints=())
        return detail

    async def list_component_types(self, namespace: str) -> Sequence[ComponentTypeResource]:
        items = await self._list(
            f"/namespaces/{namespace}/component-types",
            LegacyComponentType,
            description=f"component types in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def get_component_type_schema(
        self, namespace: str, component_type: str
    ) -> dict[str, Any]:
        path = f"/namespaces/{namespace}/component-types/{component_type}/schema"
        envelope = await self.fetch(path, Envelope[dict[str, Any]])
        return envelope.unwrap(path)

    async def list_traits(self, namespace: str) -> Sequence[TraitResource]:
        items = await self._list(
            f"/namespaces/{namespace}/traits", LegacyTrait, description=f"traits in {namespace}"
        )
        return [item.to_resource() for item in items]

    async def list_workflows(self, namespace: str) -> Sequence[WorkflowResource]:
        items = await self._list(
            f"/namespaces/{namespace}/workflows",
            LegacyWorkflow,
            description=f"workflows in {namespace}",
        )
        return [item.to_resource() for item in items]

    async def list_component_workflows(
        self, namespace: str
    ) -> Sequence[ComponentWorkflowResource]:
        items = await self._list(
            f"/namespaces/{namespace}/component-workflows",
            LegacyWorkflow,
            description=f"component workflows in {namespace}",
        )
        return [item.to_component_workflow() for item in items]
