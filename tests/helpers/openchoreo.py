from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Self

import httpx

from choreosync.adapters.http_resilience import ResilientClient
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
    PromotionPath,
    PromotionTarget,
    TraitResource,
    WorkflowResource,
    WorkloadEndpoint,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from choreosync.config.http_resilience import ResilienceConfig
    from choreosync.domain.ports.catalog import CatalogMutation


@dataclass
class FakeNamespace:
    environments: list[EnvironmentResource] = field(default_factory=list)
    data_planes: list[DataPlaneResource] = field(default_factory=list)
    build_planes: list[BuildPlaneResource] = field(default_factory=list)
    observability_planes: list[ObservabilityPlaneResource] = field(default_factory=list)
    projects: list[ProjectResource] = field(default_factory=list)
    pipelines: dict[str, DeploymentPipelineResource] = field(default_factory=dict)
    components: dict[str, list[ComponentResource]] = field(default_factory=dict)
    workloads: dict[str, tuple[WorkloadEndpoint, ...]] = field(default_factory=dict)
    component_types: list[ComponentTypeResource] = field(default_factory=list)
    schemas: dict[str, dict[str, Any]] = field(default_factory=dict)
    traits: list[TraitResource] = field(default_factory=list)
    workflows: list[WorkflowResource] = field(default_factory=list)
    component_workflows: list[ComponentWorkflowResource] = field(default_factory=list)


class FakeResourceSource:
    """In-memory resource source. ``failing`` holds ``(namespace, listing)`` pairs that raise."""

    def __init__(
        self,
        namespaces: dict[str, FakeNamespace],
        *,
        failing: set[tuple[str, str]] | None = None,
        fail_namespaces: bool = False,
    ) -> None:
        self.namespaces = namespaces
        self.failing = failing or set()
        self.fail_namespaces = fail_namespaces
        self.tokens: list[str | None] = []
        self.calls: list[tuple[str, str]] = []
        self.entered = 0
        self.exited = 0

    def __call__(self, token: str | None) -> Self:
        self.tokens.append(token)
        return self

    async def __aenter__(self) -> Self:
        self.entered += 1
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.exited += 1

    def _check(self, namespace: str, listing: str) -> FakeNamespace:
        self.calls.append((namespace, listing))
        if (namespace, listing) in self.failing:
            raise FetchError(f"{listing} unavailable in {namespace}")
        return self.namespaces[namespace]

    async def list_namespaces(self) -> Sequence[NamespaceResource]:
        if self.fail_namespaces:
            raise FetchError("namespaces unavailable")
        return [NamespaceResource(name=name) for name in self.namespaces]

    async def list_environments(self, namespace: str) -> Sequence[EnvironmentResource]:
        return self._check(namespace, "environments").environments

    async def list_data_planes(self, namespace: str) -> Sequence[DataPlaneResource]:
        return self._check(namespace, "dataplanes").data_planes

    async def list_build_planes(self, namespace: str) -> Sequence[BuildPlaneResource]:
        return self._check(namespace, "buildplanes").build_planes

    async def list_observability_planes(
        self, namespace: str
    ) -> Sequence[ObservabilityPlaneResource]:
        return self._check(namespace, "observabilityplanes").observability_planes

    async def list_projects(self, namespace: str) -> Sequence[ProjectResource]:
        return self._check(namespace, "projects").projects

    async def get_deployment_pipeline(
        self, namespace: str, project: ProjectResource
    ) -> DeploymentPipelineResource | None:
        return self._check(namespace, f"pipeline:{project.name}").pipelines.get(project.name)

    async def list_components(
        self, namespace: str, project: ProjectResource
    ) -> Sequence[ComponentResource]:
        return self._check(namespace, f"components:{project.name}").components.get(
            project.name, []
        )

    async def get_component_workload(
        self, namespace: str, component: ComponentResource
    ) -> ComponentResource:
        endpoints = self._check(namespace, f"workload:{component.name}").workloads.get(
            component.name, ()
        )
        return replace(component, endpoints=endpoints)

    async def list_component_types(self, namespace: str) -> Sequence[ComponentTypeResource]:
        return self._check(namespace, "componenttypes").component_types

    async def get_component_type_schema(
        self, namespace: str, component_type: str
    ) -> dict[str, Any]:
        schemas = self._check(namespace, f"schema:{component_type}").schemas
        if component_type not in schemas:
            raise FetchError(f"no schema for {component_type}")
        return schemas[component_type]

    async def list_traits(self, namespace: str) -> Sequence[TraitResource]:
        return self._check(namespace, "traits").traits

    async def list_workflows(self, namespace: str) -> Sequence[WorkflowResource]:
        return self._check(namespace, "workflows").workflows

    async def list_component_workflows(
        self, namespace: str
    ) -> Sequence[ComponentWorkflowResource]:
        return self._check(namespace, "componentworkflows").component_workflows


class RecordingConnection:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.mutations: list[CatalogMutation] = []
        self.error = error

    async def apply_mutation(self, mutation: CatalogMutation) -> None:
        if self.error is not None:
            raise self.error
        self.mutations.append(mutation)


class StaticTokenProvider:
    def __init__(self, token: str = "service-token", *, error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.calls = 0

    async def get_token(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.token


def sample_namespace() -> FakeNamespace:
    """One project with a shared pipeline, a service component and a web app."""

    return FakeNamespace(
        environments=[
            EnvironmentResource(name="development", data_plane_ref="default-dp"),
            EnvironmentResource(name="production", data_plane_ref="default-dp", is_production=True),
        ],
        data_planes=[DataPlaneResource(name="default-dp", observability_plane_ref="observer")],
        build_planes=[BuildPlaneResource(name="default-bp")],
        observability_planes=[ObservabilityPlaneResource(name="observer")],
        projects=[ProjectResource(name="shop", deployment_pipeline_ref="pipe1")],
        pipelines={
            "shop": pipeline("pipe1", ("development", "production")),
        },
        components={
            "shop": [
                ComponentResource(name="cart", project_name="shop", type="deployment/service"),
                ComponentResource(name="storefront", project_name="shop", type="deployment/web-app"),
            ]
        },
        workloads={"cart": (WorkloadEndpoint(name="http", type="REST", port=8080),)},
        component_types=[
            ComponentTypeResource(
                name="service", workload_type="deployment", allowed_workflows=("docker",)
            )
        ],
        schemas={"service": {"type": "object", "properties": {"replicas": {"type": "integer"}}}},
        traits=[TraitResource(name="autoscaler")],
        workflows=[WorkflowResource(name="nightly")],
        component_workflows=[ComponentWorkflowResource(name="docker")],
    )


def pipeline(name: str, environments: Sequence[str]) -> DeploymentPipelineResource:
    paths = tuple(
        PromotionPath(source_environment=source, targets=(PromotionTarget(name=target),))
        for source, target in zip(environments, environments[1:], strict=False)
    )
    return DeploymentPipelineResource(name=name, promotion_paths=paths)


def mock_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


class RecordingRouter:
    """Serves JSON payloads by request path and records every request."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = self.routes.get(request.url.path)
        if payload is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(payload):
            return payload(request)
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(200, json=payload)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]
