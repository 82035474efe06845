"""Ports for reading the upstream resource graph."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

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


@runtime_checkable
class ResourceSource(Protocol):
    """One upstream API version, exposed as normalized resource listings.

    Every method raises :class:`~choreosync.domain.errors.FetchError` on failure.
    """

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def list_namespaces(self) -> Sequence[NamespaceResource]: ...

    async def list_environments(self, namespace: str) -> Sequence[EnvironmentResource]: ...

    async def list_data_planes(self, namespace: str) -> Sequence[DataPlaneResource]: ...

    async def list_build_planes(self, namespace: str) -> Sequence[BuildPlaneResource]: ...

    async def list_observability_planes(
        self, namespace: str
    ) -> Sequence[ObservabilityPlaneResource]: ...

    async def list_projects(self, namespace: str) -> Sequence[ProjectResource]: ...

    async def get_deployment_pipeline(
        self, namespace: str, project: ProjectResource
    ) -> DeploymentPipelineResource | None: ...

    async def list_components(
        self, namespace: str, project: ProjectResource
    ) -> Sequence[ComponentResource]: ...

    async def get_component_workload(
        self, namespace: str, component: ComponentResource
    ) -> ComponentResource: ...

    async def list_component_types(self, namespace: str) -> Sequence[ComponentTypeResource]: ...

    async def get_component_type_schema(
        self, namespace: str, component_type: str
    ) -> dict[str, Any]: ...

    async def list_traits(self, namespace: str) -> Sequence[TraitResource]: ...

    async def list_workflows(self, namespace: str) -> Sequence[WorkflowResource]: ...

    async def list_component_workflows(
        self, namespace: str
    ) -> Sequence[ComponentWorkflowResource]: ...


ResourceSourceFactory = Callable[[str | None], ResourceSource]
"""Builds a source for one sync run from an optional bearer token."""


__all__ = ["ResourceSource", "ResourceSourceFactory"]
