"""Translators for projects, components, generated APIs and deployment pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from choreosync.domain.model import Entity, EntityKind
from choreosync.domain.model import annotations as ann

from .context import managed_entity, provenance_annotations

if TYPE_CHECKING:
    from collections.abc import Collection

    from choreosync.domain.model import (
        ComponentResource,
        DeploymentPipelineResource,
        ProjectResource,
        WorkloadEndpoint,
    )

    from .context import TranslationContext

PIPELINE_TYPE: Final = "promotion-pipeline"
NO_SCHEMA_DEFINITION: Final = "No schema available"

_ENDPOINT_API_TYPES: Final[dict[str, str]] = {
    "REST": "openapi",
    "HTTP": "openapi",
    "GraphQL": "graphql",
    "gRPC": "grpc",
    "Websocket": "asyncapi",
    "TCP": "openapi",
    "UDP": "openapi",
}


def translate_project(resource: ProjectResource, context: TranslationContext) -> Entity:
    return managed_entity(
        EntityKind.SYSTEM,
        resource,
        context,
        description=resource.description or resource.name,
        tags=("project",),
        annotations={**provenance_annotations(resource), ann.PROJECT: resource.name},
        spec={"owner": context.default_owner, "domain": context.domain_ref},
    )


def is_service_component(component: ComponentResource, service_types: Collection[str]) -> bool:
    """Return whether ``component`` needs a workload fetch to enumerate endpoints."""

    if not component.type:
        return False
    normalized = {value.lower() for value in service_types}
    return component.type.lower() in normalized


def api_entity_name(component: str, endpoint: str) -> str:
    return f"{component}-{endpoint}"


def translate_component(
    resource: ComponentResource, context: TranslationContext
) -> tuple[Entity, ...]:
    """Translate a component plus one API entity per workload endpoint.

    Components whose workload was never fetched (``endpoints is None``) become a
    plain component without ``providesApis``.
    """

    project = context.project or resource.project_name
    endpoints = resource.endpoints or ()
    provides_apis = [api_entity_name(resource.name, endpoint.name) for endpoint in endpoints]

    component_type = resource.type or "unknown"
    component = managed_entity(
        EntityKind.COMPONENT,
        resource,
        context,
        description=resource.description or resource.name,
        tags=("component", component_type.rsplit("/", 1)[-1].lower()),
        annotations={
            **provenance_annotations(resource),
            ann.COMPONENT: resource.name,
            ann.COMPONENT_TYPE: resource.type,
            ann.PROJECT: project,
            ann.SOURCE_LOCATION: f"url:{resource.repository_url}" if resource.repository_url else None,
            ann.BRANCH: resource.branch,
        },
        spec={
            "type": component_type,
            "lifecycle": (resource.status or "unknown").lower(),
            "owner": context.default_owner,
            "system": project,
            "providesApis": provides_apis or None,
        },
    )

    apis = tuple(
        _translate_endpoint(resource.name, endpoint, project, context) for endpoint in endpoints
    )
    return (component, *apis)


def endpoint_api_type(endpoint_type: str) -> str:
    return _ENDPOINT_API_TYPES.get(endpoint_type, "openapi")


def _translate_endpoint(
    component: str,
    endpoint: WorkloadEndpoint,
    project: str,
    context: TranslationContext,
) -> Entity:
    annotations = {
        ann.MANAGED_BY_LOCATION: context.location_key,
        ann.MANAGED_BY_ORIGIN_LOCATION: context.location_key,
        ann.COMPONENT: component,
        ann.ENDPOINT_NAME: endpoint.name,
        ann.ENDPOINT_TYPE: endpoint.type,
        ann.ENDPOINT_PORT: str(endpoint.port),
        ann.PROJECT: project,
        ann.NAMESPACE: context.namespace,
    }
    return Entity(
        kind=EntityKind.API.value,
        name=api_entity_name(component, endpoint.name),
        namespace=context.namespace,
        title=f"{component} {endpoint.name} API",
        description=f"{endpoint.type} endpoint for {component} service on port {endpoint.port}",
        tags=[ann.BASE_TAG, "api", endpoint.type.lower()],
        annotations=annotations,
        labels={ann.MANAGED_LABEL: "true"},
        spec={
            "type": endpoint_api_type(endpoint.type),
            "lifecycle": "production",
            "owner": context.default_owner,
            "system": project,
            "definition": endpoint.schema_content or NO_SCHEMA_DEFINITION,
        },
    )


def translate_deployment_pipeline(
    resource: DeploymentPipelineResource, context: TranslationContext
) -> Entity:
    project = context.project
    promotion_paths = [
        {
            "sourceEnvironment": path.source_environment,
            "targetEnvironments": [
                {
                    "name": target.name,
                    "requiresApproval": target.requires_approval,
                    "isManualApprovalRequired": target.is_manual_approval_required,
                }
                for target in path.targets
            ],
        }
        for path in resource.promotion_paths
    ]
    default_description = (
        f"Deployment pipeline for {project}" if project else f"{resource.name} deployment pipeline"
    )
    return managed_entity(
        EntityKind.DEPLOYMENT_PIPELINE,
        resource,
        context,
        description=resource.description or default_description,
        tags=("deployment-pipeline", "platform-engineering"),
        annotations={**provenance_annotations(resource), ann.PROJECT: project},
        labels={"openchoreo.io/deployment-pipeline": "true"},
        spec={
            "type": PIPELINE_TYPE,
            "owner": context.default_owner,
            "projectRef": project,
            "projectRefs": [project] if project else [],
            "namespaceName": context.namespace,
            "promotionPaths": promotion_paths,
        },
    )
