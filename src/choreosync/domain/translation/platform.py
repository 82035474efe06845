"""Translators for namespaces, environments and infrastructure planes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from choreosync.domain.model import DEFAULT_NAMESPACE, EntityKind
from choreosync.domain.model import annotations as ann

from .context import managed_entity, provenance_annotations

if TYPE_CHECKING:
    from choreosync.domain.model import (
        AgentConnection,
        BuildPlaneResource,
        DataPlaneResource,
        Entity,
        EnvironmentResource,
        NamespaceResource,
        ObservabilityPlaneResource,
    )

    from .context import TranslationContext

PLANE_TYPE = "kubernetes"


def translate_namespace(resource: NamespaceResource, context: TranslationContext) -> Entity:
    return managed_entity(
        EntityKind.DOMAIN,
        resource,
        context,
        namespace=DEFAULT_NAMESPACE,
        description=resource.description or resource.name,
        tags=("namespace", "domain"),
        annotations=provenance_annotations(resource),
        spec={"owner": context.default_owner},
    )


def translate_environment(resource: EnvironmentResource, context: TranslationContext) -> Entity:
    is_production = resource.is_production
    env_type = None if is_production is None else ("production" if is_production else "development")
    return managed_entity(
        EntityKind.ENVIRONMENT,
        resource,
        context,
        description=resource.description or f"{resource.name} environment",
        tags=("environment",),
        annotations={
            **provenance_annotations(resource),
            ann.ENVIRONMENT: resource.name,
            ann.DATA_PLANE_REF: resource.data_plane_ref,
            ann.IS_PRODUCTION: None if is_production is None else str(is_production).lower(),
        },
        labels={"openchoreo.io/environment": "true"},
        spec={
            "type": env_type,
            "isProduction": is_production,
            "domain": context.domain_ref,
            "dataPlaneRef": resource.data_plane_ref,
            "dnsPrefix": resource.dns_prefix,
            "publicVirtualHost": resource.public_virtual_host,
        },
    )


def translate_data_plane(resource: DataPlaneResource, context: TranslationContext) -> Entity:
    return managed_entity(
        EntityKind.DATAPLANE,
        resource,
        context,
        description=resource.description or f"{resource.name} dataplane",
        tags=("dataplane", "infrastructure"),
        annotations={
            **provenance_annotations(resource),
            ann.PUBLIC_VIRTUAL_HOST: resource.public_virtual_host,
            ann.NAMESPACE_VIRTUAL_HOST: resource.namespace_virtual_host,
            ann.PUBLIC_HTTP_PORT: _port(resource.public_http_port),
            ann.PUBLIC_HTTPS_PORT: _port(resource.public_https_port),
            ann.NAMESPACE_HTTP_PORT: _port(resource.namespace_http_port),
            ann.NAMESPACE_HTTPS_PORT: _port(resource.namespace_https_port),
            ann.OBSERVABILITY_PLANE_REF: resource.observability_plane_ref,
            **agent_connection_annotations(resource.agent_connection),
        },
        labels={"openchoreo.io/dataplane": "true"},
        spec={
            "type": PLANE_TYPE,
            "domain": context.domain_ref,
            "publicVirtualHost": resource.public_virtual_host,
            "namespaceVirtualHost": resource.namespace_virtual_host,
            "publicHTTPPort": resource.public_http_port,
            "publicHTTPSPort": resource.public_https_port,
            "namespaceHTTPPort": resource.namespace_http_port,
            "namespaceHTTPSPort": resource.namespace_https_port,
            "observabilityPlaneRef": resource.observability_plane_ref,
        },
    )


def translate_build_plane(resource: BuildPlaneResource, context: TranslationContext) -> Entity:
    return managed_entity(
        EntityKind.BUILD_PLANE,
        resource,
        context,
        description=resource.description or f"{resource.name} build plane",
        tags=("buildplane", "infrastructure"),
        annotations={
            **provenance_annotations(resource),
            ann.OBSERVABILITY_PLANE_REF: resource.observability_plane_ref,
            **agent_connection_annotations(resource.agent_connection),
        },
        labels={"openchoreo.io/buildplane": "true"},
        spec={
            "type": PLANE_TYPE,
            "domain": context.domain_ref,
            "observabilityPlaneRef": resource.observability_plane_ref,
        },
    )


def translate_observability_plane(
    resource: ObservabilityPlaneResource, context: TranslationContext
) -> Entity:
    return managed_entity(
        EntityKind.OBSERVABILITY_PLANE,
        resource,
        context,
        description=resource.description or f"{resource.name} observability plane",
        tags=("observabilityplane", "infrastructure"),
        annotations={
            **provenance_annotations(resource),
            ann.OBSERVER_URL: resource.observer_url,
            **agent_connection_annotations(resource.agent_connection),
        },
        labels={"openchoreo.io/observabilityplane": "true"},
        spec={
            "type": PLANE_TYPE,
            "domain": context.domain_ref,
            "observerURL": resource.observer_url,
        },
    )


def agent_connection_annotations(connection: AgentConnection | None) -> dict[str, str | None]:
    if connection is None:
        return {}
    return {
        ann.AGENT_CONNECTED: str(connection.connected).lower(),
        ann.AGENT_CONNECTED_COUNT: str(connection.connected_agents),
        ann.AGENT_LAST_HEARTBEAT: connection.last_heartbeat_time,
        ann.AGENT_LAST_CONNECTED: connection.last_connected_time,
        ann.AGENT_LAST_DISCONNECTED: connection.last_disconnected_time,
        ann.AGENT_MESSAGE: connection.message,
    }


def _port(value: int | None) -> str | None:
    return None if value is None else str(value)
