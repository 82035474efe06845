"""Annotation, label and tag keys stamped on generated entities."""

from __future__ import annotations

from typing import Final

MANAGED_BY_LOCATION: Final = "backstage.io/managed-by-location"
MANAGED_BY_ORIGIN_LOCATION: Final = "backstage.io/managed-by-origin-location"
SOURCE_LOCATION: Final = "backstage.io/source-location"

NAMESPACE: Final = "openchoreo.io/namespace"
PROJECT: Final = "openchoreo.io/project"
COMPONENT: Final = "openchoreo.io/component"
COMPONENT_TYPE: Final = "openchoreo.io/component-type"
CREATED_AT: Final = "openchoreo.io/created-at"
STATUS: Final = "openchoreo.io/status"
BRANCH: Final = "openchoreo.io/branch"
ENVIRONMENT: Final = "openchoreo.io/environment"
IS_PRODUCTION: Final = "openchoreo.io/is-production"
DATA_PLANE_REF: Final = "openchoreo.io/data-plane-ref"
WORKLOAD_TYPE: Final = "openchoreo.io/workload-type"

ENDPOINT_NAME: Final = "openchoreo.io/endpoint-name"
ENDPOINT_TYPE: Final = "openchoreo.io/endpoint-type"
ENDPOINT_PORT: Final = "openchoreo.io/endpoint-port"

PUBLIC_VIRTUAL_HOST: Final = "openchoreo.io/public-virtual-host"
NAMESPACE_VIRTUAL_HOST: Final = "openchoreo.io/namespace-virtual-host"
PUBLIC_HTTP_PORT: Final = "openchoreo.io/public-http-port"
PUBLIC_HTTPS_PORT: Final = "openchoreo.io/public-https-port"
NAMESPACE_HTTP_PORT: Final = "openchoreo.io/namespace-http-port"
NAMESPACE_HTTPS_PORT: Final = "openchoreo.io/namespace-https-port"
OBSERVABILITY_PLANE_REF: Final = "openchoreo.io/observability-plane-ref"
OBSERVER_URL: Final = "openchoreo.io/observer-url"

AGENT_CONNECTED: Final = "openchoreo.io/agent-connected"
AGENT_CONNECTED_COUNT: Final = "openchoreo.io/agent-connected-count"
AGENT_LAST_HEARTBEAT: Final = "openchoreo.io/agent-last-heartbeat"
AGENT_LAST_CONNECTED: Final = "openchoreo.io/agent-last-connected"
AGENT_LAST_DISCONNECTED: Final = "openchoreo.io/agent-last-disconnected"
AGENT_MESSAGE: Final = "openchoreo.io/agent-message"

CTD_NAME: Final = "openchoreo.io/ctd-name"
CTD_DISPLAY_NAME: Final = "openchoreo.io/ctd-display-name"
CTD_GENERATED: Final = "openchoreo.io/ctd-generated"

MANAGED_LABEL: Final = "openchoreo.io/managed"

BASE_TAG: Final = "openchoreo"
