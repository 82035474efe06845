from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from choreosync.adapters.openchoreo import LegacyResourceSource
from choreosync.config.http_resilience import ResilienceConfig
from choreosync.domain.errors import FetchError
from choreosync.domain.model import (
    AgentConnection,
    ComponentResource,
    ProjectResource,
    PromotionPath,
    PromotionTarget,
    WorkloadEndpoint,
)

from tests.helpers.openchoreo import RecordingRouter, mock_client_factory

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

RESILIENCE = ResilienceConfig(name="openchoreo", base_url="https://openchoreo.test")


def _ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def _items(*items: dict[str, Any], total: int | None = None) -> dict[str, Any]:
    return _ok({"items": list(items), "totalCount": len(items) if total is None else total})


def _run[T](
    router: RecordingRouter,
    call: Callable[[LegacyResourceSource], Awaitable[T]],
    *,
    token: str | None = None,
) -> T:
    async def scenario() -> T:
        async with LegacyResourceSource(
            RESILIENCE, token=token, client_factory=mock_client_factory(router)
        ) as source:
            return await call(source)

    return asyncio.run(scenario())


def test_namespaces_are_unwrapped_with_bearer_token() -> None:
    router = RecordingRouter(
        {"/namespaces": _items({"name": "acme", "displayName": "ACME", "createdAt": "2024"})}
    )

    namespaces = _run(router, lambda source: source.list_namespaces(), token="secret")

    assert [(ns.name, ns.display_name, ns.created_at) for ns in namespaces] == [
        ("acme", "ACME", "2024")
    ]
    (request,) = router.requests
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.url.params["offset"] == "0"
    assert request.url.params["limit"] == "100"


def test_listings_follow_offset_pages() -> None:
    def environments(request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offset"])
        count = 100 if offset == 0 else 1
        items = [{"name": f"env-{offset + index}"} for index in range(count)]
        return httpx.Response(200, json=_items(*items, total=101))

    router = RecordingRouter({"/namespaces/acme/environments": environments})

    result = _run(router, lambda source: source.list_environments("acme"))

    assert len(result) == 101
    assert result[-1].name == "env-100"
    assert [r.url.params["offset"] for r in router.requests] == ["0", "100"]


def test_environment_and_plane_payloads() -> None:
    router = RecordingRouter(
        {
            "/namespaces/acme/environments": _items(
                {
                    "name": "prod",
                    "dataPlaneRef": {"name": "default-dp"},
                    "isProduction": True,
                    "dnsPrefix": "prod",
                }
            ),
            "/namespaces/acme/dataplanes": _items(
                {
                    "name": "default-dp",
                    "publicVirtualHost": "apps.example.com",
                    "publicHTTPPort": 80,
                    "namespaceHTTPSPort": 8443,
                    "observabilityPlaneRef": "observer",
                    "agentConnection": {"connected": True, "connectedAgents": 2},
                }
            ),
            "/namespaces/acme/buildplanes": _ok([{"name": "default-bp"}]),
            "/namespaces/acme/observabilityplanes": _ok(
                [{"name": "observer", "observerURL": "http://observer:8080"}]
            ),
        }
    )

    async def call(source: LegacyResourceSource) -> tuple[Any, ...]:
        return (
            await source.list_environments("acme"),
            await source.list_data_planes("acme"),
            await source.list_build_planes("acme"),
            await source.list_observability_planes("acme"),
        )

    (env,), (dp,), (bp,), (op,) = _run(router, call)

    assert env.data_plane_ref == "default-dp"
    assert env.is_production is True
    assert env.dns_prefix == "prod"
    assert dp.public_http_port == 80
    assert dp.namespace_https_port == 8443
    assert dp.observability_plane_ref == "observer"
    assert dp.agent_connection == AgentConnection(connected=True, connected_agents=2)
    assert bp.name == "default-bp"
    assert op.observer_url == "http://observer:8080"


def test_components_carry_repository() -> None:
    router = RecordingRouter(
        {
            "/namespaces/acme/projects/shop/components": _items(
                {
                    "name": "cart",
                    "type": "deployment/service",
                    "status": "Ready",
                    "deletionTimestamp": "2024-02-02",
                    "workflow": {
                        "name": "docker",
                        "schema": {
                            "repository": {
                                "url": "https://github.com/acme/cart",
                                "revision": {"branch": "main"},
                            }
                        },
                    },
                }
            )
        }
    )

    (component,) = _run(
        router, lambda source: source.list_components("acme", ProjectResource(name="shop"))
    )

    assert component.project_name == "shop"
    assert component.repository_url == "https://github.com/acme/cart"
    assert component.branch == "main"
    assert component.is_deleted
    assert component.endpoints is None


def test_workload_detail_provides_endpoints() -> None:
    router = RecordingRouter(
        {
            "/namespaces/acme/projects/shop/components/cart": _ok(
                {
                    "name": "cart",
                    "type": "deployment/service",
                    "workload": {
                        "endpoints": {
                            "http": {
                                "type": "REST",
                                "port": 8080,
                                "schema": {"content": "openapi: 3.0.0"},
                            }
                        }
                    },
                }
            ),
            "/namespaces/acme/projects/shop/components/worker": _ok({"name": "worker"}),
        }
    )

    async def call(source: LegacyResourceSource) -> tuple[ComponentResource, ComponentResource]:
        return (
            await source.get_component_workload(
                "acme", ComponentResource(name="cart", project_name="shop")
            ),
            await source.get_component_workload(
                "acme", ComponentResource(name="worker", project_name="shop")
            ),
        )

    cart, worker = _run(router, call)

    assert cart.endpoints == (
        WorkloadEndpoint(name="http", type="REST", port=8080, schema_content="openapi: 3.0.0"),
    )
    assert worker.endpoints == ()
    assert router.requests[0].url.params["include"] == "workload"


def test_deployment_pipeline_and_missing_pipeline() -> None:
    router = RecordingRouter(
        {
            "/namespaces/acme/projects/shop/deployment-pipeline": _ok(
                {
                    "name": "pipe1",
                    "promotionPaths": [
                        {
                            "sourceEnvironmentRef": "development",
                            "targetEnvironmentRefs": [
                                {"name": "production", "requiresApproval": True}
                            ],
                        }
                    ],
                }
            )
        }
    )

    async def call(source: LegacyResourceSource) -> tuple[Any, Any]:
        return (
            await source.get_deployment_pipeline("acme", ProjectResource(name="shop")),
            await source.get_deployment_pipeline("acme", ProjectResource(name="other")),
        )

    found, missing = _run(router, call)

    assert found.name == "pipe1"
    assert found.promotion_paths == (
        PromotionPath(
            source_environment="development",
            targets=(PromotionTarget(name="production", requires_approval=True),),
        ),
    )
    assert missing is None


def test_component_type_schema_and_definitions() -> None:
    router = RecordingRouter(
        {
            "/namespaces/acme/component-types": _items(
                {
                    "name": "service",
                    "workloadType": "deployment",
                    "allowedWorkflows": ["docker"],
                    "allowedTraits": ["autoscaler"],
                }
            ),
            "/namespaces/acme/component-types/service/schema": _ok({"type": "object"}),
            "/namespaces/acme/component-workflows": _items({"name": "docker"}),
        }
    )

    async def call(source: LegacyResourceSource) -> tuple[Any, ...]:
        return (
            await source.list_component_types("acme"),
            await source.get_component_type_schema("acme", "service"),
            await source.list_component_workflows("acme"),
        )

    (component_type,), schema, (workflow,) = _run(router, call)

    assert component_type.allowed_workflows == ("docker",)
    assert component_type.allowed_traits == ("autoscaler",)
    assert schema == {"type": "object"}
    assert workflow.kind == "component-workflow"


def test_unsuccessful_envelope_raises_fetch_error() -> None:
    router = RecordingRouter(
        {"/namespaces/acme/traits": {"success": False, "message": "namespace is locked"}}
    )

    with pytest.raises(FetchError, match="namespace is locked"):
        _run(router, lambda source: source.list_traits("acme"))


def test_http_error_raises_fetch_error() -> None:
    router = RecordingRouter(
        {"/namespaces/acme/workflows": httpx.Response(500, json={"error": "boom"})}
    )

    with pytest.raises(FetchError, match="500"):
        _run(router, lambda source: source.list_workflows("acme"))


def test_invalid_payload_raises_fetch_error() -> None:
    router = RecordingRouter({"/namespaces": _items({"displayName": "no name"})})

    with pytest.raises(FetchError, match="Unexpected payload"):
        _run(router, lambda source: source.list_namespaces())
