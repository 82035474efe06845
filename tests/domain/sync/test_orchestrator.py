from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from choreosync.domain.errors import AuthenticationError, NotConnectedError
from choreosync.domain.model import (
    ComponentResource,
    ComponentTypeResource,
    EntityRef,
    ProjectResource,
    RelationType,
)
from choreosync.domain.ports.catalog import FullMutation
from choreosync.domain.sync import SyncOrchestrator, SyncSettings, qualify_owner

from tests.helpers.openchoreo import (
    FakeNamespace,
    FakeResourceSource,
    RecordingConnection,
    StaticTokenProvider,
    pipeline,
    sample_namespace,
)

if TYPE_CHECKING:
    from choreosync.domain.ports.catalog import DeferredEntity
    from choreosync.domain.sync import OwnershipKey


def _orchestrator(
    source: FakeResourceSource,
    ownership: OwnershipKey,
    *,
    connection: RecordingConnection | None = None,
    token_provider: StaticTokenProvider | None = None,
) -> tuple[SyncOrchestrator, RecordingConnection]:
    orchestrator = SyncOrchestrator(
        source_factory=source,
        ownership=ownership,
        token_provider=token_provider,
    )
    recording = connection or RecordingConnection()
    orchestrator.connect(recording)
    return orchestrator, recording


def _applied(connection: RecordingConnection) -> tuple[DeferredEntity, ...]:
    (mutation,) = connection.mutations
    assert isinstance(mutation, FullMutation)
    return mutation.entities


def _refs(entities: tuple[DeferredEntity, ...]) -> set[str]:
    return {str(item.entity.ref) for item in entities}


def test_qualify_owner() -> None:
    assert qualify_owner("team") == "group:default/team"
    assert qualify_owner("platform/team") == "group:platform/team"
    assert qualify_owner("user:default/alice") == "user:default/alice"
    assert SyncSettings(default_owner="ops").owner_ref == "group:default/ops"


def test_run_requires_connection(ownership: OwnershipKey) -> None:
    orchestrator = SyncOrchestrator(
        source_factory=FakeResourceSource({"acme": sample_namespace()}), ownership=ownership
    )

    assert not orchestrator.is_connected
    with pytest.raises(NotConnectedError):
        asyncio.run(orchestrator.run())


def test_full_sync_applies_single_full_mutation(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()})
    orchestrator, connection = _orchestrator(source, ownership)

    report = asyncio.run(orchestrator.run())

    (mutation,) = connection.mutations
    assert isinstance(mutation, FullMutation)
    assert mutation.location_key == ownership.location_key
    assert _refs(mutation.entities) == {
        "domain:default/acme",
        "environment:acme/development",
        "environment:acme/production",
        "dataplane:acme/default-dp",
        "buildplane:acme/default-bp",
        "observabilityplane:acme/observer",
        "system:acme/shop",
        "component:acme/cart",
        "api:acme/cart-http",
        "component:acme/storefront",
        "deploymentpipeline:acme/pipe1",
        "componenttype:acme/service",
        "template:acme/template-service",
        "traittype:acme/autoscaler",
        "workflow:acme/nightly",
        "componentworkflow:acme/docker",
    }
    assert all(item.location_key == ownership.location_key for item in mutation.entities)
    assert report.applied
    assert report.entity_count == 16
    assert report.skipped == 0
    assert report.kind_counts["Component"] == 2
    assert report.kind_counts["API"] == 1
    assert report.relation_count == sum(len(item.relations) for item in mutation.entities)
    assert source.entered == source.exited == 1


def test_only_service_components_fetch_workloads(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()})
    orchestrator, connection = _orchestrator(source, ownership)

    asyncio.run(orchestrator.run())

    assert ("acme", "workload:cart") in source.calls
    assert ("acme", "workload:storefront") not in source.calls
    cart = next(item for item in _applied(connection) if item.entity.name == "cart")
    assert cart.entity.spec["providesApis"] == ["cart-http"]


def test_workload_failure_falls_back_to_plain_component(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()}, failing={("acme", "workload:cart")})
    orchestrator, connection = _orchestrator(source, ownership)

    report = asyncio.run(orchestrator.run())

    refs = _refs(_applied(connection))
    assert report.applied
    assert "component:acme/cart" in refs
    assert "api:acme/cart-http" not in refs


def test_shared_pipeline_is_emitted_once(ownership: OwnershipKey) -> None:
    namespace = sample_namespace()
    namespace.projects = [
        ProjectResource(name="p1", deployment_pipeline_ref="shared"),
        ProjectResource(name="p2", deployment_pipeline_ref="shared"),
    ]
    shared = pipeline("shared", ("development", "production"))
    namespace.pipelines = {"p1": shared, "p2": shared}
    namespace.components = {}
    source = FakeResourceSource({"acme": namespace})
    orchestrator, connection = _orchestrator(source, ownership)

    asyncio.run(orchestrator.run())

    pipelines = [item for item in _applied(connection) if item.entity.kind == "DeploymentPipeline"]
    assert len(pipelines) == 1
    (deferred,) = pipelines
    assert deferred.entity.spec["projectRefs"] == ["p1", "p2"]

    pipeline_ref = EntityRef("deploymentpipeline", "acme", "shared")
    users = {
        relation.source.name
        for relation in deferred.relations
        if relation.type == RelationType.USES_PIPELINE and relation.target == pipeline_ref
    }
    assert users == {"p1", "p2"}
    promotes = [r for r in deferred.relations if r.type == RelationType.PROMOTES_TO]
    assert sorted(r.target.name for r in promotes) == ["development", "production"]


def test_failing_listing_drops_only_that_kind(ownership: OwnershipKey) -> None:
    source = FakeResourceSource(
        {"n1": sample_namespace(), "n2": sample_namespace()},
        failing={("n2", "environments")},
    )
    orchestrator, connection = _orchestrator(source, ownership)

    report = asyncio.run(orchestrator.run())

    refs = _refs(_applied(connection))
    assert report.applied
    assert "environment:n1/development" in refs
    assert "environment:n2/development" not in refs
    assert "dataplane:n2/default-dp" in refs
    assert "component:n2/cart" in refs


def test_failing_component_listing_keeps_project(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()}, failing={("acme", "components:shop")})
    orchestrator, connection = _orchestrator(source, ownership)

    asyncio.run(orchestrator.run())

    refs = _refs(_applied(connection))
    assert "system:acme/shop" in refs
    assert "deploymentpipeline:acme/pipe1" in refs
    assert not any(ref.startswith("component:") for ref in refs)


def test_missing_schema_skips_only_the_template(ownership: OwnershipKey) -> None:
    namespace = sample_namespace()
    namespace.schemas = {}
    source = FakeResourceSource({"acme": namespace})
    orchestrator, connection = _orchestrator(source, ownership)

    asyncio.run(orchestrator.run())

    refs = _refs(_applied(connection))
    assert "componenttype:acme/service" in refs
    assert "template:acme/template-service" not in refs


def test_malformed_reference_drops_only_that_entity(ownership: OwnershipKey) -> None:
    namespace = sample_namespace()
    namespace.component_types.append(
        ComponentTypeResource(name="broken", workload_type="deployment", allowed_workflows=("ci:",))
    )
    source = FakeResourceSource({"acme": namespace})
    orchestrator, connection = _orchestrator(source, ownership)

    report = asyncio.run(orchestrator.run())

    assert report.applied
    assert report.skipped == 1
    refs = _refs(_applied(connection))
    assert "componenttype:acme/broken" not in refs
    assert "componenttype:acme/service" in refs
    assert "system:acme/shop" in refs


def test_namespace_failure_aborts_without_mutation(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()}, fail_namespaces=True)
    orchestrator, connection = _orchestrator(source, ownership)

    report = asyncio.run(orchestrator.run())

    assert not report.applied
    assert report.error == "namespaces unavailable"
    assert connection.mutations == []


def test_store_failure_is_reported(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()})
    orchestrator, _ = _orchestrator(
        source, ownership, connection=RecordingConnection(error=RuntimeError("db down"))
    )

    report = asyncio.run(orchestrator.run())

    assert not report.applied
    assert report.error == "db down"


def test_deleted_resources_are_filtered(ownership: OwnershipKey) -> None:
    namespace = sample_namespace()
    namespace.projects.append(ProjectResource(name="old", deletion_timestamp="2024-01-01T00:00:00Z"))
    namespace.components["shop"].append(
        ComponentResource(name="gone", project_name="shop", deletion_timestamp="2024-01-01")
    )
    source = FakeResourceSource({"acme": namespace})
    orchestrator, connection = _orchestrator(source, ownership)

    asyncio.run(orchestrator.run())

    refs = _refs(_applied(connection))
    assert "system:acme/old" not in refs
    assert "component:acme/gone" not in refs
    assert ("acme", "pipeline:old") not in source.calls


def test_repeated_runs_are_idempotent(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()})
    orchestrator, connection = _orchestrator(source, ownership)

    asyncio.run(orchestrator.run())
    asyncio.run(orchestrator.run())

    first, second = connection.mutations
    assert isinstance(first, FullMutation)
    assert isinstance(second, FullMutation)
    assert _snapshot(first) == _snapshot(second)


def test_service_token_is_passed_to_source(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()})
    provider = StaticTokenProvider("abc")
    orchestrator, _ = _orchestrator(source, ownership, token_provider=provider)

    asyncio.run(orchestrator.run())

    assert provider.calls == 1
    assert source.tokens == ["abc"]


def test_auth_failure_continues_without_token(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"acme": sample_namespace()})
    provider = StaticTokenProvider(error=AuthenticationError("token endpoint down"))
    orchestrator, connection = _orchestrator(source, ownership, token_provider=provider)

    report = asyncio.run(orchestrator.run())

    assert report.applied
    assert source.tokens == [None]
    assert len(connection.mutations) == 1


def test_empty_namespace_yields_domain_only(ownership: OwnershipKey) -> None:
    source = FakeResourceSource({"empty": FakeNamespace()})
    orchestrator, connection = _orchestrator(source, ownership)

    report = asyncio.run(orchestrator.run())

    assert _refs(_applied(connection)) == {"domain:default/empty"}
    assert report.entity_count == 1


def _snapshot(mutation: FullMutation) -> set[tuple[str, str, frozenset[str]]]:
    return {
        (
            str(item.entity.ref),
            repr(sorted(item.entity.to_document()["spec"].items())),
            frozenset(str(relation) for relation in item.relations),
        )
        for item in mutation.entities
    }
