"""Scheduled full synchronisation of the OpenChoreo resource graph."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from choreosync.domain.errors import (
    AuthenticationError,
    EntityValidationError,
    NotConnectedError,
    SyncError,
    TranslationError,
)
from choreosync.domain.model import EntityKind
from choreosync.domain.ports.catalog import FullMutation
from choreosync.domain.processing import post_process, pre_process
from choreosync.domain.translation import (
    TranslationContext,
    is_service_component,
    translate_component_type_template,
    translate_resource,
)

from .batch import SyncBatch, SyncReport
from .deduplication import PipelineDeduplicator

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence

    from choreosync.domain.model import (
        ComponentResource,
        ComponentTypeResource,
        Entity,
        ProjectResource,
        ResourceRecord,
    )
    from choreosync.domain.ports import (
        CatalogConnection,
        ResourceSource,
        ResourceSourceFactory,
        TokenProvider,
    )

    from .ownership import OwnershipKey

    NamespaceStep = Callable[[ResourceSource, TranslationContext], Awaitable[SyncBatch]]

log = getLogger(__name__)

DEFAULT_OWNER_GROUP: Final = "openchoreo-users"
DEFAULT_SERVICE_COMPONENT_TYPES: Final = frozenset({"service", "deployment/service"})

_SUMMARY_KINDS: Final = (
    EntityKind.DOMAIN,
    EntityKind.SYSTEM,
    EntityKind.COMPONENT,
    EntityKind.API,
    EntityKind.ENVIRONMENT,
    EntityKind.DATAPLANE,
    EntityKind.BUILD_PLANE,
    EntityKind.OBSERVABILITY_PLANE,
    EntityKind.DEPLOYMENT_PIPELINE,
    EntityKind.COMPONENT_TYPE,
    EntityKind.TEMPLATE,
    EntityKind.TRAIT_TYPE,
    EntityKind.WORKFLOW,
    EntityKind.COMPONENT_WORKFLOW,
)


def qualify_owner(owner: str) -> str:
    """``team`` -> ``group:default/team``; already-qualified refs pass through."""

    if ":" in owner:
        return owner
    if "/" in owner:
        return f"group:{owner}"
    return f"group:default/{owner}"


@dataclass(slots=True, frozen=True)
class SyncSettings:
    default_owner: str = DEFAULT_OWNER_GROUP
    service_component_types: frozenset[str] = field(
        default_factory=lambda: DEFAULT_SERVICE_COMPONENT_TYPES
    )

    @property
    def owner_ref(self) -> str:
        return qualify_owner(self.default_owner)


class SyncOrchestrator:
    """Pulls every namespace from the upstream API and replaces the owned catalog slice.

    Each kind listing inside a namespace is guarded on its own, so one failing
    listing only drops that kind for the run. Only a failing namespace listing
    aborts the run, and then no mutation is applied.
    """

    def __init__(
        self,
        *,
        source_factory: ResourceSourceFactory,
        ownership: OwnershipKey,
        settings: SyncSettings | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._source_factory = source_factory
        self._ownership = ownership
        self._settings = settings or SyncSettings()
        self._token_provider = token_provider
        self._connection: CatalogConnection | None = None

    @property
    def provider_name(self) -> str:
        return self._ownership.provider_name

    @property
    def location_key(self) -> str:
        return self._ownership.location_key

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def connect(self, connection: CatalogConnection) -> None:
        self._connection = connection

    async def run(self) -> SyncReport:
        """Run one full sync and apply a single full-replace mutation."""

        if self._connection is None:
            raise NotConnectedError(f"{self.provider_name} is not connected to a catalog")
        connection = self._connection

        log.info("Fetching namespaces and projects from OpenChoreo")
        try:
            token = await self._service_token()
            async with self._source_factory(token) as source:
                batch = await self._collect(source)
            await connection.apply_mutation(
                FullMutation(location_key=self.location_key, entities=batch.entities)
            )
        except Exception as exc:
            log.exception("Failed to run %s", self.provider_name)
            return SyncReport.failed(exc)

        report = SyncReport.from_batch(batch)
        log.info(
            "Successfully processed %s entities (%s)",
            report.entity_count,
            _format_counts(report.kind_counts),
        )
        if report.skipped:
            log.warning("Skipped %s entities that failed validation", report.skipped)
        return report

    async def _service_token(self) -> str | None:
        if self._token_provider is None:
            return None
        try:
            token = await self._token_provider.get_token()
        except AuthenticationError as exc:
            log.warning("Failed to get service token, continuing without auth: %s", exc)
            return None
        log.debug("Using service token for OpenChoreo API requests")
        return token

    def _context(self, namespace: str) -> TranslationContext:
        return TranslationContext(
            namespace=namespace,
            location_key=self.location_key,
            default_owner=self._settings.owner_ref,
        )

    async def _collect(self, source: ResourceSource) -> SyncBatch:
        namespaces = await source.list_namespaces()
        log.debug("Found %s namespaces from OpenChoreo", len(namespaces))

        batch = SyncBatch.combine(
            self._finalize(self._translate(namespace, self._context(namespace.name)))
            for namespace in namespaces
        )
        for namespace in namespaces:
            batch += await self._sync_namespace(source, namespace.name)
        return batch

    async def _sync_namespace(self, source: ResourceSource, namespace: str) -> SyncBatch:
        context = self._context(namespace)
        steps: Sequence[tuple[str, NamespaceStep]] = (
            ("environments", self._sync_environments),
            ("dataplanes", self._sync_data_planes),
            ("buildplanes", self._sync_build_planes),
            ("observabilityplanes", self._sync_observability_planes),
            ("projects", self._sync_projects),
            ("component types", self._sync_component_types),
            ("traits", self._sync_traits),
            ("workflows", self._sync_workflows),
            ("component workflows", self._sync_component_workflows),
        )
        batch = SyncBatch()
        for label, step in steps:
            try:
                batch += await step(source, context)
            except SyncError as exc:
                log.warning("Failed to fetch %s for namespace %s: %s", label, namespace, exc)
        return batch

    async def _sync_listing(
        self,
        label: str,
        resources: Sequence[ResourceRecord],
        context: TranslationContext,
    ) -> SyncBatch:
        log.debug("Found %s %s in namespace: %s", len(resources), label, context.namespace)
        entities = [entity for item in resources for entity in self._translate(item, context)]
        return self._finalize(entities)

    async def _sync_environments(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        items = await source.list_environments(context.namespace)
        return await self._sync_listing("environments", items, context)

    async def _sync_data_planes(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        items = await source.list_data_planes(context.namespace)
        return await self._sync_listing("dataplanes", items, context)

    async def _sync_build_planes(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        items = await source.list_build_planes(context.namespace)
        return await self._sync_listing("buildplanes", items, context)

    async def _sync_observability_planes(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        items = await source.list_observability_planes(context.namespace)
        return await self._sync_listing("observabilityplanes", items, context)

    async def _sync_traits(self, source: ResourceSource, context: TranslationContext) -> SyncBatch:
        items = await source.list_traits(context.namespace)
        return await self._sync_listing("traits", items, context)

    async def _sync_workflows(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        items = await source.list_workflows(context.namespace)
        return await self._sync_listing("workflows", items, context)

    async def _sync_component_workflows(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        items = await source.list_component_workflows(context.namespace)
        return await self._sync_listing("component workflows", items, context)

    async def _sync_projects(self, source: ResourceSource, context: TranslationContext) -> SyncBatch:
        projects = await source.list_projects(context.namespace)
        active = [project for project in projects if not project.is_deleted]
        if len(active) != len(projects):
            log.debug(
                "Filtered out %s deleted projects in namespace: %s",
                len(projects) - len(active),
                context.namespace,
            )

        entities: list[Entity] = []
        pipelines = PipelineDeduplicator()
        for project in active:
            project_context = context.for_project(project.name)
            entities.extend(self._translate(project, project_context))

            pipeline = await self._fetch_pipeline(source, project_context, project)
            if pipeline is not None:
                pipelines.add(pipeline, project.name)

            try:
                entities.extend(await self._sync_components(source, project_context, project))
            except SyncError as exc:
                log.warning(
                    "Failed to fetch components for project %s in namespace %s: %s",
                    project.name,
                    context.namespace,
                    exc,
                )

        entities.extend(pipelines.entities())
        return self._finalize(entities)

    async def _fetch_pipeline(
        self,
        source: ResourceSource,
        context: TranslationContext,
        project: ProjectResource,
    ) -> Entity | None:
        try:
            resource = await source.get_deployment_pipeline(context.namespace, project)
        except SyncError as exc:
            log.debug("Failed to fetch deployment pipeline for project %s: %s", project.name, exc)
            return None
        if resource is None:
            log.debug("No deployment pipeline found for project %s", project.name)
            return None
        translated = self._translate(resource, context)
        return translated[0] if translated else None

    async def _sync_components(
        self,
        source: ResourceSource,
        context: TranslationContext,
        project: ProjectResource,
    ) -> list[Entity]:
        components = await source.list_components(context.namespace, project)
        active = [component for component in components if not component.is_deleted]
        if len(active) != len(components):
            log.debug(
                "Filtered out %s deleted components in project: %s",
                len(components) - len(active),
                project.name,
            )

        entities: list[Entity] = []
        for component in active:
            resolved = component
            if is_service_component(component, self._settings.service_component_types):
                resolved = await self._with_workload(source, context, component)
            entities.extend(self._translate(resolved, context))
        return entities

    async def _with_workload(
        self,
        source: ResourceSource,
        context: TranslationContext,
        component: ComponentResource,
    ) -> ComponentResource:
        try:
            return await source.get_component_workload(context.namespace, component)
        except SyncError as exc:
            log.warning(
                "Failed to fetch complete component details for %s: %s", component.name, exc
            )
            return component

    async def _sync_component_types(
        self, source: ResourceSource, context: TranslationContext
    ) -> SyncBatch:
        log.info("Fetching component types from OpenChoreo for namespace: %s", context.namespace)
        component_types = await source.list_component_types(context.namespace)

        with_schemas = await asyncio.gather(
            *(self._with_schema(source, context, item) for item in component_types)
        )
        templates: list[Entity] = []
        for component_type in with_schemas:
            if component_type is None:
                continue
            try:
                templates.append(translate_component_type_template(component_type, context))
            except TranslationError as exc:
                log.warning(
                    "Failed to convert component type %s to template: %s",
                    component_type.name,
                    exc,
                )
        log.info(
            "Generated %s template entities from component types in namespace: %s",
            len(templates),
            context.namespace,
        )

        definitions = [
            entity for item in component_types for entity in self._translate(item, context)
        ]
        return self._finalize([*templates, *definitions])

    async def _with_schema(
        self,
        source: ResourceSource,
        context: TranslationContext,
        component_type: ComponentTypeResource,
    ) -> ComponentTypeResource | None:
        try:
            schema = await source.get_component_type_schema(context.namespace, component_type.name)
        except SyncError as exc:
            log.warning(
                "Failed to fetch schema for component type %s in namespace %s: %s",
                component_type.name,
                context.namespace,
                exc,
            )
            return None
        return replace(component_type, input_parameters_schema=schema)

    def _translate(self, resource: ResourceRecord, context: TranslationContext) -> list[Entity]:
        try:
            return list(translate_resource(resource, context))
        except TranslationError as exc:
            log.warning("Failed to translate %s %s: %s", resource.kind, resource.name, exc)
            return []

    def _finalize(self, entities: Iterable[Entity]) -> SyncBatch:
        processed = []
        skipped = 0
        for entity in entities:
            try:
                processed.append(post_process(pre_process(entity), location_key=self.location_key))
            except EntityValidationError as exc:
                log.warning("Skipping invalid entity: %s", exc)
                skipped += 1
        return SyncBatch(entities=tuple(processed), skipped=skipped)


def _format_counts(counts: Mapping[str, int]) -> str:
    return ", ".join(
        f"{counts.get(kind, 0)} {kind.value}" for kind in _SUMMARY_KINDS if counts.get(kind)
    )
