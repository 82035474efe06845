"""Application wiring and entry points."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from choreosync.adapters.openchoreo import build_resource_source_factory, build_token_provider
from choreosync.adapters.sqlalchemy import SqlAlchemyCatalogStore
from choreosync.config import get_catalog_store_config, get_openchoreo_config
from choreosync.domain.model import Entity, EntityRef, parse_entity_ref
from choreosync.domain.sync import (
    ImmediateInserter,
    OwnershipKey,
    SyncOrchestrator,
    SyncSettings,
)
from choreosync.scheduling import ScheduledTaskRunner

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from choreosync.config import OpenChoreoConfig
    from choreosync.domain.ports import DeferredEntity, ResourceSourceFactory, TokenProvider
    from choreosync.domain.sync import SyncReport

log = getLogger(__name__)


@dataclass(slots=True)
class CatalogApp:
    config: OpenChoreoConfig
    store: SqlAlchemyCatalogStore
    orchestrator: SyncOrchestrator
    inserter: ImmediateInserter

    def scheduler(self) -> ScheduledTaskRunner[SyncReport]:
        return ScheduledTaskRunner(
            self.orchestrator.run,
            frequency_seconds=self.config.schedule.frequency_seconds,
            timeout_seconds=self.config.schedule.timeout_seconds,
            name=self.orchestrator.provider_name,
        )


def build_app(
    *,
    config: OpenChoreoConfig | None = None,
    store: SqlAlchemyCatalogStore | None = None,
    source_factory: ResourceSourceFactory | None = None,
    token_provider: TokenProvider | None = None,
    ownership: OwnershipKey | None = None,
) -> CatalogApp:
    """Wire both catalog writers to one store under one ownership key."""

    effective_config = config or get_openchoreo_config()
    effective_store = store or SqlAlchemyCatalogStore.from_uri(
        get_catalog_store_config().uri
    )
    key = ownership or OwnershipKey()

    orchestrator = SyncOrchestrator(
        source_factory=source_factory or build_resource_source_factory(effective_config),
        ownership=key,
        settings=SyncSettings(
            default_owner=effective_config.default_owner,
            service_component_types=effective_config.service_component_types,
        ),
        token_provider=token_provider or build_token_provider(effective_config),
    )
    inserter = ImmediateInserter(ownership=key)
    orchestrator.connect(effective_store)
    inserter.connect(effective_store)
    log.debug(
        "Built catalog app for %s (new API: %s)",
        effective_config.base_url,
        effective_config.use_new_api,
    )
    return CatalogApp(
        config=effective_config,
        store=effective_store,
        orchestrator=orchestrator,
        inserter=inserter,
    )


def run_sync_once(*, app: CatalogApp | None = None) -> SyncReport:
    """Run a single full sync bounded by the configured timeout."""

    effective_app = app or build_app()
    timeout = effective_app.config.schedule.timeout_seconds
    report = asyncio.run(asyncio.wait_for(effective_app.orchestrator.run(), timeout=timeout))
    log.info(
        "Finished sync: applied=%s, entities=%s, relations=%s, skipped=%s",
        report.applied,
        report.entity_count,
        report.relation_count,
        report.skipped,
    )
    return report


def serve(*, app: CatalogApp | None = None, max_ticks: int | None = None) -> None:
    """Run the full sync on its schedule until interrupted."""

    effective_app = app or build_app()
    asyncio.run(effective_app.scheduler().run_forever(max_ticks=max_ticks))


def load_entity_document(path: Path) -> Entity:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ValueError(f"{path} must contain a single entity object")
    return Entity.from_document(document)


def insert_entity_from_file(path: Path | str, *, app: CatalogApp | None = None) -> DeferredEntity:
    entity = load_entity_document(Path(path))
    effective_app = app or build_app()
    return asyncio.run(effective_app.inserter.insert_entity(entity))


def remove_entity(ref: EntityRef | str, *, app: CatalogApp | None = None) -> EntityRef:
    effective_app = app or build_app()
    return asyncio.run(effective_app.inserter.remove_entity(ref))


def parse_annotation_args(pairs: Sequence[str]) -> dict[str, str | None]:
    """Turn ``key=value`` into a set and ``key-`` into a delete."""

    annotations: dict[str, str | None] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if separator and key.strip():
            annotations[key.strip()] = value
        elif not separator and pair.endswith("-") and len(pair) > 1:
            annotations[pair[:-1].strip()] = None
        else:
            raise ValueError(f"Expected key=value or key-, got {pair!r}")
    return annotations


def annotate_entity(
    ref: EntityRef | str,
    annotations: Mapping[str, str | None],
    *,
    app: CatalogApp | None = None,
) -> dict[str, str]:
    """Store custom annotations for ``ref`` and return everything now stored for it."""

    entity_ref = ref if isinstance(ref, EntityRef) else parse_entity_ref(ref)
    effective_app = app or build_app()

    async def apply() -> dict[str, str]:
        await effective_app.store.set_annotations(entity_ref, annotations)
        return await effective_app.store.get_annotations(entity_ref)

    return asyncio.run(apply())
