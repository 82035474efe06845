"""Out-of-band entity insertion and removal between scheduled syncs."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from choreosync.domain.errors import NotConnectedError
from choreosync.domain.model import EntityRef, parse_entity_ref
from choreosync.domain.ports.catalog import DeltaMutation, EntityRemoval
from choreosync.domain.processing import process_entity

if TYPE_CHECKING:
    from choreosync.domain.model import Entity
    from choreosync.domain.ports import CatalogConnection, DeferredEntity

    from .ownership import OwnershipKey

log = getLogger(__name__)


class ImmediateInserter:
    """Applies single-entity delta mutations under the orchestrator's ownership key.

    Entities pass through the same pre- and post-processing as a full sync, so an
    inserted entity is indistinguishable from one the next full sync produces.
    """

    def __init__(
        self,
        *,
        ownership: OwnershipKey,
        connection: CatalogConnection | None = None,
    ) -> None:
        self._ownership = ownership
        self._connection = connection

    @property
    def location_key(self) -> str:
        return self._ownership.location_key

    def connect(self, connection: CatalogConnection) -> None:
        self._connection = connection

    def _require_connection(self) -> CatalogConnection:
        if self._connection is None:
            raise NotConnectedError("Immediate inserter is not connected to a catalog")
        return self._connection

    async def insert_entity(self, entity: Entity) -> DeferredEntity:
        connection = self._require_connection()
        try:
            deferred = process_entity(entity.copy(), location_key=self.location_key)
            await connection.apply_mutation(DeltaMutation(added=(deferred,)))
        except Exception:
            log.exception("Failed to insert entity %s", entity.ref)
            raise
        log.info("Inserted entity %s with %s relations", entity.ref, len(deferred.relations))
        return deferred

    async def remove_entity(self, ref: EntityRef | str) -> EntityRef:
        connection = self._require_connection()
        entity_ref = ref if isinstance(ref, EntityRef) else parse_entity_ref(ref)
        try:
            await connection.apply_mutation(
                DeltaMutation(
                    removed=(EntityRemoval(entity_ref=entity_ref, location_key=self.location_key),)
                )
            )
        except Exception:
            log.exception("Failed to remove entity %s", entity_ref)
            raise
        log.info("Removed entity %s", entity_ref)
        return entity_ref
