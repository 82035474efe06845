"""Ports for writing into the downstream entity catalog."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from choreosync.domain.model import Entity, EntityRef, Relation


@dataclass(slots=True, frozen=True)
class DeferredEntity:
    """An entity ready for the catalog, together with the relations it emitted."""

    entity: Entity
    location_key: str
    relations: tuple[Relation, ...] = ()


@dataclass(slots=True, frozen=True)
class EntityRemoval:
    entity_ref: EntityRef
    location_key: str


@dataclass(slots=True, frozen=True)
class FullMutation:
    """Replace every entity owned by ``location_key`` with ``entities``."""

    location_key: str
    entities: tuple[DeferredEntity, ...]
    type: Literal["full"] = "full"


@dataclass(slots=True, frozen=True)
class DeltaMutation:
    """Upsert ``added`` and delete ``removed`` without touching anything else."""

    added: tuple[DeferredEntity, ...] = ()
    removed: tuple[EntityRemoval, ...] = ()
    type: Literal["delta"] = "delta"


type CatalogMutation = FullMutation | DeltaMutation


@runtime_checkable
class CatalogConnection(Protocol):
    """Connection handed to catalog writers once the store accepts mutations."""

    async def apply_mutation(self, mutation: CatalogMutation) -> None: ...


@runtime_checkable
class AnnotationStore(Protocol):
    """User-set annotations kept apart from the entities a writer replaces.

    Stored annotations are merged over the writer's own annotations every time
    the entity is written, so they survive full-replace mutations.
    """

    async def get_annotations(self, entity_ref: EntityRef) -> dict[str, str]: ...

    async def set_annotations(
        self, entity_ref: EntityRef, annotations: Mapping[str, str | None]
    ) -> None:
        """Upsert ``annotations``; a ``None`` value deletes that key."""

    async def delete_all_annotations(self, entity_ref: EntityRef) -> None: ...


__all__ = [
    "AnnotationStore",
    "CatalogConnection",
    "CatalogMutation",
    "DeferredEntity",
    "DeltaMutation",
    "EntityRemoval",
    "FullMutation",
]
