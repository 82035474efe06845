"""Catalog store applying full-replace and delta mutations to a SQL database."""

from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, delete, insert, select, update
from sqlalchemy.pool import StaticPool

from choreosync.config.catalog import IN_MEMORY_URIS
from choreosync.domain.model import Entity, Relation, RelationType, parse_entity_ref

from .tables import (
    catalog_entity_table,
    catalog_relation_table,
    create_all_tables,
    entity_annotation_table,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy.engine import Connection, Engine

    from choreosync.domain.model import EntityRef
    from choreosync.domain.ports.catalog import (
        CatalogMutation,
        DeferredEntity,
        DeltaMutation,
        EntityRemoval,
        FullMutation,
    )

log = getLogger(__name__)


def create_catalog_engine(database_uri: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across the process."""

    if database_uri in IN_MEMORY_URIS:
        return create_engine(
            database_uri,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_uri)


class SqlAlchemyCatalogStore:
    """Entity catalog keyed by entity reference and scoped by ``location_key``.

    A full mutation replaces every row owned by its location key. A delta mutation
    upserts and removes single entities. Each mutation runs in one transaction on a
    worker thread; writes are serialized. Custom annotations live in their own
    table and are merged into every entity body as it is written.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._write_lock = threading.Lock()

    @classmethod
    def from_uri(cls, database_uri: str) -> SqlAlchemyCatalogStore:
        store = cls(create_catalog_engine(database_uri))
        store.create_schema()
        return store

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        create_all_tables(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    async def apply_mutation(self, mutation: CatalogMutation) -> None:
        await asyncio.to_thread(self._apply_mutation, mutation)

    def _apply_mutation(self, mutation: CatalogMutation) -> None:
        with self._write_lock, self._engine.begin() as connection:
            if mutation.type == "full":
                self._apply_full(connection, mutation)
            else:
                self._apply_delta(connection, mutation)

    def _apply_full(self, connection: Connection, mutation: FullMutation) -> None:
        owned = select(catalog_entity_table.c.entity_ref).where(
            catalog_entity_table.c.location_key == mutation.location_key
        )
        connection.execute(
            delete(catalog_relation_table).where(catalog_relation_table.c.originating_ref.in_(owned))
        )
        removed = connection.execute(
            delete(catalog_entity_table).where(
                catalog_entity_table.c.location_key == mutation.location_key
            )
        ).rowcount
        self._write_entities(connection, mutation.entities)
        log.info(
            "Replaced %s entities owned by %s with %s entities",
            removed,
            mutation.location_key,
            len(mutation.entities),
        )

    def _apply_delta(self, connection: Connection, mutation: DeltaMutation) -> None:
        self._write_entities(connection, mutation.added)
        for removal in mutation.removed:
            self._remove_entity(connection, removal)
        log.debug(
            "Applied delta mutation: %s added, %s removed",
            len(mutation.added),
            len(mutation.removed),
        )

    def _write_entities(self, connection: Connection, entities: Iterable[DeferredEntity]) -> None:
        now = datetime.now(tz=UTC)
        pending = list(entities)
        custom = _load_annotations(connection, [str(item.entity.ref) for item in pending])
        for deferred in pending:
            ref = str(deferred.entity.ref)
            self._delete_refs(connection, [ref])
            connection.execute(
                insert(catalog_entity_table).values(**_entity_row(deferred, now, custom.get(ref)))
            )
            if deferred.relations:
                connection.execute(
                    insert(catalog_relation_table),
                    [_relation_row(ref, relation) for relation in deferred.relations],
                )

    def _remove_entity(self, connection: Connection, removal: EntityRemoval) -> None:
        ref = str(removal.entity_ref)
        owner = connection.execute(
            select(catalog_entity_table.c.location_key).where(
                catalog_entity_table.c.entity_ref == ref
            )
        ).scalar_one_or_none()
        if owner is None:
            log.debug("Entity %s is not in the catalog, nothing to remove", ref)
            return
        if owner != removal.location_key:
            log.warning("Refusing to remove %s: owned by %s, not %s", ref, owner, removal.location_key)
            return
        self._delete_refs(connection, [ref])

    @staticmethod
    def _delete_refs(connection: Connection, refs: list[str]) -> None:
        connection.execute(
            delete(catalog_relation_table).where(catalog_relation_table.c.originating_ref.in_(refs))
        )
        connection.execute(
            delete(catalog_entity_table).where(catalog_entity_table.c.entity_ref.in_(refs))
        )

    async def get_annotations(self, entity_ref: EntityRef | str) -> dict[str, str]:
        ref = str(entity_ref)

        def read() -> dict[str, str]:
            with self._engine.connect() as connection:
                return _load_annotations(connection, [ref]).get(ref, {})

        return await asyncio.to_thread(read)

    async def set_annotations(
        self, entity_ref: EntityRef | str, annotations: Mapping[str, str | None]
    ) -> None:
        await asyncio.to_thread(self._set_annotations, str(entity_ref), dict(annotations))

    def _set_annotations(self, ref: str, annotations: dict[str, str | None]) -> None:
        now = datetime.now(tz=UTC)
        with self._write_lock, self._engine.begin() as connection:
            keys = list(annotations)
            connection.execute(
                delete(entity_annotation_table).where(
                    entity_annotation_table.c.entity_ref == ref,
                    entity_annotation_table.c.annotation_key.in_(keys),
                )
            )
            rows = [
                {
                    "entity_ref": ref,
                    "annotation_key": key,
                    "annotation_value": value,
                    "updated_at": now,
                }
                for key, value in annotations.items()
                if value is not None
            ]
            if rows:
                connection.execute(insert(entity_annotation_table), rows)
            self._patch_stored_body(connection, ref, annotations)
        log.debug("Updated %s custom annotations on %s", len(annotations), ref)

    async def delete_all_annotations(self, entity_ref: EntityRef | str) -> None:
        await asyncio.to_thread(self._delete_all_annotations, str(entity_ref))

    def _delete_all_annotations(self, ref: str) -> None:
        with self._write_lock, self._engine.begin() as connection:
            keys = connection.execute(
                select(entity_annotation_table.c.annotation_key).where(
                    entity_annotation_table.c.entity_ref == ref
                )
            ).scalars()
            removed: dict[str, str | None] = dict.fromkeys(keys)
            connection.execute(
                delete(entity_annotation_table).where(entity_annotation_table.c.entity_ref == ref)
            )
            self._patch_stored_body(connection, ref, removed)

    @staticmethod
    def _patch_stored_body(
        connection: Connection, ref: str, annotations: Mapping[str, str | None]
    ) -> None:
        """Apply an annotation change to an entity already in the catalog.

        A deleted key is dropped from the body; the writer's own value for it, if
        any, comes back on its next write.
        """

        body = connection.execute(
            select(catalog_entity_table.c.body).where(catalog_entity_table.c.entity_ref == ref)
        ).scalar_one_or_none()
        if body is None:
            return
        patched = dict(body)
        metadata = dict(patched.get("metadata") or {})
        merged = dict(metadata.get("annotations") or {})
        for key, value in annotations.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        metadata["annotations"] = merged
        patched["metadata"] = metadata
        connection.execute(
            update(catalog_entity_table)
            .where(catalog_entity_table.c.entity_ref == ref)
            .values(body=patched)
        )

    def list_entities(self, *, location_key: str | None = None) -> list[Entity]:
        statement = select(catalog_entity_table.c.body).order_by(catalog_entity_table.c.entity_ref)
        if location_key is not None:
            statement = statement.where(catalog_entity_table.c.location_key == location_key)
        with self._engine.connect() as connection:
            return [Entity.from_document(body) for body in connection.execute(statement).scalars()]

    def get_entity(self, ref: EntityRef | str) -> Entity | None:
        statement = select(catalog_entity_table.c.body).where(
            catalog_entity_table.c.entity_ref == str(ref)
        )
        with self._engine.connect() as connection:
            body = connection.execute(statement).scalar_one_or_none()
        return Entity.from_document(body) if body is not None else None

    def list_relations(self) -> list[Relation]:
        statement = select(
            catalog_relation_table.c.source_ref,
            catalog_relation_table.c.type,
            catalog_relation_table.c.target_ref,
        ).order_by(catalog_relation_table.c.id)
        with self._engine.connect() as connection:
            rows = connection.execute(statement).all()
        return [
            Relation(
                source=parse_entity_ref(source),
                type=RelationType(relation_type),
                target=parse_entity_ref(target),
            )
            for source, relation_type, target in rows
        ]


def _load_annotations(connection: Connection, refs: list[str]) -> dict[str, dict[str, str]]:
    if not refs:
        return {}
    rows = connection.execute(
        select(
            entity_annotation_table.c.entity_ref,
            entity_annotation_table.c.annotation_key,
            entity_annotation_table.c.annotation_value,
        ).where(entity_annotation_table.c.entity_ref.in_(refs))
    )
    annotations: dict[str, dict[str, str]] = {}
    for ref, key, value in rows:
        annotations.setdefault(ref, {})[key] = value
    return annotations


def _entity_row(
    deferred: DeferredEntity, now: datetime, custom: Mapping[str, str] | None
) -> dict[str, Any]:
    entity = deferred.entity
    body = entity.to_document()
    if custom:
        body["metadata"]["annotations"].update(custom)
    return {
        "entity_ref": str(entity.ref),
        "kind": entity.kind,
        "namespace": entity.namespace,
        "name": entity.name,
        "location_key": deferred.location_key,
        "body": body,
        "updated_at": now,
    }


def _relation_row(originating_ref: str, relation: Relation) -> dict[str, str]:
    return {
        "originating_ref": originating_ref,
        "source_ref": str(relation.source),
        "type": relation.type.value,
        "target_ref": str(relation.target),
    }
