"""SQLAlchemy adapter for the entity catalog."""

from __future__ import annotations

from .store import SqlAlchemyCatalogStore, create_catalog_engine
from .tables import (
    catalog_entity_table,
    catalog_relation_table,
    create_all_tables,
    entity_annotation_table,
    metadata,
)

__all__ = [
    "SqlAlchemyCatalogStore",
    "catalog_entity_table",
    "catalog_relation_table",
    "create_all_tables",
    "create_catalog_engine",
    "entity_annotation_table",
    "metadata",
]
