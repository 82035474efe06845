"""SQLAlchemy Core tables backing the entity catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

catalog_entity_table = Table(
    "catalog_entity",
    metadata,
    Column("entity_ref", String, primary_key=True),
    Column("kind", String, nullable=False),
    Column("namespace", String, nullable=False),
    Column("name", String, nullable=False),
    Column("location_key", String, nullable=False, index=True),
    Column("body", JSON, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

entity_annotation_table = Table(
    "entity_custom_annotation",
    metadata,
    Column("entity_ref", String, primary_key=True),
    Column("annotation_key", String, primary_key=True),
    Column("annotation_value", Text, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

catalog_relation_table = Table(
    "catalog_relation",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "originating_ref",
        String,
        ForeignKey("catalog_entity.entity_ref", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("source_ref", String, nullable=False),
    Column("type", String, nullable=False),
    Column("target_ref", String, nullable=False),
    Index("ix_catalog_relation_source_type", "source_ref", "type"),
)


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine, checkfirst=True)
