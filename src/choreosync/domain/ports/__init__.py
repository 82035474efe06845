"""Domain ports consumed by the synchronization engine."""

from __future__ import annotations

from .auth import TokenProvider
from .catalog import (
    AnnotationStore,
    CatalogConnection,
    CatalogMutation,
    DeferredEntity,
    DeltaMutation,
    EntityRemoval,
    FullMutation,
)
from .fetching import ResourceSource, ResourceSourceFactory

__all__ = [
    "AnnotationStore",
    "CatalogConnection",
    "CatalogMutation",
    "DeferredEntity",
    "DeltaMutation",
    "EntityRemoval",
    "FullMutation",
    "ResourceSource",
    "ResourceSourceFactory",
    "TokenProvider",
]
