"""Shared translation context and entity scaffolding."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from choreosync.domain.model import Entity
from choreosync.domain.model import annotations as ann

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from choreosync.domain.model import EntityKind, ResourceRecord


@dataclass(slots=True, frozen=True)
class TranslationContext:
    """Parent names and ownership defaults for one translation call."""

    namespace: str
    location_key: str
    default_owner: str
    project: str | None = None

    def for_project(self, project: str) -> TranslationContext:
        return replace(self, project=project)

    @property
    def domain_ref(self) -> str:
        # Domain entities always live in the catalog's default namespace
        return f"default/{self.namespace}"

    def require_project(self) -> str:
        if self.project is None:
            raise ValueError(f"Translation in namespace {self.namespace} requires a project")
        return self.project


def managed_entity(
    kind: EntityKind,
    resource: ResourceRecord,
    context: TranslationContext,
    *,
    namespace: str | None = None,
    title: str | None = None,
    description: str | None = None,
    tags: Iterable[str] = (),
    annotations: Mapping[str, str | None] | None = None,
    labels: Mapping[str, str] | None = None,
    spec: Mapping[str, Any] | None = None,
) -> Entity:
    """Build an entity carrying the ownership annotations common to every kind.

    Annotation values of ``None`` are dropped, so optional upstream fields can be
    passed straight through.
    """

    merged_annotations: dict[str, str] = {
        ann.MANAGED_BY_LOCATION: context.location_key,
        ann.MANAGED_BY_ORIGIN_LOCATION: context.location_key,
        ann.NAMESPACE: context.namespace,
    }
    for key, value in (annotations or {}).items():
        if value is not None:
            merged_annotations[key] = value

    return Entity(
        kind=kind.value,
        name=resource.name,
        namespace=namespace if namespace is not None else context.namespace,
        title=title if title is not None else (resource.display_name or resource.name),
        description=description,
        tags=[ann.BASE_TAG, *tags],
        annotations=merged_annotations,
        labels={ann.MANAGED_LABEL: "true", **(labels or {})},
        spec={key: value for key, value in (spec or {}).items() if value is not None},
    )


def provenance_annotations(resource: ResourceRecord) -> dict[str, str | None]:
    return {ann.CREATED_AT: resource.created_at, ann.STATUS: resource.status}
