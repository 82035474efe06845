"""Merge repeated discoveries of shared deployment pipelines."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from choreosync.domain.model import Entity

log = getLogger(__name__)

type PipelineKey = tuple[str, str]


class PipelineDeduplicator:
    """Keeps one pipeline entity per ``(namespace, name)``.

    The first discovery wins; later discoveries only append their project to
    ``spec.projectRefs`` (first-seen order, no duplicates).
    """

    def __init__(self) -> None:
        self._pipelines: dict[PipelineKey, Entity] = {}

    def __len__(self) -> int:
        return len(self._pipelines)

    def __contains__(self, key: object) -> bool:
        return key in self._pipelines

    def add(self, pipeline: Entity, project: str | None) -> Entity:
        """Register a discovery of ``pipeline`` by ``project`` and return the kept entity."""

        key = (pipeline.namespace, pipeline.name)
        existing = self._pipelines.get(key)
        if existing is None:
            pipeline.spec["projectRefs"] = [project] if project else []
            self._pipelines[key] = pipeline
            return pipeline

        refs: list[str] = existing.spec.setdefault("projectRefs", [])
        if project and project not in refs:
            refs.append(project)
            log.debug(
                "Pipeline %s/%s is shared by projects: %s",
                pipeline.namespace,
                pipeline.name,
                ", ".join(refs),
            )
        return existing

    def entities(self) -> list[Entity]:
        return list(self._pipelines.values())
