"""Immutable accumulators for one sync run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from choreosync.domain.ports.catalog import DeferredEntity


@dataclass(slots=True, frozen=True)
class SyncBatch:
    """Entities produced by one sync step. Steps return batches; callers add them."""

    entities: tuple[DeferredEntity, ...] = ()
    skipped: int = 0

    def __add__(self, other: SyncBatch) -> SyncBatch:
        return SyncBatch(
            entities=self.entities + other.entities,
            skipped=self.skipped + other.skipped,
        )

    def __len__(self) -> int:
        return len(self.entities)

    @classmethod
    def combine(cls, batches: Iterable[SyncBatch]) -> SyncBatch:
        combined = cls()
        for batch in batches:
            combined += batch
        return combined

    def kind_counts(self) -> Counter[str]:
        return Counter(item.entity.kind for item in self.entities)

    @property
    def relation_count(self) -> int:
        return sum(len(item.relations) for item in self.entities)


@dataclass(slots=True, frozen=True)
class SyncReport:
    """Outcome of one orchestrator run."""

    applied: bool
    entity_count: int = 0
    relation_count: int = 0
    skipped: int = 0
    kind_counts: Mapping[str, int] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def from_batch(cls, batch: SyncBatch) -> SyncReport:
        return cls(
            applied=True,
            entity_count=len(batch),
            relation_count=batch.relation_count,
            skipped=batch.skipped,
            kind_counts=dict(batch.kind_counts()),
        )

    @classmethod
    def failed(cls, error: BaseException) -> SyncReport:
        return cls(applied=False, error=str(error) or type(error).__name__)
