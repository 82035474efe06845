"""Catalog writers: the scheduled full sync and the immediate inserter."""

from __future__ import annotations

from .batch import SyncBatch, SyncReport
from .deduplication import PipelineDeduplicator
from .inserter import ImmediateInserter
from .orchestrator import SyncOrchestrator, SyncSettings, qualify_owner
from .ownership import DEFAULT_PROVIDER_NAME, OwnershipKey

__all__ = [
    "DEFAULT_PROVIDER_NAME",
    "ImmediateInserter",
    "OwnershipKey",
    "PipelineDeduplicator",
    "SyncBatch",
    "SyncOrchestrator",
    "SyncReport",
    "SyncSettings",
    "qualify_owner",
]
