"""Ownership key shared by the catalog writers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_PROVIDER_NAME: Final = "OpenChoreoEntityProvider"


@dataclass(slots=True, frozen=True)
class OwnershipKey:
    """Identifies the writer that owns a set of catalog entities.

    The full-sync orchestrator and the immediate inserter must be built with the
    same instance so that a full replace absorbs entities inserted between runs.
    """

    provider_name: str = DEFAULT_PROVIDER_NAME

    @property
    def location_key(self) -> str:
        return f"provider:{self.provider_name}"

    def __str__(self) -> str:
        return self.location_key
