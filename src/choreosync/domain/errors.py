"""Error taxonomy for the synchronization engine."""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for recoverable synchronization failures."""


class FetchError(SyncError):
    """Raised when a listing or detail fetch against the upstream API fails."""


class EntityValidationError(SyncError):
    """Raised when an entity is still missing a required field after pre-processing."""

    def __init__(self, message: str, *, entity_ref: str) -> None:
        super().__init__(f"{entity_ref}: {message}")
        self.entity_ref = entity_ref


class TranslationError(SyncError):
    """Raised when a single upstream resource cannot be converted into an entity."""


class AuthenticationError(RuntimeError):
    """Raised when a service token cannot be obtained."""


class NotConnectedError(RuntimeError):
    """Raised when a catalog writer is used before its connection is established."""
