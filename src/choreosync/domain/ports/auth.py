"""Port for obtaining service credentials."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    """Supplies a bearer token for background requests."""

    async def get_token(self) -> str: ...


__all__ = ["TokenProvider"]
