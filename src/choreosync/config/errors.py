"""Errors raised while reading configuration from the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """Raised when an environment variable holds an unusable value."""

    def __init__(self, message: str, *, variable: str | None = None) -> None:
        super().__init__(message)
        self.variable = variable


class MissingConfigurationError(ConfigurationError):
    """Raised when required environment variables are absent or blank."""

    def __init__(self, variables: Iterable[str]) -> None:
        self.variables = tuple(sorted(variables))
        super().__init__(f"Missing configuration for: {', '.join(self.variables)}")
