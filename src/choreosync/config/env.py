"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value.strip()

    if missing:
        raise MissingConfigurationError(missing)

    return values


def optional_env_var(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_bool(name: str, *, default: bool) -> bool:
    value = optional_env_var(name)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}", variable=name)


def env_seconds(name: str, *, default: float) -> float:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        seconds = float(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a number of seconds, got {value!r}", variable=name
        ) from exc
    if seconds <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}", variable=name)
    return seconds


def env_list(name: str, *, default: Sequence[str] = ()) -> tuple[str, ...]:
    """Split a comma or whitespace separated variable, dropping blanks."""

    value = optional_env_var(name)
    if value is None:
        return tuple(default)
    return tuple(item for item in value.replace(",", " ").split() if item)
