"""Where the entity catalog lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .env import optional_env_var
from .errors import ConfigurationError

CATALOG_URI_VARIABLE: Final[str] = "CATALOG_DATABASE_URI"
DATA_DIR_VARIABLE: Final[str] = "CHOREOSYNC_DATA_DIR"
CATALOG_DB_FILENAME: Final[str] = "catalog.db"

IN_MEMORY_URIS: Final[frozenset[str]] = frozenset(
    {"sqlite://", "sqlite+pysqlite://", "sqlite:///:memory:"}
)


@dataclass(frozen=True, slots=True)
class CatalogStoreConfig:
    """Database URI of the catalog store and whether it outlives the process."""

    uri: str

    @property
    def backend(self) -> str:
        return make_url(self.uri).get_backend_name()

    @property
    def in_memory(self) -> bool:
        return self.uri in IN_MEMORY_URIS


def catalog_data_dir() -> Path:
    """``CHOREOSYNC_DATA_DIR`` or the XDG data home entry for choreosync."""

    configured = optional_env_var(DATA_DIR_VARIABLE)
    if configured:
        return Path(configured).expanduser().resolve()
    xdg_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return (base / "choreosync").expanduser().resolve()


def get_catalog_store_config() -> CatalogStoreConfig:
    uri = optional_env_var(CATALOG_URI_VARIABLE)
    if uri is None:
        data_dir = catalog_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return CatalogStoreConfig(uri=f"sqlite+pysqlite:///{data_dir / CATALOG_DB_FILENAME}")
    try:
        make_url(uri)
    except ArgumentError as exc:
        raise ConfigurationError(
            f"{CATALOG_URI_VARIABLE} is not a database URL: {uri!r}",
            variable=CATALOG_URI_VARIABLE,
        ) from exc
    return CatalogStoreConfig(uri=uri)
