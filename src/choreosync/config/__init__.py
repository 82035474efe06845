"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogStoreConfig, catalog_data_dir, get_catalog_store_config
from .env import env_bool, env_list, env_seconds, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .openchoreo import (
    DEFAULT_OWNER,
    ClientCredentialsConfig,
    OpenChoreoConfig,
    ScheduleConfig,
    get_auth_config,
    get_openchoreo_config,
)

__all__ = [
    "DEFAULT_OWNER",
    "CatalogStoreConfig",
    "ClientCredentialsConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "OpenChoreoConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ScheduleConfig",
    "catalog_data_dir",
    "configure_logging",
    "env_bool",
    "env_list",
    "env_seconds",
    "get_auth_config",
    "get_catalog_store_config",
    "get_openchoreo_config",
    "optional_env_var",
    "require_env_vars",
]
