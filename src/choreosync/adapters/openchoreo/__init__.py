"""Public interface for the OpenChoreo adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from choreosync.adapters.http_resilience import default_client_factory

from .auth import ClientCredentialsTokenProvider
from .client import OpenChoreoAPIError, OpenChoreoClient
from .current import CurrentResourceSource
from .legacy import LegacyResourceSource

if TYPE_CHECKING:
    from choreosync.config.openchoreo import OpenChoreoConfig
    from choreosync.domain.ports import ResourceSource, ResourceSourceFactory

    from .client import ClientFactory


def build_resource_source_factory(
    config: OpenChoreoConfig,
    *,
    client_factory: ClientFactory = default_client_factory,
) -> ResourceSourceFactory:
    """Pick the API version once; every run gets a fresh source bound to its token."""

    source_type = CurrentResourceSource if config.use_new_api else LegacyResourceSource
    resilience = config.resolved_resilience()

    def factory(token: str | None) -> ResourceSource:
        return source_type(resilience, token=token, client_factory=client_factory)

    return factory


def build_token_provider(
    config: OpenChoreoConfig,
    *,
    client_factory: ClientFactory = default_client_factory,
) -> ClientCredentialsTokenProvider | None:
    if config.auth is None:
        return None
    return ClientCredentialsTokenProvider(config.auth, client_factory=client_factory)


__all__ = [
    "ClientCredentialsTokenProvider",
    "CurrentResourceSource",
    "LegacyResourceSource",
    "OpenChoreoAPIError",
    "OpenChoreoClient",
    "build_resource_source_factory",
    "build_token_provider",
]
