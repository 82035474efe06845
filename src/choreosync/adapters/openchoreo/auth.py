"""OAuth2 client-credentials token provider for the OpenChoreo API."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from choreosync.adapters.http_resilience import default_client_factory
from choreosync.config.http_resilience import ResilienceConfig
from choreosync.domain.errors import AuthenticationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from choreosync.config.openchoreo import ClientCredentialsConfig

    from .client import ClientFactory

log = getLogger(__name__)

TOKEN_EXPIRY_BUFFER_SECONDS: Final = 60.0
DEFAULT_EXPIRES_IN_SECONDS: Final = 3600


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str | None = None
    expires_in: int = DEFAULT_EXPIRES_IN_SECONDS


@dataclass(slots=True, frozen=True)
class CachedToken:
    access_token: str
    expires_at: float


class ClientCredentialsTokenProvider:
    """Fetches and caches a service token until shortly before it expires.

    Concurrent callers share a single in-flight token request.
    """

    def __init__(
        self,
        config: ClientCredentialsConfig,
        *,
        client_factory: ClientFactory = default_client_factory,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._clock = clock
        self._cached: CachedToken | None = None
        self._lock = asyncio.Lock()
        self._resilience = ResilienceConfig(name="openchoreo-auth", timeout_seconds=15.0)

    def _valid_token(self) -> str | None:
        cached = self._cached
        if cached is None or self._clock() >= cached.expires_at - TOKEN_EXPIRY_BUFFER_SECONDS:
            return None
        return cached.access_token

    async def get_token(self) -> str:
        token = self._valid_token()
        if token is not None:
            return token
        async with self._lock:
            token = self._valid_token()
            if token is not None:
                return token
            cached = await self._fetch_token()
            self._cached = cached
            return cached.access_token

    async def _fetch_token(self) -> CachedToken:
        log.debug("Fetching new client credentials token")
        form = {
            "grant_type": "client_credentials",
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
        }
        if self._config.scopes:
            form["scope"] = " ".join(self._config.scopes)

        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.post(self._config.token_url, data=form)
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Token request failed: {exc}") from exc

        if response.is_error:
            raise AuthenticationError(
                f"Token request failed: {response.status_code} - {response.text}"
            )
        try:
            payload = TokenResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise AuthenticationError(f"Invalid token response: {exc}") from exc

        log.debug("Obtained client credentials token, expires in %ss", payload.expires_in)
        return CachedToken(
            access_token=payload.access_token,
            expires_at=self._clock() + payload.expires_in,
        )
