"""HTTP plumbing shared by both OpenChoreo API versions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Self

import httpx
from pydantic import BaseModel, ValidationError

from choreosync.adapters.http_resilience import default_client_factory
from choreosync.domain.errors import FetchError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from choreosync.adapters.http_resilience import ResilientClient
    from choreosync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


class OpenChoreoAPIError(RuntimeError):
    """Raised when the OpenChoreo API answers with an HTTP or application-level error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OpenChoreoClient:
    """Async context manager owning one :class:`ResilientClient` for a sync run.

    ``token`` is sent as a bearer credential on every request when present.
    """

    def __init__(
        self,
        resilience: ResilienceConfig,
        *,
        token: str | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        self._resilience = resilience
        self._token = token
        self._client_factory = client_factory
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> Self:
        self._client = self._client_factory(self._resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        if self._client is None:
            raise RuntimeError("OpenChoreo client used outside of its context")
        try:
            response = await self._client.get(
                path,
                params=httpx.QueryParams(params) if params else None,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise OpenChoreoAPIError(f"Request to {path} failed: {exc}") from exc

        if response.is_error:
            log.debug("OpenChoreo returned %s for %s: %s", response.status_code, path, response.text)
            raise OpenChoreoAPIError(
                f"OpenChoreo returned {response.status_code} for {path}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise OpenChoreoAPIError(f"Invalid JSON payload from {path}") from exc

    async def fetch[M: BaseModel](
        self,
        path: str,
        model: type[M],
        *,
        params: Mapping[str, Any] | None = None,
    ) -> M:
        """GET ``path`` and validate the payload, surfacing every failure as :class:`FetchError`."""

        try:
            payload = await self.get_json(path, params=params)
            return model.model_validate(payload)
        except OpenChoreoAPIError as exc:
            raise FetchError(str(exc)) from exc
        except ValidationError as exc:
            raise FetchError(f"Unexpected payload from {path}: {exc}") from exc

    async def fetch_optional[M: BaseModel](
        self,
        path: str,
        model: type[M],
        *,
        params: Mapping[str, Any] | None = None,
    ) -> M | None:
        """Like :meth:`fetch`, but a 404 yields ``None``."""

        try:
            return await self.fetch(path, model, params=params)
        except FetchError as exc:
            cause = exc.__cause__
            if isinstance(cause, OpenChoreoAPIError) and cause.status_code == 404:
                return None
            raise
