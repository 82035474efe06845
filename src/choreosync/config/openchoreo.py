"""OpenChoreo API and sync schedule configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .env import env_bool, env_list, env_seconds, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_OWNER: Final = "openchoreo-users"
DEFAULT_SCHEDULE_FREQUENCY_SECONDS: Final = 30.0
DEFAULT_SCHEDULE_TIMEOUT_SECONDS: Final = 120.0
DEFAULT_SERVICE_COMPONENT_TYPES: Final = ("service", "deployment/service")
OPENCHOREO_TIMEOUT_SECONDS: Final = 30.0


@dataclass(frozen=True, slots=True)
class ScheduleConfig:
    frequency_seconds: float = DEFAULT_SCHEDULE_FREQUENCY_SECONDS
    timeout_seconds: float = DEFAULT_SCHEDULE_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class ClientCredentialsConfig:
    """OAuth2 client-credentials settings for the service token."""

    client_id: str
    client_secret: str
    token_url: str
    scopes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OpenChoreoConfig:
    """Holds OpenChoreo API configuration values."""

    base_url: str
    default_owner: str = DEFAULT_OWNER
    use_new_api: bool = False
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    service_component_types: frozenset[str] = frozenset(DEFAULT_SERVICE_COMPONENT_TYPES)
    auth: ClientCredentialsConfig | None = None
    resilience: ResilienceConfig | None = None

    def resolved_resilience(self) -> ResilienceConfig:
        return self.resilience or ResilienceConfig(
            name="openchoreo",
            base_url=self.base_url,
            timeout_seconds=OPENCHOREO_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
            default_headers={"Accept": "application/json"},
        )


def get_auth_config() -> ClientCredentialsConfig | None:
    """Return client-credentials settings, or ``None`` when auth is not configured.

    Setting only some of the variables is a configuration error.
    """

    names = (
        "OPENCHOREO_AUTH_CLIENT_ID",
        "OPENCHOREO_AUTH_CLIENT_SECRET",
        "OPENCHOREO_AUTH_TOKEN_URL",
    )
    present = [name for name in names if optional_env_var(name) is not None]
    if not present:
        return None
    values = require_env_vars(names)
    return ClientCredentialsConfig(
        client_id=values["OPENCHOREO_AUTH_CLIENT_ID"],
        client_secret=values["OPENCHOREO_AUTH_CLIENT_SECRET"],
        token_url=values["OPENCHOREO_AUTH_TOKEN_URL"],
        scopes=env_list("OPENCHOREO_AUTH_SCOPES"),
    )


def get_openchoreo_config(*, resilience: ResilienceConfig | None = None) -> OpenChoreoConfig:
    values = require_env_vars(("OPENCHOREO_BASE_URL",))
    schedule = ScheduleConfig(
        frequency_seconds=env_seconds(
            "OPENCHOREO_SCHEDULE_FREQUENCY", default=DEFAULT_SCHEDULE_FREQUENCY_SECONDS
        ),
        timeout_seconds=env_seconds(
            "OPENCHOREO_SCHEDULE_TIMEOUT", default=DEFAULT_SCHEDULE_TIMEOUT_SECONDS
        ),
    )
    service_types = env_list(
        "OPENCHOREO_SERVICE_PAGE_VARIANTS", default=DEFAULT_SERVICE_COMPONENT_TYPES
    )
    if not service_types:
        raise ConfigurationError(
            "OPENCHOREO_SERVICE_PAGE_VARIANTS must not be empty",
            variable="OPENCHOREO_SERVICE_PAGE_VARIANTS",
        )
    return OpenChoreoConfig(
        base_url=values["OPENCHOREO_BASE_URL"].rstrip("/"),
        default_owner=optional_env_var("OPENCHOREO_DEFAULT_OWNER") or DEFAULT_OWNER,
        use_new_api=env_bool("OPENCHOREO_USE_NEW_API", default=False),
        schedule=schedule,
        service_component_types=frozenset(service_types),
        auth=get_auth_config(),
        resilience=resilience,
    )
