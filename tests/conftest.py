from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from choreosync.adapters.sqlalchemy import SqlAlchemyCatalogStore
from choreosync.domain.sync import OwnershipKey
from choreosync.domain.translation import TranslationContext

if TYPE_CHECKING:
    from collections.abc import Iterator

_OPENCHOREO_ENV = (
    "OPENCHOREO_BASE_URL",
    "OPENCHOREO_DEFAULT_OWNER",
    "OPENCHOREO_SCHEDULE_FREQUENCY",
    "OPENCHOREO_SCHEDULE_TIMEOUT",
    "OPENCHOREO_USE_NEW_API",
    "OPENCHOREO_AUTH_CLIENT_ID",
    "OPENCHOREO_AUTH_CLIENT_SECRET",
    "OPENCHOREO_AUTH_TOKEN_URL",
    "OPENCHOREO_AUTH_SCOPES",
    "OPENCHOREO_SERVICE_PAGE_VARIANTS",
    "CATALOG_DATABASE_URI",
    "CHOREOSYNC_DATA_DIR",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _OPENCHOREO_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ownership() -> OwnershipKey:
    return OwnershipKey()


@pytest.fixture
def context(ownership: OwnershipKey) -> TranslationContext:
    return TranslationContext(
        namespace="acme",
        location_key=ownership.location_key,
        default_owner="group:default/openchoreo-users",
    )


@pytest.fixture
def catalog_store() -> Iterator[SqlAlchemyCatalogStore]:
    store = SqlAlchemyCatalogStore.from_uri("sqlite+pysqlite://")
    try:
        yield store
    finally:
        store.dispose()
