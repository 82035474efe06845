"""Drain paged upstream listings into a single sequence."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import FetchError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Page[T]:
    items: Sequence[T] = field(default_factory=tuple)
    next_cursor: str | None = None


@dataclass(slots=True, frozen=True)
class OffsetPage[T]:
    items: Sequence[T] = field(default_factory=tuple)
    total_count: int | None = None


async def fetch_all_pages[T](
    fetch_page: Callable[[str | None], Awaitable[Page[T]]],
    *,
    description: str = "listing",
) -> list[T]:
    """Follow ``next_cursor`` until a page has no items or no cursor.

    Any failure discards the partial listing and surfaces as :class:`FetchError`.
    """

    items: list[T] = []
    cursor: str | None = None
    pages = 0
    while True:
        try:
            page = await fetch_page(cursor)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(f"Failed to fetch page {pages + 1} of {description}: {exc}") from exc
        pages += 1
        items.extend(page.items)
        if not page.items or not page.next_cursor:
            break
        cursor = page.next_cursor

    log.debug("Fetched %s items in %s pages for %s", len(items), pages, description)
    return items


async def fetch_all_offset_pages[T](
    fetch_page: Callable[[int, int], Awaitable[OffsetPage[T]]],
    *,
    page_size: int = 100,
    description: str = "listing",
) -> list[T]:
    """Request ``(offset, limit)`` windows until the listing is exhausted.

    A listing ends on an empty page or once ``total_count`` items have been
    collected. Servers that cap the window below ``page_size`` are followed
    until the reported total; the short-page check only applies when no total
    is reported.
    """

    items: list[T] = []
    offset = 0
    while True:
        try:
            page = await fetch_page(offset, page_size)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(f"Failed to fetch {description} at offset {offset}: {exc}") from exc
        items.extend(page.items)
        offset += len(page.items)
        if not page.items:
            break
        if page.total_count is not None:
            if offset >= page.total_count:
                break
        elif len(page.items) < page_size:
            break

    log.debug("Fetched %s items for %s", len(items), description)
    return items
