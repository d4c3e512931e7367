"""Cursor pagination over multi-page listing endpoints.

``paginate`` keeps requesting pages with the opaque cursor returned by the
previous page until the server stops returning one, optionally stopping early
once a total item limit has been reached. Progress is reported to the module
logger and to an optional callback; neither influences iteration.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger("axm_mcp.client.paginator")

# Pause between consecutive page requests to avoid bursty load
DEFAULT_PAGE_DELAY_SECONDS = 0.1

# Number of cursor characters shown in progress messages
CURSOR_PREVIEW_LENGTH = 20


@dataclass(frozen=True)
class Page[T]:
    """One decoded page: its items and the cursor of the next page, if any."""

    items: list[T]
    next_cursor: str | None = None


@dataclass(frozen=True, slots=True)
class PageProgress:
    """Progress report emitted after each page.

    Attributes:
        page_number: 1-based index of the page just processed.
        taken: Items kept from this page after applying the limit.
        received: Items the server returned on this page.
        total: Items accumulated so far.
        next_cursor: Cursor of the next page, or None if this was the last.
        total_limit: The requested total limit, if any.

    """

    page_number: int
    taken: int
    received: int
    total: int
    next_cursor: str | None
    total_limit: int | None

    @property
    def limit_reached(self) -> bool:
        """Return True once the total limit has been met."""
        return self.total_limit is not None and self.total >= self.total_limit

    def describe(self) -> str:
        """Return a one-line human-readable summary."""
        limit_info = f" [limit: {self.total_limit}]" if self.total_limit is not None else ""
        if self.next_cursor:
            cursor_info = f"next cursor: {self.next_cursor[:CURSOR_PREVIEW_LENGTH]}..."
        else:
            cursor_info = "no more pages"
        return (
            f"Page {self.page_number}: retrieved {self.taken}/{self.received} items, "
            f"total so far: {self.total}{limit_info}; {cursor_info}"
        )


type PageFetcher[T] = Callable[[str | None], Awaitable[Page[T]]]
type ProgressCallback = Callable[[PageProgress], Awaitable[None]]


async def paginate[T](
    fetch_page: PageFetcher[T],
    *,
    total_limit: int | None = None,
    page_delay: float = DEFAULT_PAGE_DELAY_SECONDS,
    on_page: ProgressCallback | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> list[T]:
    """Fetch every page and return the accumulated items in order.

    Args:
        fetch_page: Coroutine function fetching the page for a cursor (None for the first page).
        total_limit: Maximum number of items to return; iteration stops once reached.
        page_delay: Seconds to wait before requesting each subsequent page.
        on_page: Optional async callback receiving a ``PageProgress`` per page.
        sleep: Awaitable used for the inter-page delay.

    Returns:
        The accumulated items, never more than ``total_limit``.

    Raises:
        ValueError: If ``total_limit`` is not positive.

    """
    if total_limit is not None and total_limit <= 0:
        msg = "total_limit must be greater than 0"
        raise ValueError(msg)

    items: list[T] = []
    cursor: str | None = None
    page_number = 0

    while True:
        page = await fetch_page(cursor)
        page_number += 1

        received = len(page.items)
        if total_limit is not None:
            page_items = page.items[: max(total_limit - len(items), 0)]
        else:
            page_items = page.items
        items.extend(page_items)
        cursor = page.next_cursor or None

        progress = PageProgress(
            page_number=page_number,
            taken=len(page_items),
            received=received,
            total=len(items),
            next_cursor=cursor,
            total_limit=total_limit,
        )
        logger.info(progress.describe())
        if on_page is not None:
            await on_page(progress)

        if progress.limit_reached:
            logger.info("Reached total limit of %d items.", total_limit)
            break
        if cursor is None:
            break
        await sleep(page_delay)

    limit_status = f" (limited to {total_limit})" if total_limit is not None else ""
    logger.info("Pagination complete: %d items across %d page(s)%s.", len(items), page_number, limit_status)
    return items


__all__ = ["DEFAULT_PAGE_DELAY_SECONDS", "Page", "PageProgress", "paginate"]
