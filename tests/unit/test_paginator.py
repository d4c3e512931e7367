"""Unit tests for cursor pagination."""

from unittest.mock import AsyncMock

import pytest

from axm_mcp.client.paginator import Page, PageProgress, paginate


class _Pages:
    """Serve a fixed list of page sizes, chaining them with cursors c1, c2, ..."""

    def __init__(self, *sizes: int) -> None:
        self.sizes = sizes
        self.cursors: list[str | None] = []

    async def __call__(self, cursor: str | None) -> Page[int]:
        self.cursors.append(cursor)
        index = 0 if cursor is None else int(cursor.removeprefix("c"))
        start = sum(self.sizes[:index])
        items = list(range(start, start + self.sizes[index]))
        next_cursor = f"c{index + 1}" if index + 1 < len(self.sizes) else None
        return Page(items=items, next_cursor=next_cursor)


@pytest.mark.asyncio
async def test_collects_every_page_in_order() -> None:
    """Pages of 40, 40 and 20 items yield 100 items in order."""
    fetch = _Pages(40, 40, 20)
    sleep = AsyncMock()

    items = await paginate(fetch, sleep=sleep)

    assert items == list(range(100))
    assert fetch.cursors == [None, "c1", "c2"]
    assert sleep.await_count == 2
    sleep.assert_awaited_with(0.1)


@pytest.mark.asyncio
async def test_total_limit_stops_early() -> None:
    """With a limit of 50 only two pages are fetched and the second is truncated."""
    fetch = _Pages(40, 40, 20)
    sleep = AsyncMock()

    items = await paginate(fetch, total_limit=50, sleep=sleep)

    assert items == list(range(50))
    assert len(fetch.cursors) == 2
    assert sleep.await_count == 1


@pytest.mark.asyncio
async def test_limit_on_page_boundary_fetches_no_extra_page() -> None:
    """Reaching the limit exactly at the end of a page stops without fetching the next one."""
    fetch = _Pages(40, 40, 20)
    items = await paginate(fetch, total_limit=40, sleep=AsyncMock())
    assert len(items) == 40
    assert fetch.cursors == [None]


@pytest.mark.asyncio
async def test_limit_larger_than_data_returns_everything() -> None:
    """A generous limit returns all items."""
    items = await paginate(_Pages(3, 2), total_limit=1000, sleep=AsyncMock())
    assert items == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, -1])
async def test_non_positive_limit_is_rejected(limit: int) -> None:
    """Limits must be positive and are checked before any fetch."""
    fetch = _Pages(10)
    with pytest.raises(ValueError, match="greater than 0"):
        await paginate(fetch, total_limit=limit)
    assert fetch.cursors == []


@pytest.mark.asyncio
async def test_empty_cursor_ends_iteration() -> None:
    """An empty-string cursor is treated as the last page."""
    fetch = AsyncMock(return_value=Page(items=[1, 2], next_cursor=""))
    items = await paginate(fetch, sleep=AsyncMock())
    assert items == [1, 2]
    fetch.assert_awaited_once_with(None)


@pytest.mark.asyncio
async def test_progress_is_reported_per_page() -> None:
    """The callback receives one progress report per page."""
    reports: list[PageProgress] = []

    async def on_page(progress: PageProgress) -> None:
        reports.append(progress)

    await paginate(_Pages(40, 40, 20), total_limit=50, on_page=on_page, sleep=AsyncMock())

    assert [(r.page_number, r.taken, r.received, r.total) for r in reports] == [(1, 40, 40, 40), (2, 10, 40, 50)]
    assert reports[0].next_cursor == "c1"
    assert reports[1].limit_reached is True


def test_progress_description() -> None:
    """Progress lines show counts, the limit and a cursor preview."""
    progress = PageProgress(
        page_number=2,
        taken=10,
        received=40,
        total=50,
        next_cursor="abcdefghijklmnopqrstuvwxyz",
        total_limit=50,
    )
    text = progress.describe()
    assert text.startswith("Page 2: retrieved 10/40 items, total so far: 50 [limit: 50]")
    assert "next cursor: abcdefghijklmnopqrst..." in text

    last = PageProgress(page_number=1, taken=3, received=3, total=3, next_cursor=None, total_limit=None)
    assert last.describe().endswith("no more pages")
    assert last.limit_reached is False
