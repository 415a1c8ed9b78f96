"""Tests for solar_dashboard.batch_viewer."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from solar_dashboard.batch_viewer import LOAD_ERROR, BatchViewer
from solar_dashboard.config import DashboardConfig
from solar_dashboard.models import Batch, BatchImage, BatchPage


def _batch(n: int) -> Batch:
    return Batch(
        id=str(n),
        name=f"Batch {n}",
        date=f"2023-05-{n:02d}",
        damage_count=n,
        images=[
            BatchImage(id=f"{n}a", url=f"https://example.com/{n}a.jpg", damage_count=1),
            BatchImage(id=f"{n}b", url=f"https://example.com/{n}b.jpg", damage_count=n - 1),
        ],
    )


def _page(total: int, ids: range) -> BatchPage:
    return BatchPage(batches=[_batch(n) for n in ids], total_count=total)


@pytest.fixture()
def viewer(api: AsyncMock) -> BatchViewer:
    return BatchViewer(api, DashboardConfig())


@pytest.mark.asyncio
async def test_load_first_page(viewer: BatchViewer, api: AsyncMock) -> None:
    api.fetch_batches.return_value = _page(12, range(1, 6))

    await viewer.load()

    api.fetch_batches.assert_awaited_once_with(page=1, search="")
    assert viewer.is_loading is False
    assert len(viewer.batches) == 5
    assert viewer.total_count == 12
    assert viewer.page_count == 3
    assert viewer.show_pagination is True


@pytest.mark.asyncio
async def test_load_failure_sets_message(viewer: BatchViewer, api: AsyncMock) -> None:
    api.fetch_batches.side_effect = httpx.ConnectError("refused")

    await viewer.load()

    assert viewer.is_loading is False
    assert viewer.error == LOAD_ERROR
    assert viewer.batches == []


@pytest.mark.asyncio
async def test_pagination_bounds_respect_total(viewer: BatchViewer, api: AsyncMock) -> None:
    """Previous is blocked on page 1 and next is blocked once page*size >= total."""
    api.fetch_batches.return_value = _page(12, range(1, 6))
    await viewer.load()

    assert viewer.has_previous is False
    assert await viewer.previous_page() is False

    api.fetch_batches.return_value = _page(12, range(6, 11))
    assert await viewer.next_page() is True
    assert viewer.page == 2

    api.fetch_batches.return_value = _page(12, range(11, 13))
    assert await viewer.next_page() is True
    assert viewer.page == 3
    assert viewer.has_next is False
    assert await viewer.next_page() is False
    assert viewer.page == 3

    assert api.fetch_batches.await_args_list[-1].kwargs == {"page": 3, "search": ""}


@pytest.mark.asyncio
async def test_exact_multiple_has_no_extra_page(viewer: BatchViewer, api: AsyncMock) -> None:
    api.fetch_batches.return_value = _page(5, range(1, 6))
    await viewer.load()

    assert viewer.page_count == 1
    assert viewer.has_next is False


@pytest.mark.asyncio
async def test_paginate_out_of_range_is_ignored(viewer: BatchViewer, api: AsyncMock) -> None:
    api.fetch_batches.return_value = _page(7, range(1, 6))
    await viewer.load()
    api.fetch_batches.reset_mock()

    assert await viewer.paginate(0) is False
    assert await viewer.paginate(3) is False
    api.fetch_batches.assert_not_awaited()

    assert await viewer.paginate(2) is True
    api.fetch_batches.assert_awaited_once_with(page=2, search="")


@pytest.mark.asyncio
async def test_search_resets_to_first_page(viewer: BatchViewer, api: AsyncMock) -> None:
    viewer.total_count = 12
    viewer.page = 2

    api.fetch_batches.return_value = _page(1, range(3, 4))
    await viewer.search("05-03")

    api.fetch_batches.assert_awaited_with(page=1, search="05-03")
    assert viewer.page == 1
    assert viewer.search_term == "05-03"
    assert [b.id for b in viewer.batches] == ["3"]


@pytest.mark.asyncio
async def test_empty_result_hides_pagination(viewer: BatchViewer, api: AsyncMock) -> None:
    api.fetch_batches.return_value = BatchPage(batches=[], total_count=0)

    await viewer.search("nothing")

    assert viewer.show_pagination is False
    assert viewer.showing_range() == (0, 0, 0)


@pytest.mark.asyncio
async def test_showing_range(viewer: BatchViewer, api: AsyncMock) -> None:
    api.fetch_batches.return_value = _page(12, range(1, 6))
    await viewer.load()
    assert viewer.showing_range() == (1, 5, 12)

    api.fetch_batches.return_value = _page(12, range(11, 13))
    await viewer.paginate(3)
    assert viewer.showing_range() == (11, 12, 12)


def test_select_batch_clears_selected_image(viewer: BatchViewer) -> None:
    first, second = _batch(1), _batch(2)

    viewer.select_batch(first)
    viewer.select_image(first.images[1])
    assert viewer.selected_image is first.images[1]

    viewer.select_batch(second)
    assert viewer.selected_batch is second
    assert viewer.selected_image is None
