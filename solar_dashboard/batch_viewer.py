"""ML output viewer: paged, searchable list of damage-detection batches."""

from __future__ import annotations

import logging
import math

import httpx
from pydantic import ValidationError

from .communication import RestClient
from .config import DashboardConfig
from .models import Batch, BatchImage

log = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load data. Please try again later."
EMPTY_MESSAGE = "No batches found."


class BatchViewer:
    """State holder for the batch list, its pagination and the detail view."""

    def __init__(self, client: RestClient, config: DashboardConfig) -> None:
        self._client = client
        self.per_page: int = config.batches_per_page
        self.batches: list[Batch] = []
        self.total_count: int = 0
        self.page: int = 1
        self.search_term: str = ""
        self.selected_batch: Batch | None = None
        self.selected_image: BatchImage | None = None
        self.is_loading: bool = True
        self.error: str | None = None

    # -- pagination ----------------------------------------------------------

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total_count / self.per_page))

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page * self.per_page < self.total_count

    @property
    def show_pagination(self) -> bool:
        return bool(self.batches)

    def showing_range(self) -> tuple[int, int, int]:
        """Return ``(first, last, total)`` for the "Showing x to y of z" line."""
        first = min((self.page - 1) * self.per_page + 1, self.total_count)
        last = min(self.page * self.per_page, self.total_count)
        return first, last, self.total_count

    # -- operations ----------------------------------------------------------

    async def load(self) -> None:
        """Fetch the current page for the current search term."""
        self.is_loading = True
        self.error = None
        try:
            result = await self._client.fetch_batches(
                page=self.page, search=self.search_term,
            )
        except (httpx.HTTPError, ValidationError):
            log.exception("Error fetching batches")
            self.error = LOAD_ERROR
        else:
            self.batches = result.batches
            self.total_count = result.total_count
            log.debug(
                "Loaded %d batches (page %d, total %d)",
                len(self.batches), self.page, self.total_count,
            )
        finally:
            self.is_loading = False

    async def search(self, term: str) -> None:
        """Filter batches by *term*, starting again from page 1."""
        self.search_term = term
        self.page = 1
        await self.load()

    async def paginate(self, page: int) -> bool:
        """Jump to *page* if it lies within the known page range.

        Returns whether a fetch was issued.
        """
        if page < 1 or page > self.page_count:
            log.debug("Ignoring out-of-range page %d (1..%d)", page, self.page_count)
            return False
        self.page = page
        await self.load()
        return True

    async def next_page(self) -> bool:
        if not self.has_next:
            return False
        return await self.paginate(self.page + 1)

    async def previous_page(self) -> bool:
        if not self.has_previous:
            return False
        return await self.paginate(self.page - 1)

    # -- detail view ---------------------------------------------------------

    def select_batch(self, batch: Batch | None) -> None:
        self.selected_batch = batch
        self.selected_image = None

    def select_image(self, image: BatchImage | None) -> None:
        self.selected_image = image
