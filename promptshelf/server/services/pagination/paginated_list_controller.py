"""
Incremental loading of the prompt listing.

The controller owns the display list of one listing view. A sentinel after the
last rendered item reports that the end of the list is near (notify_near_end);
the controller then fetches the next page unless a fetch is already in flight
or the data is known to be exhausted.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from promptshelf_commons.api_schema.prompt_schema import Prompt

logger = logging.getLogger(__name__)

# (offset, limit, category) -> page of prompts, empty when nothing is left
PageFetcher = Callable[[int, int, Optional[str]], Awaitable[list[Prompt]]]


class LoadResult(str, enum.Enum):
    LOADED = "loaded"  # a non-empty page was appended
    EXHAUSTED = "exhausted"  # an empty page came back, has_more is now False
    SKIPPED = "skipped"  # a fetch is in flight or nothing is left to fetch
    FAILED = "failed"  # the fetch raised, see controller.error


@dataclass
class PaginationCursor:
    offset: int = 0
    limit: int = 12
    category: Optional[str] = None
    has_more: bool = True


class PaginatedListController:
    """Client-side pagination state for one listing view.

    Only one fetch runs at a time: load_more is a no-op while `loading` is
    set. A failed fetch leaves items and cursor untouched and records the
    exception in `error`; calling load_more again repeats the same request.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        limit: int = 12,
        category: Optional[str] = None,
    ):
        if limit <= 0:
            raise ValueError("limit must be positive")
        self._fetch_page = fetch_page
        self.items: list[Prompt] = []
        self.cursor = PaginationCursor(limit=limit, category=category)
        self.loading = False
        self.error: Optional[Exception] = None
        self.fetch_count = 0
        self._generation = 0

    @property
    def category(self) -> Optional[str]:
        return self.cursor.category

    @property
    def has_more(self) -> bool:
        return self.cursor.has_more

    def initialize(self, server_page: list[Prompt]) -> None:
        """Seed the list with the page rendered by the server.

        Args:
            server_page (list[Prompt]): First page fetched during the initial render
        """
        self.items = list(server_page)
        self.cursor.offset = len(server_page)
        self.cursor.has_more = True
        self.error = None

    async def load_more(self) -> LoadResult:
        """Fetch and append the next page.

        Returns:
            LoadResult: What happened; fetch errors are reported, never raised
        """
        if self.loading or not self.cursor.has_more:
            return LoadResult.SKIPPED

        self.loading = True
        generation = self._generation
        offset = self.cursor.offset
        category = self.cursor.category
        self.fetch_count += 1
        try:
            page = await self._fetch_page(offset, self.cursor.limit, category)
        except Exception as e:
            if generation != self._generation:
                logger.info("Ignoring failed page request of a previous view")
                return LoadResult.SKIPPED
            self.loading = False
            logger.error(
                "Failed to load prompts at offset %d (category=%s): %s",
                offset,
                category,
                e,
            )
            self.error = e
            return LoadResult.FAILED

        if generation != self._generation:
            # the view was reset while this page was in flight
            logger.info("Discarding stale page for offset %d", offset)
            return LoadResult.SKIPPED

        self.loading = False
        self.error = None
        if not page:
            self.cursor.has_more = False
            return LoadResult.EXHAUSTED

        self.items.extend(page)
        # a short page does not end pagination, only an empty one does
        self.cursor.offset += len(page)
        return LoadResult.LOADED

    async def set_category(self, category: Optional[str]) -> LoadResult:
        """Switch the category filter and load its first page.

        Items loaded under the previous filter are dropped from the view.

        Args:
            category (Optional[str]): New filter, None or empty for all categories

        Returns:
            LoadResult: Outcome of the first fetch under the new filter
        """
        self.items = []
        self.cursor.category = category or None
        self.cursor.offset = 0
        self.cursor.has_more = True
        self.error = None
        # a fetch still in flight belongs to the old filter
        self._generation += 1
        self.loading = False
        return await self.load_more()

    async def notify_near_end(self) -> LoadResult:
        """Sentinel signal: the end of the rendered list entered the viewport."""
        if self.loading or not self.cursor.has_more:
            return LoadResult.SKIPPED
        return await self.load_more()
