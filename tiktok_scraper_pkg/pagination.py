"""Cursor pagination over the item list API.

`VideoPaginator` is the only stateful piece of a run:

    AWAITING_FIRST_PAGE -> FETCHING_NEXT_PAGE -> ... -> DONE

The first page comes from the profile navigation; every later page is built
by substituting the latest cursor into the first response's URL. The cap is
checked after a page is appended, so the last page may overshoot
`max_videos`. The loop also ends when a fetch returns the cursor it was
requested with, or a page whose ids were all seen before.
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Set

from .models import ApiPage, DelayRange
from .navigation import random_delay
from .response import dedupe_ids
from .urls import update_cursor_in_url

logger = logging.getLogger(__name__)

FetchPage = Callable[[str], Awaitable[ApiPage]]
Sleep = Callable[[DelayRange], Awaitable[float]]


class PaginationState(str, Enum):
    AWAITING_FIRST_PAGE = "awaiting_first_page"
    FETCHING_NEXT_PAGE = "fetching_next_page"
    DONE = "done"


class VideoPaginator:
    def __init__(
        self,
        max_videos: int,
        delay_range: DelayRange,
        fetch_page: FetchPage,
        sleep: Optional[Sleep] = None,
    ):
        self.max_videos = max_videos
        self.delay_range = delay_range
        self.fetch_page = fetch_page
        self.sleep = sleep or random_delay
        self.state = PaginationState.AWAITING_FIRST_PAGE
        self.template_url: Optional[str] = None
        self.cursor: Optional[str] = None
        self.has_more = False
        self.collected: List[str] = []
        self.iterations = 0
        self.stalled = False
        self._seen: Set[str] = set()

    @property
    def unique_count(self) -> int:
        return len(self._seen)

    def _append(self, page: ApiPage) -> int:
        ids = page.ids
        before = self.unique_count
        self.collected.extend(ids)
        self._seen.update(ids)
        self.cursor = page.cursor
        self.has_more = page.has_more
        self.iterations += 1
        return self.unique_count - before

    def _should_stop(self) -> bool:
        return self.stalled or not self.has_more or self.unique_count >= self.max_videos

    def _advance(self) -> None:
        if self._should_stop():
            self.state = PaginationState.DONE

    def accept_first_page(self, url: str, page: ApiPage) -> None:
        """Record the first API response and leave AWAITING_FIRST_PAGE."""
        if self.state is not PaginationState.AWAITING_FIRST_PAGE:
            raise RuntimeError(f"First page already accepted (state={self.state.value})")
        self.template_url = url
        self._append(page)
        self.state = PaginationState.FETCHING_NEXT_PAGE
        logger.info("Initial batch: %d videos", len(page.items))
        self._advance()

    async def next_page(self) -> None:
        """Wait, fetch the page after the current cursor and append it."""
        if self.state is not PaginationState.FETCHING_NEXT_PAGE:
            raise RuntimeError(f"Cannot fetch in state {self.state.value}")
        logger.info("Cursor: %s, Total videos: %d", self.cursor, self.unique_count)
        await self.sleep(self.delay_range)
        url = update_cursor_in_url(self.template_url, self.cursor)
        requested_cursor = self.cursor
        page = await self.fetch_page(url)
        added = self._append(page)
        # A repeated cursor or a non-empty page with nothing new would repeat forever.
        if page.has_more and (page.cursor == requested_cursor or (page.items and added == 0)):
            logger.warning("Cursor %s did not advance; stopping pagination", requested_cursor)
            self.stalled = True
        self._advance()

    async def run(self, first_url: str, first_page: ApiPage) -> List[str]:
        """Drive the loop to DONE and return the unique identifiers.

        Any error aborts the loop and propagates; ids collected so far are
        discarded.
        """
        self.accept_first_page(first_url, first_page)
        try:
            while self.state is PaginationState.FETCHING_NEXT_PAGE:
                await self.next_page()
        except Exception:
            logger.warning(
                "Pagination aborted after %d pages; discarding %d collected ids",
                self.iterations,
                self.unique_count,
            )
            self.state = PaginationState.DONE
            raise

        unique = dedupe_ids(self.collected)
        logger.info("Scraping completed: %d unique videos in %d pages", len(unique), self.iterations)
        return unique
