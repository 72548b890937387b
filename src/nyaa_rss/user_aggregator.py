"""
Pagination aggregation for one user's uploads.

The user feed reports no page count, so the end of results is discovered:
a 404 from the site means there are no more pages. That mapping is handled
here and nowhere else.
"""

import logging
import math

from nyaa_rss.exceptions import InvalidArgumentError, NotFoundError
from nyaa_rss.fetcher import PageFetcher, require_user
from nyaa_rss.models import SearchOptions, Torrent

logger = logging.getLogger(__name__)


class UserSearchAggregator:
    """Serial pagination over a user's uploads, capped at ``max_pages``."""

    def __init__(self, fetcher: PageFetcher, max_pages: int = 15):
        self._fetcher = fetcher
        self._max_pages = max_pages

    async def _fetch_or_end(
        self,
        user: str,
        term: str,
        page: int,
        options: SearchOptions | None,
    ) -> list[Torrent] | None:
        """Fetch one page; None when the site says there is no such page."""
        try:
            return await self._fetcher.fetch_user_page(user, term, page, options=options)
        except NotFoundError:
            logger.debug(f"User '{user}' page {page} not found, end of results")
            return None

    async def fetch_all_for_user(
        self,
        user: str,
        term: str = "",
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """
        Every upload of ``user`` matching ``term``, up to ``max_pages`` pages.

        Stops at the first page answered with 404 or with no items.
        """
        require_user(user)

        results: list[Torrent] = []
        for page in range(1, self._max_pages + 1):
            torrents = await self._fetch_or_end(user, term, page, options)
            if not torrents:
                break
            results.extend(torrents)

        logger.info(f"User '{user}': {len(results)} torrents")
        return results

    async def fetch_for_user(
        self,
        user: str,
        term: str = "",
        count: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """All of the user's results when ``count`` is falsy, else at most ``count``."""
        require_user(user)
        if not count:
            return await self.fetch_all_for_user(user, term, options)
        if count < 1:
            raise InvalidArgumentError(f"Result count must be positive, got {count!r}")

        page_size = self._fetcher.page_size
        needed_pages = math.ceil(count / page_size)
        results: list[Torrent] = []

        for page in range(1, needed_pages + 1):
            torrents = await self._fetch_or_end(user, term, page, options)
            if torrents is None:
                break
            results.extend(torrents)
            if len(torrents) < page_size:
                break

        return results[:count]
