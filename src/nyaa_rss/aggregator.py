"""
Pagination aggregation for keyword searches.

Turns the page-oriented feed into one flat list, either all results
(concurrent fan-out after page 1) or the first ``count`` results (serial).
"""

import asyncio
import logging
import math

from nyaa_rss.exceptions import InvalidArgumentError
from nyaa_rss.fetcher import PageFetcher, require_term
from nyaa_rss.infrastructure.retry import RetryPolicy
from nyaa_rss.models import SearchOptions, Torrent

logger = logging.getLogger(__name__)


class SearchAggregator:
    """
    Keyword search across pages.

    Only the fan-out pages of ``fetch_all`` are retried; page 1 and every
    page of ``fetch_bounded`` fail the whole call on the first error.

    ``fetch_all`` never reads past ``result_ceiling`` results, the most the
    site serves for one unauthenticated query.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        retry_policy: RetryPolicy | None = None,
        max_concurrency: int | None = None,
        max_pages: int = 15,
        result_ceiling: int = 1000,
    ):
        self._fetcher = fetcher
        self._retry = retry_policy or RetryPolicy()
        self._max_concurrency = max_concurrency
        self._max_pages = max_pages
        self._result_ceiling = result_ceiling

    @property
    def ceiling_pages(self) -> int:
        """Pages needed to reach ``result_ceiling``."""
        return math.ceil(self._result_ceiling / self._fetcher.page_size)

    async def fetch(self, term: str, count: int | None = None, options: SearchOptions | None = None) -> list[Torrent]:
        """All results when ``count`` is falsy, else at most ``count``."""
        if not count:
            return await self.fetch_all(term, options)
        return await self.fetch_bounded(term, count, options)

    async def fetch_all(self, term: str, options: SearchOptions | None = None) -> list[Torrent]:
        require_term(term)

        first = await self._fetcher.fetch_page(term, 1, options, want_max_page=True)
        results = list(first.torrents)

        if first.max_page is None:
            logger.debug(f"No page count in feed for '{term}', paging serially")
            results = await self._fetch_until_short_page(term, options, results)
            return results[: self._result_ceiling]

        if first.max_page <= 1:
            return results[: self._result_ceiling]

        last_page = first.max_page
        if last_page > self.ceiling_pages:
            logger.warning(
                f"Feed reports {last_page} pages for '{term}', reading only {self.ceiling_pages} "
                f"({self._result_ceiling} results)"
            )
            last_page = self.ceiling_pages

        for torrents in await self._fan_out(term, range(2, last_page + 1), options):
            results.extend(torrents)

        logger.info(f"Search '{term}': {len(results)} torrents over {last_page} pages")
        return results[: self._result_ceiling]

    async def fetch_bounded(self, term: str, count: int, options: SearchOptions | None = None) -> list[Torrent]:
        require_term(term)
        if count < 1:
            raise InvalidArgumentError(f"Result count must be positive, got {count!r}")

        page_size = self._fetcher.page_size
        needed_pages = math.ceil(count / page_size)
        results: list[Torrent] = []

        for page in range(1, needed_pages + 1):
            torrents = (await self._fetcher.fetch_page(term, page, options)).torrents
            results.extend(torrents)
            if len(torrents) < page_size:
                break

        return results[:count]

    async def _fetch_with_retry(
        self,
        term: str,
        page: int,
        options: SearchOptions | None,
        semaphore: asyncio.Semaphore | None,
    ) -> list[Torrent]:
        async def attempt() -> list[Torrent]:
            return (await self._fetcher.fetch_page(term, page, options)).torrents

        if semaphore is None:
            return await self._retry.call(attempt)
        async with semaphore:
            return await self._retry.call(attempt)

    async def _fan_out(self, term: str, pages: range, options: SearchOptions | None) -> list[list[Torrent]]:
        """Fetch ``pages`` concurrently, results in page order.

        The first page to give up cancels the others and its error is raised
        as is.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._fetch_with_retry(term, page, options, semaphore)) for page in pages]
        except ExceptionGroup as eg:
            raise eg.exceptions[0] from None
        return [task.result() for task in tasks]

    async def _fetch_until_short_page(
        self,
        term: str,
        options: SearchOptions | None,
        results: list[Torrent],
    ) -> list[Torrent]:
        page_size = self._fetcher.page_size
        if len(results) < page_size:
            return results

        for page in range(2, min(self._max_pages, self.ceiling_pages) + 1):
            torrents = (await self._fetcher.fetch_page(term, page, options)).torrents
            results.extend(torrents)
            if len(torrents) < page_size:
                break

        return results
