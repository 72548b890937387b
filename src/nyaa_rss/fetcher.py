"""
Single-page fetching.

PageFetcher turns search arguments into a feed URL, hands it to the feed
collaborator and normalizes the returned items. It never retries: every
collaborator error reaches the caller unchanged.
"""

import logging
from urllib.parse import urlencode

from nyaa_rss.config import NyaaConfig
from nyaa_rss.exceptions import InvalidArgumentError
from nyaa_rss.infrastructure.feed import FeedSource
from nyaa_rss.models import PageResponse, SearchOptions, SearchParams, Torrent
from nyaa_rss.normalizer import normalize_items

logger = logging.getLogger(__name__)


def require_term(term: str | None) -> str:
    if not term:
        raise InvalidArgumentError("No search term was given")
    return term


def require_user(user: str | None) -> str:
    if not user:
        raise InvalidArgumentError("No user was given")
    return user


def require_page(page: int | None) -> int:
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise InvalidArgumentError(f"Page must be a positive integer, got {page!r}")
    return page


class PageFetcher:
    """Fetches and normalizes one page of the RSS feed."""

    def __init__(self, feed: FeedSource, config: NyaaConfig):
        self._feed = feed
        self._config = config

    @property
    def page_size(self) -> int:
        return self._config.page_size

    def build_params(
        self,
        term: str,
        page: int,
        options: SearchOptions | None = None,
        user: str | None = None,
    ) -> SearchParams:
        """Resolve options against the configured defaults.

        User queries carry no sort keys; the site orders them itself.
        """
        options = options or SearchOptions()
        config = self._config
        return SearchParams(
            term=term or "",
            filter=options.filter or config.default_filter,
            category=options.category or config.default_category,
            page=page,
            sort=None if user is not None else options.sort or config.default_sort,
            direction=None if user is not None else options.direction or config.default_direction,
            user=user,
        )

    def build_url(self, params: SearchParams) -> str:
        return self._config.base_url + urlencode(params.to_query())

    async def _fetch(self, params: SearchParams, want_max_page: bool = False) -> PageResponse:
        url = self.build_url(params)
        payload = await self._feed.fetch_feed(url)
        torrents = normalize_items(payload.items)
        logger.debug(f"Page {params.page} of {url}: {len(torrents)} torrents")
        return PageResponse(torrents=torrents, max_page=payload.max_page if want_max_page else None)

    async def fetch_page(
        self,
        term: str,
        page: int,
        options: SearchOptions | None = None,
        want_max_page: bool = False,
    ) -> PageResponse:
        """
        Fetch one page of a keyword search.

        Args:
            term: Search keywords, must be non-empty.
            page: 1-based page number.
            options: Filter, category and sort settings.
            want_max_page: Report the site's page count in ``max_page``.

        Raises:
            InvalidArgumentError: Empty term or invalid page, before any request.
            FeedFetchError: Propagated unchanged from the feed collaborator.
        """
        require_term(term)
        require_page(page)
        return await self._fetch(self.build_params(term, page, options), want_max_page)

    async def fetch_user_page(
        self,
        user: str,
        term: str = "",
        page: int | None = None,
        limit: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """
        Fetch one page of a user's uploads, optionally narrowed by ``term``.

        The page is truncated to ``limit`` after it is fetched; a falsy limit
        keeps the whole page.
        """
        require_user(user)
        require_page(page)
        if limit is not None and limit < 0:
            raise InvalidArgumentError(f"Result limit must not be negative, got {limit!r}")
        response = await self._fetch(self.build_params(term, page, options, user=user))
        return response.torrents[: limit or len(response.torrents)]

    async def list_category(
        self,
        category: str | None = None,
        page: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """List the newest torrents of a category, no keyword."""
        options = options or SearchOptions()
        page = require_page(page or 1)
        options = options.model_copy(update={"category": category or options.category})
        response = await self._fetch(self.build_params("", page, options))
        return response.torrents
