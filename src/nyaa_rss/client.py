"""
Public client.

NyaaClient owns the configuration, the feed collaborator and the
aggregators. Every operation takes either positional arguments or a single
SearchRequest as its first argument.

Usage:
    async with NyaaClient() as nyaa:
        torrents = await nyaa.search("one piece", 100, SearchOptions(category="1_2"))
"""

from __future__ import annotations

import logging
from typing import Any

from nyaa_rss.aggregator import SearchAggregator
from nyaa_rss.config import NyaaConfig, get_config
from nyaa_rss.fetcher import PageFetcher, require_page, require_term, require_user
from nyaa_rss.infrastructure.feed import FeedClient, FeedSource
from nyaa_rss.infrastructure.retry import RetryPolicy
from nyaa_rss.models import SearchOptions, SearchRequest, Torrent
from nyaa_rss.user_aggregator import UserSearchAggregator

logger = logging.getLogger(__name__)


class NyaaClient:
    """Async client for the nyaa.si RSS search feed."""

    def __init__(
        self,
        config: NyaaConfig | None = None,
        feed: FeedSource | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Args:
            config: Client configuration; loaded from the environment when omitted.
            feed: Feed collaborator; an aiohttp/feedparser FeedClient when omitted.
            retry_policy: Retry policy for fan-out pages; built from config when omitted.
        """
        self.config = config or get_config()
        self._feed_client = FeedClient(self.config) if feed is None else None
        self._feed: FeedSource = feed if feed is not None else self._feed_client

        self.fetcher = PageFetcher(self._feed, self.config)
        self.aggregator = SearchAggregator(
            self.fetcher,
            retry_policy or RetryPolicy.from_config(self.config),
            max_concurrency=self.config.max_concurrency,
            max_pages=self.config.max_pages,
            result_ceiling=self.config.result_ceiling,
        )
        self.user_aggregator = UserSearchAggregator(self.fetcher, max_pages=self.config.max_pages)

    async def __aenter__(self) -> NyaaClient:
        if self._feed_client is not None:
            await self._feed_client.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._feed_client is not None:
            await self._feed_client.close()

    async def search(
        self,
        term: str | SearchRequest,
        count: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """Search by keyword; all results when ``count`` is not given."""
        if isinstance(term, SearchRequest):
            request = term
            term, count, options = request.term, count or request.count, request.options
        require_term(term)
        return await self.aggregator.fetch(term, count, options)

    async def search_all(self, term: str | SearchRequest, options: SearchOptions | None = None) -> list[Torrent]:
        """Every result of a keyword search."""
        if isinstance(term, SearchRequest):
            term, options = term.term, term.options
        require_term(term)
        return await self.aggregator.fetch_all(term, options)

    async def search_page(
        self,
        term: str | SearchRequest,
        page: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """One page of a keyword search."""
        if isinstance(term, SearchRequest):
            request = term
            term, page, options = request.term, page or request.page, request.options
        require_term(term)
        require_page(page)
        response = await self.fetcher.fetch_page(term, page, options)
        return response.torrents

    async def search_by_user(
        self,
        user: str | SearchRequest,
        term: str = "",
        count: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """Search a user's uploads; all of them (up to the page cap) when ``count`` is not given."""
        if isinstance(user, SearchRequest):
            request = user
            user, term, count, options = request.user, term or request.term, count or request.count, request.options
        require_user(user)
        return await self.user_aggregator.fetch_for_user(user, term or "", count, options)

    async def search_all_by_user(
        self,
        user: str | SearchRequest,
        term: str = "",
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        if isinstance(user, SearchRequest):
            request = user
            user, term, options = request.user, term or request.term, request.options
        require_user(user)
        return await self.user_aggregator.fetch_all_for_user(user, term or "", options)

    async def search_by_user_and_page(
        self,
        user: str | SearchRequest,
        term: str = "",
        page: int | None = None,
        count: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """One page of a user's uploads, truncated to ``count`` when given."""
        if isinstance(user, SearchRequest):
            request = user
            user, term = request.user, term or request.term
            page, count, options = page or request.page, count or request.count, request.options
        require_user(user)
        require_page(page)
        return await self.fetcher.fetch_user_page(user, term or "", page, count, options)

    async def list(
        self,
        category: str | SearchRequest | None = None,
        page: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[Torrent]:
        """Newest torrents of a category (default ``1_0``, all anime)."""
        if isinstance(category, SearchRequest):
            request = category
            category, page, options = request.category, page or request.page, request.options
        return await self.fetcher.list_category(category, page, options)
