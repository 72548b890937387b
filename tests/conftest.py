"""Shared fixtures for nyaa_rss tests."""

import asyncio
from urllib.parse import parse_qs, urlsplit

import pytest

from nyaa_rss.config import NyaaConfig
from nyaa_rss.fetcher import PageFetcher
from nyaa_rss.infrastructure.feed import FeedPayload


def make_item(page: int, index: int) -> dict:
    """Raw feed item as produced by the feed collaborator."""
    return {
        "title": f"[Group] Show - {page:02d}x{index:02d} [1080p].mkv",
        "hash": f"{page:04x}{index:04x}",
        "iso_date": "2026-10-17T12:30:00+00:00",
        "filesize": "1.4 GiB",
        "content_snippet": f"#{page}{index} | Show",
        "category": "Anime - English-translated",
        "sub_category": "1_2",
        "link": f"https://nyaa.si/download/{page}{index}.torrent",
        "seeders": "120",
        "leechers": "4",
        "completed": "900",
    }


def make_page(page: int, size: int = 75) -> list[dict]:
    return [make_item(page, i) for i in range(size)]


class FakeFeed:
    """
    In-memory feed collaborator.

    ``pages`` maps page number to raw items; pages not listed are empty.
    ``failures`` maps page number to exceptions raised, one per request,
    before the page is served. ``delays`` makes a page answer later.
    """

    def __init__(
        self,
        pages: dict[int, list[dict]] | None = None,
        max_page: int | None = None,
        failures: dict[int, list[Exception]] | None = None,
        delays: dict[int, float] | None = None,
    ):
        self.pages = pages or {}
        self.max_page = max_page
        self.failures = {page: list(errors) for page, errors in (failures or {}).items()}
        self.delays = delays or {}
        self.urls: list[str] = []

    @staticmethod
    def query_of(url: str) -> dict[str, str]:
        return {key: values[0] for key, values in parse_qs(urlsplit(url).query, keep_blank_values=True).items()}

    @property
    def requested_pages(self) -> list[int]:
        return [int(self.query_of(url)["p"]) for url in self.urls]

    async def fetch_feed(self, url: str) -> FeedPayload:
        self.urls.append(url)
        page = int(self.query_of(url)["p"])

        if self.delays.get(page):
            await asyncio.sleep(self.delays[page])

        pending = self.failures.get(page)
        if pending:
            raise pending.pop(0)

        return FeedPayload(items=list(self.pages.get(page, [])), max_page=self.max_page)


@pytest.fixture
def config():
    return NyaaConfig(_env_file=None)


@pytest.fixture
def fake_feed_factory(config):
    """Build a FakeFeed and a PageFetcher on top of it."""

    def _create(**kwargs) -> tuple[FakeFeed, PageFetcher]:
        feed = FakeFeed(**kwargs)
        return feed, PageFetcher(feed, config)

    return _create


@pytest.fixture
def recorded_sleeps():
    """Sleep replacement for RetryPolicy that records delays instead of waiting."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def page_of():
    """``page_of(page, size=75)`` builds one page of raw items."""
    return make_page
