"""
Feed collaborator.

Downloads an RSS document with aiohttp, parses it with feedparser and exposes
its items as plain dicts keyed by the raw field names the normalizer expects.
"""

import asyncio
import html
import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

import aiohttp
import feedparser

from nyaa_rss.config import NyaaConfig
from nyaa_rss.exceptions import FeedFetchError, NotFoundError
from nyaa_rss.infrastructure.http_client import aiohttp_session_manager, create_session

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class FeedPayload:
    """Parsed feed: raw items in feed order and the channel's page count, if any."""

    items: list[dict[str, Any]] = field(default_factory=list)
    max_page: int | None = None


class FeedSource(Protocol):
    """Anything that can turn a feed URL into a FeedPayload."""

    async def fetch_feed(self, url: str) -> FeedPayload: ...


def _content_snippet(entry: Any) -> str | None:
    summary = entry.get("summary")
    if summary is None:
        return None
    return html.unescape(_TAG_RE.sub("", summary)).strip()


def _iso_date(entry: Any) -> str | None:
    parsed = entry.get("published_parsed")
    if parsed is not None:
        return datetime(*parsed[:6], tzinfo=UTC).isoformat()
    return entry.get("published")


def _parse_int(value: Any) -> int | None:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def parse_feed(body: bytes | str, config: NyaaConfig) -> FeedPayload:
    """Parse an RSS document into a FeedPayload.

    Raw bytes are preferred so that feedparser can detect the encoding itself.
    Anything that is not recognisably a feed, such as an HTML challenge page
    served with status 200, raises FeedFetchError instead of reading as an
    empty page.
    """
    parsed = feedparser.parse(body)

    if not parsed.get("version"):
        raise FeedFetchError("Response is not an RSS or Atom feed", code="MALFORMED_FEED")
    if parsed.bozo and not parsed.entries:
        raise FeedFetchError(f"Malformed feed: {parsed.get('bozo_exception')}", code="MALFORMED_FEED")

    items = []
    for entry in parsed.entries:
        item: dict[str, Any] = {
            "title": entry.get("title"),
            "link": entry.get("link"),
            "iso_date": _iso_date(entry),
            "content_snippet": _content_snippet(entry),
        }
        for source_key, raw_key in config.field_map.items():
            item[raw_key] = entry.get(source_key)
        items.append(item)

    return FeedPayload(items=items, max_page=_parse_int(parsed.feed.get(config.max_page_field)))


class FeedClient:
    """
    aiohttp + feedparser implementation of FeedSource.

    Uses the session passed in, the one opened by ``open()``, or a
    short-lived one per request.
    """

    def __init__(self, config: NyaaConfig, session: aiohttp.ClientSession | None = None):
        self._config = config
        self._session = session
        self._owns_session = False

    async def open(self) -> None:
        if self._session is None:
            self._session = create_session(self._config)
            self._owns_session = True

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def __aenter__(self) -> "FeedClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def fetch_feed(self, url: str) -> FeedPayload:
        if self._session is not None:
            return await self._fetch(self._session, url)

        async with aiohttp_session_manager(self._config) as session:
            return await self._fetch(session, url)

    async def _fetch(self, session: aiohttp.ClientSession, url: str) -> FeedPayload:
        logger.debug(f"GET {url}")
        try:
            async with session.get(url) as response:
                if response.status == 404:
                    raise NotFoundError(f"Feed not found: {url}")
                if not 200 <= response.status < 300:
                    raise FeedFetchError(
                        f"Unexpected HTTP status {response.status} for {url}",
                        code="HTTP_ERROR",
                        status_code=response.status,
                    )
                body = await response.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            raise FeedFetchError(f"Request failed for {url}: {e}", code="NETWORK_ERROR") from e

        # feedparser is sync
        return await asyncio.to_thread(parse_feed, body, self._config)
