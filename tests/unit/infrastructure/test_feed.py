"""Tests for the aiohttp + feedparser feed collaborator."""

from datetime import UTC, datetime

import aiohttp
import pytest

from nyaa_rss.exceptions import FeedFetchError, NotFoundError
from nyaa_rss.infrastructure.feed import FeedClient, parse_feed
from nyaa_rss.normalizer import normalize_items

SAMPLE_FEED = """<?xml version="1.0" encoding="utf-8"?>
<rss xmlns:atom="http://www.w3.org/2005/Atom" xmlns:nyaa="https://nyaa.si/xmlns/nyaa" version="2.0">
  <channel>
    <title>Nyaa - "show" - Torrent File RSS</title>
    <description>RSS Feed for "show"</description>
    <link>https://nyaa.si/</link>
    <item>
      <title>[Group] Show - 01 [1080p].mkv</title>
      <link>https://nyaa.si/download/1001.torrent</link>
      <guid isPermaLink="true">https://nyaa.si/view/1001</guid>
      <pubDate>Sat, 17 Oct 2026 12:30:00 -0000</pubDate>
      <nyaa:seeders>120</nyaa:seeders>
      <nyaa:leechers>4</nyaa:leechers>
      <nyaa:downloads>900</nyaa:downloads>
      <nyaa:infoHash>0123456789abcdef0123456789abcdef01234567</nyaa:infoHash>
      <nyaa:categoryId>1_2</nyaa:categoryId>
      <nyaa:category>Anime - English-translated</nyaa:category>
      <nyaa:size>1.4 GiB</nyaa:size>
      <nyaa:comments>0</nyaa:comments>
      <nyaa:trusted>No</nyaa:trusted>
      <nyaa:remake>No</nyaa:remake>
      <description><![CDATA[<a href="https://nyaa.si/view/1001">#1001 | [Group] Show - 01</a> | 1.4 GiB | Anime - English-translated]]></description>
    </item>
    <item>
      <title>[Group] Show - 02 [1080p].mkv</title>
      <link>https://nyaa.si/download/1002.torrent</link>
      <guid isPermaLink="true">https://nyaa.si/view/1002</guid>
      <pubDate>Sun, 18 Oct 2026 08:00:00 -0000</pubDate>
      <nyaa:seeders>80</nyaa:seeders>
      <nyaa:leechers>2</nyaa:leechers>
      <nyaa:downloads>300</nyaa:downloads>
      <nyaa:infoHash>fedcba9876543210fedcba9876543210fedcba98</nyaa:infoHash>
      <nyaa:categoryId>1_2</nyaa:categoryId>
      <nyaa:category>Anime - English-translated</nyaa:category>
      <nyaa:size>1.3 GiB</nyaa:size>
      <description><![CDATA[<a href="https://nyaa.si/view/1002">#1002 | [Group] Show - 02</a> | 1.3 GiB]]></description>
    </item>
  </channel>
</rss>
"""


class FakeResponse:
    def __init__(self, status: int, body: bytes | str = b""):
        self.status = status
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self._response = response
        self._error = error
        self.urls: list[str] = []

    def get(self, url: str):
        self.urls.append(url)
        if self._error is not None:
            raise self._error
        return self._response


def test_parse_feed_maps_namespaced_fields(config):
    payload = parse_feed(SAMPLE_FEED, config)

    assert len(payload.items) == 2
    assert payload.max_page is None

    first = payload.items[0]
    assert first["title"] == "[Group] Show - 01 [1080p].mkv"
    assert first["hash"] == "0123456789abcdef0123456789abcdef01234567"
    assert first["filesize"] == "1.4 GiB"
    assert first["sub_category"] == "1_2"
    assert first["seeders"] == "120"
    assert first["completed"] == "900"
    assert "<a" not in first["content_snippet"]
    assert first["content_snippet"].startswith("#1001 | [Group] Show - 01")


def test_parsed_items_normalize(config):
    torrents = normalize_items(parse_feed(SAMPLE_FEED, config).items)

    assert torrents[0].published_at == datetime(2026, 10, 17, 12, 30, tzinfo=UTC)
    assert torrents[0].seeders == 120
    assert torrents[1].leechers == 2
    assert torrents[1].name == "[Group] Show - 02 [1080p].mkv"


def test_parse_feed_reads_configured_page_count(config):
    body = SAMPLE_FEED.replace("<link>https://nyaa.si/</link>", "<link>https://nyaa.si/</link><nyaa:maxPage>7</nyaa:maxPage>", 1)

    assert parse_feed(body, config).max_page == 7


def test_parse_empty_channel(config):
    body = SAMPLE_FEED.split("<item>")[0] + "</channel></rss>"

    payload = parse_feed(body, config)

    assert payload.items == []


def test_parse_feed_rejects_html_page(config):
    body = (
        "<!DOCTYPE html><html><head><title>Just a moment...</title></head>"
        "<body><p>checking your browser</p></body></html>"
    )

    with pytest.raises(FeedFetchError) as exc_info:
        parse_feed(body, config)

    assert exc_info.value.code == "MALFORMED_FEED"


def test_parse_feed_uses_declared_encoding_of_raw_bytes(config):
    body = (
        SAMPLE_FEED.replace('encoding="utf-8"', 'encoding="iso-8859-1"')
        .replace("Show - 01 [1080p]", "Caf\u00e9 - 01 [1080p]")
        .encode("iso-8859-1")
    )

    payload = parse_feed(body, config)

    assert payload.items[0]["title"] == "[Group] Caf\u00e9 - 01 [1080p].mkv"


@pytest.mark.asyncio
async def test_fetch_feed_success(config):
    session = FakeSession(FakeResponse(200, SAMPLE_FEED))
    client = FeedClient(config, session=session)

    payload = await client.fetch_feed("https://nyaa.si/?page=rss&q=show")

    assert len(payload.items) == 2
    assert session.urls == ["https://nyaa.si/?page=rss&q=show"]


@pytest.mark.asyncio
async def test_fetch_feed_not_found(config):
    client = FeedClient(config, session=FakeSession(FakeResponse(404)))

    with pytest.raises(NotFoundError) as exc_info:
        await client.fetch_feed("https://nyaa.si/?page=rss&u=nobody")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_fetch_feed_http_error_carries_status(config):
    client = FeedClient(config, session=FakeSession(FakeResponse(503)))

    with pytest.raises(FeedFetchError) as exc_info:
        await client.fetch_feed("https://nyaa.si/?page=rss&q=show")

    assert exc_info.value.status_code == 503
    assert not isinstance(exc_info.value, NotFoundError)


@pytest.mark.asyncio
async def test_fetch_feed_network_error(config):
    client = FeedClient(config, session=FakeSession(error=aiohttp.ClientConnectionError("refused")))

    with pytest.raises(FeedFetchError) as exc_info:
        await client.fetch_feed("https://nyaa.si/?page=rss&q=show")

    assert exc_info.value.code == "NETWORK_ERROR"
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_feed_client_owns_session_only_when_opened(config):
    client = FeedClient(config)

    async with client:
        session = client._session
        assert session is not None
        assert not session.closed

    assert session.closed
    assert client._session is None


@pytest.mark.asyncio
async def test_fetch_feed_html_page_is_an_error(config):
    body = b"<!DOCTYPE html><html><body><p>Down for maintenance</p></body></html>"
    client = FeedClient(config, session=FakeSession(FakeResponse(200, body)))

    with pytest.raises(FeedFetchError) as exc_info:
        await client.fetch_feed("https://nyaa.si/?page=rss&q=show")

    assert exc_info.value.code == "MALFORMED_FEED"


@pytest.mark.asyncio
async def test_fetch_feed_undecodable_bytes_stay_in_error_taxonomy(config):
    client = FeedClient(config, session=FakeSession(FakeResponse(200, b"<rss>\xff\xfe</rss>")))

    try:
        payload = await client.fetch_feed("https://nyaa.si/?page=rss&q=show")
    except FeedFetchError as e:
        assert e.code == "MALFORMED_FEED"
    else:
        assert payload.items == []
