"""Convert raw feed items into Torrent records."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from nyaa_rss.models import Torrent

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric counter in feed item: {value!r}")
        return None


def _to_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable date in feed item: {value!r}")
        return None


def normalize_item(raw: Mapping[str, Any]) -> Torrent:
    """
    Map one raw feed item onto a Torrent.

    Missing fields become None; nothing is validated.
    """
    return Torrent(
        name=raw.get("title"),
        hash=raw.get("hash"),
        published_at=_to_datetime(raw.get("iso_date")),
        file_size=raw.get("filesize"),
        description=raw.get("content_snippet"),
        category=raw.get("category"),
        sub_category=raw.get("sub_category"),
        torrent_url=raw.get("link"),
        seeders=_to_int(raw.get("seeders")),
        leechers=_to_int(raw.get("leechers")),
        completed=_to_int(raw.get("completed")),
    )


def normalize_items(items: Iterable[Mapping[str, Any]]) -> list[Torrent]:
    return [normalize_item(item) for item in items]
