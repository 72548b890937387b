"""
Data models for nyaa-rss.

Contains the search parameter records, the normalized Torrent record and the
per-page response.
"""

from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Filter(IntEnum):
    """Site-side result filter (``f`` query key)."""

    NO_FILTER = 0
    NO_REMAKES = 1
    TRUSTED_ONLY = 2


class SearchOptions(BaseModel):
    """Optional search settings; unset or falsy values use the configured defaults."""

    model_config = ConfigDict(frozen=True)

    filter: Filter | None = None
    category: str | None = None
    sort: str | None = None
    direction: str | None = None


class SearchRequest(SearchOptions):
    """Single-record argument form accepted by every public operation."""

    term: str = ""
    user: str | None = None
    page: int | None = None
    count: int | None = None

    @property
    def options(self) -> SearchOptions:
        return SearchOptions(
            filter=self.filter,
            category=self.category,
            sort=self.sort,
            direction=self.direction,
        )


class SearchParams(BaseModel):
    """Fully resolved query for one page request."""

    model_config = ConfigDict(frozen=True)

    term: str = ""
    filter: Filter = Filter.NO_FILTER
    category: str = "1_0"
    page: int = Field(default=1, ge=1)
    sort: str | None = "id"
    direction: str | None = "desc"
    user: str | None = None

    def to_query(self) -> dict[str, Any]:
        """Build the query dict in the site's key order."""
        query: dict[str, Any] = {}
        if self.user is not None:
            query["u"] = self.user
        query["f"] = int(self.filter)
        query["c"] = self.category
        query["q"] = self.term
        query["p"] = self.page
        if self.sort is not None:
            query["s"] = self.sort
        if self.direction is not None:
            query["o"] = self.direction
        return query


class Torrent(BaseModel):
    """One normalized feed entry."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    hash: str | None = None
    published_at: datetime | None = None
    file_size: str | None = None
    description: str | None = None
    category: str | None = None
    sub_category: str | None = None
    torrent_url: str | None = None
    seeders: int | None = None
    leechers: int | None = None
    completed: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return self.model_dump(mode="json")


class PageResponse(BaseModel):
    """Torrents of one page, plus the site's page count when it was asked for."""

    torrents: list[Torrent] = Field(default_factory=list)
    max_page: int | None = None

    def __len__(self) -> int:
        return len(self.torrents)
