"""
nyaa-rss: async client for the nyaa.si RSS search feed.
"""

from nyaa_rss.aggregator import SearchAggregator
from nyaa_rss.client import NyaaClient
from nyaa_rss.config import NyaaConfig, get_config
from nyaa_rss.exceptions import FeedFetchError, InvalidArgumentError, NotFoundError, NyaaRssException
from nyaa_rss.fetcher import PageFetcher
from nyaa_rss.infrastructure import FeedClient, FeedPayload, FeedSource, RetryPolicy
from nyaa_rss.models import Filter, PageResponse, SearchOptions, SearchParams, SearchRequest, Torrent
from nyaa_rss.normalizer import normalize_item, normalize_items
from nyaa_rss.user_aggregator import UserSearchAggregator

__version__ = "0.1.0"

__all__ = [
    "NyaaClient",
    "NyaaConfig",
    "get_config",
    # Models
    "Filter",
    "PageResponse",
    "SearchOptions",
    "SearchParams",
    "SearchRequest",
    "Torrent",
    # Building blocks
    "FeedClient",
    "FeedPayload",
    "FeedSource",
    "PageFetcher",
    "RetryPolicy",
    "SearchAggregator",
    "UserSearchAggregator",
    "normalize_item",
    "normalize_items",
    # Errors
    "NyaaRssException",
    "InvalidArgumentError",
    "FeedFetchError",
    "NotFoundError",
]
