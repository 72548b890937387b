"""
Infrastructure layer - HTTP transport, feed parsing and retry.
"""

from nyaa_rss.infrastructure.feed import FeedClient, FeedPayload, FeedSource, parse_feed
from nyaa_rss.infrastructure.http_client import aiohttp_session_manager, create_session
from nyaa_rss.infrastructure.retry import RetryPolicy

__all__ = [
    "FeedClient",
    "FeedPayload",
    "FeedSource",
    "RetryPolicy",
    "aiohttp_session_manager",
    "create_session",
    "parse_feed",
]
