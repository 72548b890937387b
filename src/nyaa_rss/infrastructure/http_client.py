"""aiohttp ClientSession construction and lifecycle"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from nyaa_rss.config import NyaaConfig


def create_session(config: NyaaConfig) -> aiohttp.ClientSession:
    """Create a session configured from ``config``; the caller must close it."""
    kwargs = {}
    if config.request_timeout is not None:
        kwargs["timeout"] = aiohttp.ClientTimeout(total=config.request_timeout)

    return aiohttp.ClientSession(headers={"User-Agent": config.user_agent}, **kwargs)


@asynccontextmanager
async def aiohttp_session_manager(config: NyaaConfig) -> AsyncIterator[aiohttp.ClientSession]:
    """Session scoped to an ``async with`` block"""
    session = create_session(config)
    try:
        yield session
    finally:
        await session.close()
