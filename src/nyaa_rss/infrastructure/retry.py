"""Fixed-delay retry policy for fan-out page fetches, built on tenacity."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar, cast

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    stop_any,
    stop_never,
    wait_fixed,
)

from nyaa_rss.config import NyaaConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry any failure after a fixed delay.

    With neither ``max_attempts`` nor ``max_delay`` set the call is retried
    forever; a page that never succeeds stalls its caller. When a bound is
    reached the last exception is re-raised.

    Calls run inside an asyncio task group in the fan-out, so the first call
    to give up cancels its siblings, sleeping retries included, and no retry
    outlives the failed search.
    """

    delay: float = 1.0
    max_attempts: int | None = None
    max_delay: float | None = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def from_config(cls, config: NyaaConfig) -> "RetryPolicy":
        return cls(
            delay=config.retry_delay,
            max_attempts=config.retry_max_attempts,
            max_delay=config.retry_max_delay,
        )

    @property
    def is_unbounded(self) -> bool:
        return self.max_attempts is None and self.max_delay is None

    def _stop(self):
        stops = []
        if self.max_attempts is not None:
            stops.append(stop_after_attempt(self.max_attempts))
        if self.max_delay is not None:
            stops.append(stop_after_delay(self.max_delay))
        return stop_any(*stops) if stops else stop_never

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``fn(*args, **kwargs)``, retrying per this policy."""
        retrying = AsyncRetrying(
            stop=self._stop(),
            wait=wait_fixed(self.delay),
            retry=retry_if_exception_type(Exception),
            before_sleep=before_sleep_log(cast(Any, logger), logging.WARNING),
            sleep=self.sleep,
            reraise=True,
        )
        return await retrying(fn, *args, **kwargs)
