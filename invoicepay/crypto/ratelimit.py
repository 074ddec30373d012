"""
Outgoing request throttling for rate-limited provider APIs.
"""

import asyncio
import time

import structlog

logger = structlog.get_logger(__name__)

# Etherscan free tier allows 5 calls per second
DEFAULT_RATE_PER_SECOND = 5.0


class RequestThrottle:
    """
    Spaces requests at least 1/rate seconds apart.

    One instance is shared by every request a provider issues. The lock
    serializes callers so concurrent verifications against the same
    provider stay under the upstream limit.
    """

    def __init__(self, rate_per_second: float = DEFAULT_RATE_PER_SECOND):
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be positive")
        self.min_interval = 1.0 / rate_per_second
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    async def wait(self) -> None:
        """Blocks until the next request slot is available."""
        async with self._lock:
            now = time.monotonic()
            if self._last_request is not None:
                delay = self._last_request + self.min_interval - now
                if delay > 0:
                    logger.debug("throttle_wait", delay_seconds=round(delay, 3))
                    await asyncio.sleep(delay)
            self._last_request = time.monotonic()


def backoff_delay_seconds(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff: base, 2*base, 4*base, ... capped at max_delay."""
    delay = base_delay * (2 ** max(attempt - 1, 0))
    return min(delay, max_delay)
