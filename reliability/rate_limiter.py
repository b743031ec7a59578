"""
Token-bucket rate limiter for outbound text-generation requests.

Capacity refills continuously at a fixed rate; each request debits one
token. Refill is lazy: it is computed from elapsed time on every attempt.

Invariants:
- 0 <= tokens_available <= capacity
- A token is debited only when the caller is let through
- A debited token is never refunded (fail-closed), even if the caller
  is cancelled or its request fails afterwards
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateBudget:
    """Point-in-time view of the bucket."""

    capacity: int
    refill_rate_per_second: float
    tokens_available: float
    last_refill: float


class TokenBucketRateLimiter:
    """
    Pace requests to `capacity` per window.

    The lock guards every read-modify-write of the bucket and is never held
    across an await, so it is safe for concurrent tasks and threads.
    """

    def __init__(
        self,
        capacity: int = 100,
        refill_rate_per_second: float = 100 / 60,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if refill_rate_per_second <= 0:
            raise ValueError("refill_rate_per_second must be > 0")

        self.capacity = capacity
        self.refill_rate_per_second = refill_rate_per_second
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = float(capacity)
        self._last_refill = clock()

    @classmethod
    def for_window(cls, max_requests: int, window_ms: int, **kwargs) -> "TokenBucketRateLimiter":
        """Build a limiter allowing `max_requests` per `window_ms`."""
        if window_ms <= 0:
            raise ValueError("window_ms must be > 0")
        return cls(
            capacity=max_requests,
            refill_rate_per_second=max_requests / (window_ms / 1000),
            **kwargs,
        )

    def _refill(self) -> None:
        # Caller holds the lock.
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(
            float(self.capacity),
            self._tokens + elapsed * self.refill_rate_per_second,
        )
        self._last_refill = now

    def try_acquire(self) -> float:
        """
        Make one non-blocking attempt.

        Returns:
            0.0 if a token was debited, otherwise the seconds to wait
            before the next token becomes available.
        """
        with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return 0.0
            return (1 - self._tokens) / self.refill_rate_per_second

    async def acquire(self) -> None:
        """Suspend until a token is available, then consume exactly one."""
        while True:
            wait_s = self.try_acquire()
            if wait_s == 0.0:
                return
            logger.debug(f"Rate limit reached, waiting {wait_s * 1000:.0f}ms for next token")
            await self._sleep(wait_s)

    def snapshot(self) -> RateBudget:
        """Refresh and return the current budget."""
        with self._lock:
            self._refill()
            return RateBudget(
                capacity=self.capacity,
                refill_rate_per_second=self.refill_rate_per_second,
                tokens_available=self._tokens,
                last_refill=self._last_refill,
            )
