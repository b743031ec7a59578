"""
Bounded exponential-backoff retry for a single remote call.

Delay between attempts: base * 2**attempt plus up to 10% jitter, where
`attempt` is the zero-based index of the attempt that just failed.
The classifier decides per exception whether another attempt is allowed.
On final failure the original exception is re-raised unchanged.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

Classifier = Callable[[BaseException], bool]
RetryHook = Callable[[int, BaseException, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    jitter_ratio: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.base_delay_seconds < 0:
            raise ValueError("RetryPolicy.base_delay_seconds must be >= 0")
        if not 0 <= self.jitter_ratio <= 0.1:
            raise ValueError("RetryPolicy.jitter_ratio must be within [0, 0.1]")


def compute_backoff_delay(
    policy: RetryPolicy,
    attempt: int,
    rand: Callable[[], float] = random.random,
) -> float:
    """Seconds to wait after the zero-based `attempt` failed."""
    delay = policy.base_delay_seconds * (2 ** attempt)
    return delay + rand() * policy.jitter_ratio * delay


class RetryExecutor:
    """
    Run an async operation with bounded retries.

    Only `Exception` subclasses are considered; cancellation always
    propagates immediately.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        classifier: Classifier,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_retry: Optional[RetryHook] = None,
        name: str = "remote call",
    ):
        self.policy = policy
        self.classifier = classifier
        self._sleep = sleep
        self._on_retry = on_retry
        self.name = name

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        max_attempts = self.policy.max_attempts

        for attempt in range(max_attempts):
            try:
                return await operation()
            except Exception as exc:
                if not self.classifier(exc):
                    logger.warning(
                        f"{self.name} failed with non-retryable error "
                        f"(attempt {attempt + 1}/{max_attempts}): {exc}"
                    )
                    raise

                if attempt == max_attempts - 1:
                    logger.error(f"{self.name} failed after {max_attempts} attempts: {exc}")
                    raise

                delay = compute_backoff_delay(self.policy, attempt)
                logger.warning(
                    f"{self.name} failed (attempt {attempt + 1}/{max_attempts}), "
                    f"retrying in {delay * 1000:.0f}ms: {exc}"
                )
                if self._on_retry is not None:
                    self._on_retry(attempt + 1, exc, delay)
                await self._sleep(delay)

        # max_attempts >= 1 guarantees a return or raise above
        raise RuntimeError("unreachable")
