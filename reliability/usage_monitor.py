"""
Usage Monitor

Records latency, tokens, estimated cost and failures per request and
exposes an aggregate snapshot.

Rules:
- Purely observational: never blocks callers, never raises
- First latency sample sets the average; later samples weigh 0.1
- Error rate is derived from counters, not stored
- Counters only grow until an explicit reset()
"""

import logging
import threading
import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


logger = logging.getLogger(__name__)

LATENCY_DECAY = 0.9


class UsageMetrics(BaseModel):
    """Aggregate usage counters at a point in time."""

    model_config = ConfigDict(frozen=True)

    request_count: int = 0
    total_tokens: int = 0
    total_cost: float = 0.0
    error_count: int = 0
    rolling_average_latency_ms: float = 0.0
    last_request_time: Optional[float] = None

    @property
    def error_rate(self) -> float:
        if self.request_count == 0:
            return 0.0
        return self.error_count / self.request_count


class UsageMonitor:
    """
    Thread-safe accumulator for request metrics.

    Emits one structured log record per request.
    """

    def __init__(self, name: str = "completion"):
        self.name = name
        self._lock = threading.Lock()
        self._request_count = 0
        self._total_tokens = 0
        self._total_cost = 0.0
        self._error_count = 0
        self._average_latency_ms = 0.0
        self._last_request_time: Optional[float] = None

    def record(
        self,
        duration_ms: float,
        tokens: int,
        cost: float,
        success: bool,
        model: str,
    ) -> None:
        """Record one finished request. Bad input is logged and ignored."""
        try:
            duration_ms = max(0.0, float(duration_ms))
            tokens = max(0, int(tokens or 0))
            cost = max(0.0, float(cost or 0.0))

            with self._lock:
                self._request_count += 1
                self._total_tokens += tokens
                self._total_cost += cost
                self._last_request_time = time.time()

                if self._request_count == 1:
                    self._average_latency_ms = duration_ms
                else:
                    self._average_latency_ms = (
                        self._average_latency_ms * LATENCY_DECAY
                        + duration_ms * (1 - LATENCY_DECAY)
                    )

                if not success:
                    self._error_count += 1

                log_data: Dict[str, Any] = {
                    "monitor": self.name,
                    "duration_ms": round(duration_ms),
                    "tokens": tokens,
                    "cost": f"{cost:.6f}",
                    "success": success,
                    "model": model,
                    "total_requests": self._request_count,
                    "total_cost": f"{self._total_cost:.6f}",
                    "error_rate": f"{self._error_count / self._request_count:.3f}",
                    "avg_latency_ms": round(self._average_latency_ms),
                }

            logger.info(f"{self.name} request metrics", extra={"metrics": log_data})

        except Exception as e:
            logger.warning(f"Failed to record {self.name} usage: {e}")

    def snapshot(self) -> UsageMetrics:
        """Return an immutable copy of the current counters."""
        with self._lock:
            return UsageMetrics(
                request_count=self._request_count,
                total_tokens=self._total_tokens,
                total_cost=self._total_cost,
                error_count=self._error_count,
                rolling_average_latency_ms=self._average_latency_ms,
                last_request_time=self._last_request_time,
            )

    def reset(self) -> None:
        """Clear all counters."""
        with self._lock:
            self._request_count = 0
            self._total_tokens = 0
            self._total_cost = 0.0
            self._error_count = 0
            self._average_latency_ms = 0.0
            self._last_request_time = None
        logger.info(f"{self.name} usage metrics reset")
