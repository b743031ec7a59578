"""
Reliability layer for outbound service calls.

Rate limiting, bounded retry, usage accounting and the shared
error taxonomy.
"""

from .errors import (
    ErrorKind,
    ServiceError,
    StructuralError,
    EmptyResultError,
    kind_for_status,
    is_retryable_completion_error,
    is_retryable_transcription_error,
)
from .rate_limiter import RateBudget, TokenBucketRateLimiter
from .retry import RetryExecutor, RetryPolicy, compute_backoff_delay
from .usage_monitor import UsageMetrics, UsageMonitor

__all__ = [
    "ErrorKind",
    "ServiceError",
    "StructuralError",
    "EmptyResultError",
    "kind_for_status",
    "is_retryable_completion_error",
    "is_retryable_transcription_error",
    "RateBudget",
    "TokenBucketRateLimiter",
    "RetryExecutor",
    "RetryPolicy",
    "compute_backoff_delay",
    "UsageMetrics",
    "UsageMonitor",
]
