"""
Tests for the retry executor.

Verifies:
✔ At most max_attempts calls, then the original error is raised
✔ Non-retryable errors fail after one call
✔ Backoff doubles per attempt with at most 10% jitter
✔ Cancellation is never retried
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from reliability.errors import (
    ServiceError,
    is_retryable_completion_error,
    is_retryable_transcription_error,
)
from reliability.retry import RetryExecutor, RetryPolicy, compute_backoff_delay


def make_executor(classifier=is_retryable_completion_error, max_attempts=3, on_retry=None):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    executor = RetryExecutor(
        RetryPolicy(max_attempts=max_attempts, base_delay_seconds=1.0),
        classifier,
        sleep=fake_sleep,
        on_retry=on_retry,
    )
    return executor, sleeps


class TestRetryBound:
    @pytest.mark.asyncio
    async def test_exhaustion_raises_original_error(self):
        error = ServiceError("transient_service", "down", status_code=503)
        operation = AsyncMock(side_effect=error)
        executor, sleeps = make_executor()

        with pytest.raises(ServiceError) as exc_info:
            await executor.execute(operation)

        assert exc_info.value is error
        assert operation.await_count == 3
        assert len(sleeps) == 2

    @pytest.mark.asyncio
    async def test_success_after_transient_failure(self):
        operation = AsyncMock(side_effect=[
            ServiceError("rate_limited", "slow down", status_code=429),
            "ok",
        ])
        executor, sleeps = make_executor()

        assert await executor.execute(operation) == "ok"
        assert operation.await_count == 2
        assert len(sleeps) == 1

    @pytest.mark.asyncio
    async def test_unknown_exceptions_retried_then_raised(self):
        operation = AsyncMock(side_effect=RuntimeError("boom"))
        executor, _ = make_executor(max_attempts=2)

        with pytest.raises(RuntimeError):
            await executor.execute(operation)
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_single_attempt_policy_never_sleeps(self):
        operation = AsyncMock(side_effect=ServiceError("transient_service", "down", status_code=500))
        executor, sleeps = make_executor(max_attempts=1)

        with pytest.raises(ServiceError):
            await executor.execute(operation)
        assert operation.await_count == 1
        assert sleeps == []


class TestNoRetryClasses:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 402, 403])
    async def test_completion_client_errors_fail_fast(self, status):
        operation = AsyncMock(side_effect=ServiceError("structural", "no", status_code=status))
        executor, sleeps = make_executor()

        with pytest.raises(ServiceError):
            await executor.execute(operation)
        assert operation.await_count == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_transcription_auth_block_fails_fast(self):
        error = ServiceError("auth_or_waf_blocked", "blocked", status_code=403, waf_blocked=True)
        operation = AsyncMock(side_effect=error)
        executor, _ = make_executor(classifier=is_retryable_transcription_error)

        with pytest.raises(ServiceError):
            await executor.execute(operation)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_cancellation_propagates_immediately(self):
        operation = AsyncMock(side_effect=asyncio.CancelledError())
        executor, sleeps = make_executor()

        with pytest.raises(asyncio.CancelledError):
            await executor.execute(operation)
        assert operation.await_count == 1
        assert sleeps == []


class TestBackoff:
    def test_delay_doubles_per_attempt(self):
        policy = RetryPolicy(base_delay_seconds=1.0)
        no_jitter = lambda: 0.0  # noqa: E731
        assert compute_backoff_delay(policy, 0, rand=no_jitter) == 1.0
        assert compute_backoff_delay(policy, 1, rand=no_jitter) == 2.0
        assert compute_backoff_delay(policy, 2, rand=no_jitter) == 4.0

    def test_jitter_capped_at_ten_percent(self):
        policy = RetryPolicy(base_delay_seconds=2.0)
        assert compute_backoff_delay(policy, 1, rand=lambda: 1.0) == pytest.approx(4.4)

    @pytest.mark.asyncio
    async def test_sleeps_follow_schedule(self):
        operation = AsyncMock(side_effect=ServiceError("transient_service", "down", status_code=502))
        executor, sleeps = make_executor()

        with pytest.raises(ServiceError):
            await executor.execute(operation)

        assert 1.0 <= sleeps[0] <= 1.1
        assert 2.0 <= sleeps[1] <= 2.2

    @pytest.mark.asyncio
    async def test_on_retry_hook_receives_attempt_and_delay(self):
        hook = MagicMock()
        error = ServiceError("rate_limited", "slow", status_code=429)
        operation = AsyncMock(side_effect=[error, "ok"])
        executor, sleeps = make_executor(on_retry=hook)

        await executor.execute(operation)

        hook.assert_called_once()
        attempt, exc, delay = hook.call_args.args
        assert attempt == 1
        assert exc is error
        assert delay == sleeps[0]

    def test_invalid_policy_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
        with pytest.raises(ValueError):
            RetryPolicy(jitter_ratio=0.5)
        with pytest.raises(ValueError):
            RetryPolicy(base_delay_seconds=-1)
