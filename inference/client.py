"""
Completion Client

Entry point for all text generation. Owns the call sequence:

    validate -> (demo fallback) -> rate limit -> retry(backend) -> validate result

Rules:
- Never raises for service failures; every outcome is a CompletionResult
- Structural errors are reported before any network activity
- No credential means demo content, and the network backend is never touched
- Every non-demo call is recorded in the usage monitor, success or not
- Task cancellation propagates
"""

import asyncio
import dataclasses
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from reliability.errors import ServiceError, is_retryable_completion_error
from reliability.rate_limiter import TokenBucketRateLimiter
from reliability.retry import RetryExecutor, RetryPolicy
from reliability.usage_monitor import UsageMonitor
from .base import CompletionBackend
from .models import (
    estimate_completion_cost,
    normalize_temperature,
    validate_model_config,
)
from .stub import DemoCompletionBackend
from .tokens import estimate_token_count
from .types import CompletionRequest, CompletionResult, RawCompletion, TokenUsage


logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2000


class CompletionClient:
    """
    Rate-limited, retried, monitored text generation.

    `backend=None` puts the client in demo mode.
    """

    def __init__(
        self,
        backend: Optional[CompletionBackend],
        rate_limiter: TokenBucketRateLimiter,
        usage_monitor: UsageMonitor,
        retry_policy: Optional[RetryPolicy] = None,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
        token_counter: Callable[..., int] = estimate_token_count,
        sleep=asyncio.sleep,
    ):
        self.backend = backend
        self.rate_limiter = rate_limiter
        self.usage_monitor = usage_monitor
        self.default_max_tokens = default_max_tokens
        self._count_tokens = token_counter
        self._demo = DemoCompletionBackend()
        self.retry = RetryExecutor(
            retry_policy or RetryPolicy(),
            is_retryable_completion_error,
            sleep=sleep,
            name="OpenAI completion",
        )

    @property
    def demo_mode(self) -> bool:
        return self.backend is None

    async def generate(
        self,
        request: CompletionRequest,
        *,
        timeout: Optional[float] = None,
    ) -> CompletionResult:
        """
        Generate one completion.

        Args:
            request: prompts and sampling options
            timeout: overall budget in seconds covering rate-limit wait,
                network calls and backoff

        Returns:
            CompletionResult; `success=False` carries `error_kind` and `error`
        """
        problem = self._validate(request)
        if problem:
            logger.warning(f"Rejected completion request: {problem}")
            return CompletionResult(
                success=False,
                model=request.model,
                error_kind="structural",
                error=problem,
            )

        if self.demo_mode:
            return await self._generate_demo(request)

        resolved = dataclasses.replace(
            request,
            temperature=normalize_temperature(request.temperature),
            max_tokens=request.max_tokens or self.default_max_tokens,
        )

        if timeout is None:
            return await self._generate_remote(resolved)

        try:
            return await asyncio.wait_for(self._generate_remote(resolved), timeout)
        except asyncio.TimeoutError:
            logger.error(f"Completion request exceeded caller timeout of {timeout}s")
            return CompletionResult(
                success=False,
                model=request.model,
                error_kind="transient_service",
                error=f"Request timed out after {timeout}s",
            )

    def _validate(self, request: CompletionRequest) -> Optional[str]:
        if not isinstance(request.system_prompt, str) or not request.system_prompt.strip():
            return "System prompt is required"
        if not isinstance(request.user_prompt, str) or not request.user_prompt.strip():
            return "User prompt is required"
        return validate_model_config(request.model, request.temperature, request.max_tokens)

    async def _generate_demo(self, request: CompletionRequest) -> CompletionResult:
        logger.warning("OPENAI_API_KEY not set - returning demo content")
        raw = await self._demo.complete(request)
        return CompletionResult(
            success=True,
            content=raw.content,
            model=raw.model,
            usage=TokenUsage.model_validate(raw.usage),
            error_kind="degraded_fallback",
        )

    async def _generate_remote(self, request: CompletionRequest) -> CompletionResult:
        start = time.perf_counter()
        success = False
        tokens = 0
        cost = 0.0

        try:
            await self.rate_limiter.acquire()
            raw = await self.retry.execute(lambda: self.backend.complete(request))
            result = self._to_result(raw, request)

            if result.usage is not None:
                tokens = result.usage.total_tokens
                cost = estimate_completion_cost(
                    result.usage.prompt_tokens,
                    result.usage.completion_tokens,
                    request.model,
                )
            success = result.success
            return result

        except ServiceError as e:
            logger.error(f"Completion failed ({e.kind}): {e.message}")
            return CompletionResult(
                success=False,
                model=request.model,
                error_kind=e.kind,
                error=e.message,
            )

        except Exception as e:
            logger.error(f"Completion failed with unexpected error: {type(e).__name__}: {e}")
            return CompletionResult(
                success=False,
                model=request.model,
                error_kind="transient_service",
                error=f"Unexpected error while calling OpenAI: {e}",
            )

        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.usage_monitor.record(duration_ms, tokens, cost, success, request.model)

    def _to_result(self, raw: RawCompletion, request: CompletionRequest) -> CompletionResult:
        content = raw.content.strip() if isinstance(raw.content, str) else ""
        if not content:
            logger.warning("OpenAI returned empty content")
            return CompletionResult(
                success=False,
                model=raw.model or request.model,
                error_kind="empty_result",
                error="No content generated by OpenAI",
            )

        if raw.usage is None:
            usage = self._estimate_usage(request, content)
        else:
            try:
                usage = TokenUsage.model_validate(raw.usage)
            except ValidationError as e:
                logger.warning(f"OpenAI returned malformed usage data: {e.error_count()} errors")
                return CompletionResult(
                    success=False,
                    model=raw.model or request.model,
                    error_kind="empty_result",
                    error="OpenAI returned malformed usage data",
                )

        return CompletionResult(
            success=True,
            content=content,
            model=raw.model or request.model,
            usage=usage,
        )

    def _estimate_usage(self, request: CompletionRequest, content: str) -> TokenUsage:
        prompt_tokens = self._count_tokens(request.system_prompt + request.user_prompt, request.model)
        completion_tokens = self._count_tokens(content, request.model)
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    def health_info(self) -> dict:
        """Snapshot for health endpoints."""
        metrics = self.usage_monitor.snapshot()
        budget = self.rate_limiter.snapshot()
        return {
            "demo_mode": self.demo_mode,
            "metrics": metrics.model_dump(),
            "error_rate": metrics.error_rate,
            "rate_limit": {
                "capacity": budget.capacity,
                "tokens_available": round(budget.tokens_available, 2),
            },
        }
