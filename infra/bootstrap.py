"""
Infrastructure initialization and bootstrap.

Builds every shared component once from configuration and hands them to
call sites in an explicit ScribeContext. Nothing here is a module-level
singleton; tests build their own contexts.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from inference import CompletionClient
from reliability import RetryPolicy, TokenBucketRateLimiter, UsageMonitor
from services.stt import TranscriptionClient

from .config import InfraConfig


logger = logging.getLogger(__name__)


@dataclass
class ScribeContext:
    """Process-wide components shared by all requests."""

    config: InfraConfig
    rate_limiter: TokenBucketRateLimiter
    completion_monitor: UsageMonitor
    transcription_monitor: UsageMonitor
    completion: CompletionClient
    transcription: TranscriptionClient

    def __repr__(self) -> str:
        """String representation showing configured backends."""
        return (
            f"ScribeContext(completion={'demo' if self.completion.demo_mode else 'openai'}, "
            f"stt={self.config.stt_backend if self.transcription.configured else 'unconfigured'}, "
            f"environment={self.config.environment})"
        )


def build_context(config: Optional[InfraConfig] = None) -> ScribeContext:
    """
    Bootstrap all infrastructure.

    Args:
        config: Optional custom configuration; read from the environment if omitted

    Returns:
        ScribeContext with clients, limiter and monitors initialized
    """
    config = config or InfraConfig.from_env()

    rate_limiter = TokenBucketRateLimiter.for_window(
        config.rate_limit_requests,
        config.rate_limit_window_ms,
    )
    completion_monitor = UsageMonitor(name="completion")
    transcription_monitor = UsageMonitor(name="transcription")

    completion = CompletionClient(
        backend=config.create_completion_backend(),
        rate_limiter=rate_limiter,
        usage_monitor=completion_monitor,
        retry_policy=RetryPolicy(
            max_attempts=max(1, config.openai_max_retries),
            base_delay_seconds=config.openai_retry_base_delay_ms / 1000,
        ),
        default_max_tokens=config.openai_default_max_tokens,
    )

    transcription = TranscriptionClient(
        backend=config.create_transcription_backend(),
        usage_monitor=transcription_monitor,
        retry_policy=RetryPolicy(
            max_attempts=max(1, config.groq_max_retries),
            base_delay_seconds=config.groq_retry_base_delay_ms / 1000,
        ),
        max_audio_bytes=config.max_audio_bytes,
    )

    context = ScribeContext(
        config=config,
        rate_limiter=rate_limiter,
        completion_monitor=completion_monitor,
        transcription_monitor=transcription_monitor,
        completion=completion,
        transcription=transcription,
    )

    if completion.demo_mode:
        logger.warning("OPENAI_API_KEY not set - text generation runs in demo mode")
    if not transcription.configured:
        logger.warning("GROQ_API_KEY not set - transcription is unavailable")
    logger.info(f"Bootstrapped {context!r}")

    return context
