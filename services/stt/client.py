"""
Transcription Client

Validates a request, runs the backend under the shared retry executor
with the transcription classifier, and turns every outcome into a
TranscriptionResult.

Rules:
- Never raises for service failures
- 401/403 abort on the first attempt; 429, 5xx and network errors retry
- Exhaustion messages say whether the cause was authorization or network
- Every call that reaches the backend is recorded in the usage monitor
"""

import asyncio
import logging
import math
import time
from typing import Optional

from reliability.errors import ServiceError, is_retryable_transcription_error
from reliability.retry import RetryExecutor, RetryPolicy
from reliability.usage_monitor import UsageMonitor
from .base import TranscriptionBackend, TranscriptionRequest, TranscriptionResult
from .formats import extension_for_mime_type, is_acceptable_mime_type


logger = logging.getLogger(__name__)

COST_PER_SECOND = 0.00001

MAX_AUDIO_BYTES = 100 * 1024 * 1024

NOT_CONFIGURED_MESSAGE = (
    "Transcription service not configured: set GROQ_API_KEY to enable speech-to-text"
)


def estimate_transcription_cost(duration_seconds: Optional[float]) -> float:
    """Approximate USD cost of a transcription of the given length."""
    if not duration_seconds or duration_seconds < 0:
        return 0.0
    return duration_seconds * COST_PER_SECOND


def _authorization_failure_message(error: ServiceError) -> str:
    if error.waf_blocked:
        cause = "the request was blocked by an anti-bot network filter"
    else:
        cause = "the API key was rejected"
    return (
        f"Authorization failure during transcription: {cause}. "
        "Check or rotate GROQ_API_KEY and check local network filters "
        f"(VPN, proxy, firewall). Technical details: {error.message}"
    )


def _network_failure_message(error: BaseException, attempts: int) -> str:
    detail = error.message if isinstance(error, ServiceError) else str(error)
    return (
        f"Network failure during transcription after {attempts} attempts: "
        "the service is temporarily unavailable. Retry later or enter the "
        f"text manually. Technical details: {detail}"
    )


class TranscriptionClient:
    """
    Retried, monitored speech-to-text.

    `backend=None` means no credential is configured.
    """

    def __init__(
        self,
        backend: Optional[TranscriptionBackend],
        usage_monitor: Optional[UsageMonitor] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep=asyncio.sleep,
        max_audio_bytes: int = MAX_AUDIO_BYTES,
    ):
        self.backend = backend
        self.max_audio_bytes = max_audio_bytes
        self.usage_monitor = usage_monitor or UsageMonitor(name="transcription")
        self.retry = RetryExecutor(
            retry_policy or RetryPolicy(base_delay_seconds=2.0),
            is_retryable_transcription_error,
            sleep=sleep,
            on_retry=self._log_retry,
            name="Groq transcription",
        )

    @property
    def configured(self) -> bool:
        return self.backend is not None

    def _log_retry(self, attempt: int, error: BaseException, delay: float) -> None:
        logger.warning(
            "Transcription attempt failed, retrying",
            extra={
                "attempt": attempt,
                "max_attempts": self.retry.policy.max_attempts,
                "status_code": getattr(error, "status_code", None),
                "error_kind": getattr(error, "kind", type(error).__name__),
                "delay_ms": round(delay * 1000),
            },
        )

    def _validate(self, request: TranscriptionRequest) -> Optional[str]:
        if not request.audio:
            return "Audio data is empty"
        if len(request.audio) > self.max_audio_bytes:
            return f"Audio file too large: {len(request.audio)} bytes exceeds the {self.max_audio_bytes} byte limit"
        temperature = request.temperature
        if not isinstance(temperature, (int, float)) or math.isnan(temperature):
            return f"Invalid temperature: {temperature!r}"
        if not 0.0 <= temperature <= 1.0:
            return "Transcription temperature must be between 0 and 1"
        if not is_acceptable_mime_type(request.mime_type):
            return f"Unsupported audio format: {request.mime_type}"
        return None

    async def transcribe(
        self,
        request: TranscriptionRequest,
        *,
        timeout: Optional[float] = None,
    ) -> TranscriptionResult:
        """
        Transcribe one audio clip.

        Args:
            request: audio and decoding options
            timeout: overall budget in seconds including retries and backoff

        Returns:
            TranscriptionResult; silence is success with empty text
        """
        problem = self._validate(request)
        if problem:
            logger.warning(f"Rejected transcription request: {problem}")
            return TranscriptionResult(success=False, error_kind="structural", error=problem)

        if not self.configured:
            logger.error("GROQ_API_KEY not set - transcription unavailable")
            return TranscriptionResult(
                success=False,
                error_kind="auth_or_waf_blocked",
                error=NOT_CONFIGURED_MESSAGE,
            )

        if timeout is None:
            return await self._transcribe_remote(request)

        try:
            return await asyncio.wait_for(self._transcribe_remote(request), timeout)
        except asyncio.TimeoutError:
            logger.error(f"Transcription exceeded caller timeout of {timeout}s")
            return TranscriptionResult(
                success=False,
                error_kind="transient_service",
                error=f"Transcription timed out after {timeout}s",
            )

    async def _transcribe_remote(self, request: TranscriptionRequest) -> TranscriptionResult:
        extension = extension_for_mime_type(request.mime_type)
        attempts = 0
        start = time.perf_counter()
        success = False
        cost = 0.0

        async def attempt():
            nonlocal attempts
            attempts += 1
            return await self.backend.transcribe(request, extension)

        logger.info(
            f"Transcribing {len(request.audio)} bytes as audio.{extension} "
            f"with {self.backend.name} backend"
        )

        try:
            raw = await self.retry.execute(attempt)
            cost = estimate_transcription_cost(raw.duration_seconds)
            success = True
            return TranscriptionResult(
                success=True,
                text=raw.text,
                duration_seconds=raw.duration_seconds,
                attempts=attempts,
            )

        except ServiceError as e:
            return self._failure(e, attempts)

        except Exception as e:
            logger.error(f"Transcription failed with unexpected error: {type(e).__name__}: {e}")
            return TranscriptionResult(
                success=False,
                error_kind="transient_service",
                error=_network_failure_message(e, attempts),
                attempts=attempts,
            )

        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            model = getattr(self.backend, "model", self.backend.name)
            self.usage_monitor.record(duration_ms, 0, cost, success, model)

    def _failure(self, error: ServiceError, attempts: int) -> TranscriptionResult:
        if error.kind == "auth_or_waf_blocked":
            message = _authorization_failure_message(error)
        elif error.kind in ("rate_limited", "transient_service"):
            message = _network_failure_message(error, attempts)
        else:
            message = error.message

        logger.error(f"Transcription failed ({error.kind}) after {attempts} attempt(s): {error.message}")
        return TranscriptionResult(
            success=False,
            error_kind=error.kind,
            error=message,
            attempts=attempts,
        )

    def status(self) -> dict:
        """Snapshot for status endpoints."""
        metrics = self.usage_monitor.snapshot()
        return {
            "configured": self.configured,
            "backend": self.backend.name if self.backend else None,
            "metrics": metrics.model_dump(),
            "error_rate": metrics.error_rate,
        }
