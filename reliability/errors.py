"""
Error taxonomy shared by the completion and transcription paths.

Kinds:
- structural: invalid request shape, model or temperature (never retried)
- auth_or_waf_blocked: 401/402/403, credential or network filter (never retried)
- rate_limited: 429 (retried with backoff, bounded)
- transient_service: 5xx, timeouts, connection failures (retried, bounded)
- empty_result: call succeeded but the payload failed validation (not retried)
- degraded_fallback: no credential configured, static content served (not an error)
"""

from typing import Literal, Optional


ErrorKind = Literal[
    "structural",
    "auth_or_waf_blocked",
    "rate_limited",
    "transient_service",
    "empty_result",
    "degraded_fallback",
]

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
NON_RETRYABLE_STATUS_CODES = frozenset({400, 401, 402, 403})


class ServiceError(Exception):
    """
    Failure of a single remote call.

    Backends raise this; clients convert it into a result carrying
    `kind` and a human-readable message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        waf_blocked: bool = False,
    ):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.waf_blocked = waf_blocked
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class StructuralError(ServiceError):
    """Request rejected before (or by) the service because of its shape."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__("structural", message, status_code=status_code, detail=detail)


class EmptyResultError(ServiceError):
    """The service answered, but with nothing usable."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__("empty_result", message, detail=detail)


def kind_for_status(status_code: int) -> ErrorKind:
    """Map an HTTP status code to an error kind."""
    if status_code == 400:
        return "structural"
    if status_code in (401, 402, 403):
        return "auth_or_waf_blocked"
    if status_code == 429:
        return "rate_limited"
    return "transient_service"


def is_retryable_completion_error(exc: BaseException) -> bool:
    """
    Retry policy for the text-generation service.

    429/500/502/503/504 and timeouts are retried; 400/401/402/403 fail on
    first occurrence. Any other exception type is retried up to the cap.
    """
    if isinstance(exc, ServiceError):
        if exc.status_code is not None:
            return exc.status_code not in NON_RETRYABLE_STATUS_CODES
        return exc.kind in ("rate_limited", "transient_service")
    return True


def is_retryable_transcription_error(exc: BaseException) -> bool:
    """
    Retry policy for the speech-to-text service.

    Authorization and anti-bot blocks abort at once, as do malformed
    requests. Rate limits, server errors and network failures retry.
    """
    if isinstance(exc, ServiceError):
        return exc.kind not in ("auth_or_waf_blocked", "structural", "empty_result")
    return True
