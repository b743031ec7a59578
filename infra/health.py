"""
Health checks for the generation and transcription services.

Health reflects configuration and observed error rates only; it never
calls the external services.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from .bootstrap import ScribeContext


ERROR_RATE_THRESHOLD = 0.1


@dataclass
class HealthStatus:
    """Health status response."""

    status: str  # "healthy", "degraded", "unhealthy"
    timestamp: str
    uptime_seconds: float
    mode: str  # "live", "demo"
    services: Dict[str, Any]
    message: str


def _service_status(configured: bool, error_rate: float) -> str:
    if error_rate >= ERROR_RATE_THRESHOLD:
        return "unhealthy"
    if not configured:
        return "degraded"
    return "healthy"


class HealthChecker:
    """
    Invariant: Health checks do NOT verify external services.
    """

    def __init__(self, context: ScribeContext, start_time: float = None):
        self.context = context
        self.start_time = start_time if start_time is not None else time.time()

    def check(self) -> HealthStatus:
        completion = self.context.completion
        transcription = self.context.transcription

        completion_metrics = completion.usage_monitor.snapshot()
        transcription_metrics = transcription.usage_monitor.snapshot()

        services = {
            "completion": {
                "status": _service_status(not completion.demo_mode, completion_metrics.error_rate),
                "configured": not completion.demo_mode,
                "error_rate": completion_metrics.error_rate,
                "requests": completion_metrics.request_count,
            },
            "transcription": {
                "status": _service_status(transcription.configured, transcription_metrics.error_rate),
                "configured": transcription.configured,
                "error_rate": transcription_metrics.error_rate,
                "requests": transcription_metrics.request_count,
            },
        }

        statuses = {s["status"] for s in services.values()}
        if "unhealthy" in statuses:
            status = "unhealthy"
            message = "Error rate above threshold"
        elif "degraded" in statuses:
            status = "degraded"
            message = "One or more services not configured"
        else:
            status = "healthy"
            message = "All services configured"

        return HealthStatus(
            status=status,
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime_seconds=time.time() - self.start_time,
            mode="demo" if completion.demo_mode else "live",
            services=services,
            message=message,
        )

    def to_dict(self, status: HealthStatus) -> Dict[str, Any]:
        """Convert HealthStatus to dict for JSON serialization."""
        return {
            "status": status.status,
            "timestamp": status.timestamp,
            "uptime_seconds": status.uptime_seconds,
            "mode": status.mode,
            "services": status.services,
            "message": status.message,
        }
