"""
Infrastructure module exports.

Configuration, explicit context bootstrap and health checks.
"""

from .config import InfraConfig, STTBackendType
from .bootstrap import ScribeContext, build_context
from .health import HealthChecker, HealthStatus

__all__ = [
    "InfraConfig",
    "STTBackendType",
    "ScribeContext",
    "build_context",
    "HealthChecker",
    "HealthStatus",
]
