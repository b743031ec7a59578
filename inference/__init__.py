"""
Model boundary layer for text generation.

The completion client stays agnostic of the underlying backend.

Supported backends:
- DemoCompletionBackend: Deterministic static content (no credential configured)
- OpenAIChatBackend: OpenAI-compatible chat completions over HTTP

Example usage:
    from inference import CompletionClient, CompletionRequest

    result = await client.generate(
        CompletionRequest(system_prompt="...", user_prompt="...", section_type="diagnosis")
    )
"""

from .types import (
    CompletionRequest,
    CompletionResult,
    RawCompletion,
    TokenUsage,
    DEFAULT_MODEL,
    DEMO_MODEL,
)
from .base import CompletionBackend
from .stub import DemoCompletionBackend
from .openai_chat import OpenAIChatBackend
from .client import CompletionClient
from .models import (
    SUPPORTED_MODELS,
    estimate_completion_cost,
    get_model_capabilities,
    is_valid_model,
    normalize_temperature,
    validate_model_config,
)
from .tokens import estimate_token_count

__all__ = [
    "CompletionRequest",
    "CompletionResult",
    "RawCompletion",
    "TokenUsage",
    "DEFAULT_MODEL",
    "DEMO_MODEL",
    "CompletionBackend",
    "DemoCompletionBackend",
    "OpenAIChatBackend",
    "CompletionClient",
    "SUPPORTED_MODELS",
    "estimate_completion_cost",
    "get_model_capabilities",
    "is_valid_model",
    "normalize_temperature",
    "validate_model_config",
    "estimate_token_count",
]
