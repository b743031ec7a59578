"""
Supported-model table, request validation and cost estimation.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .types import DEFAULT_MODEL


logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.8


@dataclass(frozen=True)
class ModelPricing:
    input_per_1k: float
    output_per_1k: float


@dataclass(frozen=True)
class ModelSpec:
    name: str
    max_tokens: int
    min_temperature: float
    max_temperature: float
    pricing: ModelPricing
    capabilities: Tuple[str, ...]


SUPPORTED_MODELS: Dict[str, ModelSpec] = {
    "gpt-4.1-mini": ModelSpec(
        name="GPT-4.1 Mini",
        max_tokens=128000,
        min_temperature=0.0,
        max_temperature=2.0,
        pricing=ModelPricing(input_per_1k=0.00015, output_per_1k=0.0006),
        capabilities=("chat", "dutch"),
    ),
}


def is_valid_model(model: str) -> bool:
    return model in SUPPORTED_MODELS


def get_model_capabilities(model: str) -> Optional[ModelSpec]:
    return SUPPORTED_MODELS.get(model)


def normalize_temperature(temperature: Optional[float]) -> float:
    """Missing or NaN temperature resolves to the default; others are clamped to [0, 2]."""
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        return DEFAULT_TEMPERATURE
    if math.isnan(temperature):
        return DEFAULT_TEMPERATURE
    return min(2.0, max(0.0, float(temperature)))


def validate_model_config(
    model: str,
    temperature: Optional[float],
    max_tokens: Optional[int] = None,
) -> Optional[str]:
    """
    Check a request against the model table.

    Returns:
        None when valid, otherwise a human-readable reason.
    """
    spec = SUPPORTED_MODELS.get(model)
    if spec is None:
        return f"Unsupported model: {model}"

    if temperature is not None:
        if not isinstance(temperature, (int, float)) or math.isnan(temperature):
            return f"Invalid temperature: {temperature!r}"
        if not spec.min_temperature <= temperature <= spec.max_temperature:
            return (
                f"Model {model} only supports temperatures between "
                f"{spec.min_temperature} and {spec.max_temperature}"
            )

    if max_tokens is not None:
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
            return f"max_tokens must be a positive integer, got {max_tokens!r}"
        if max_tokens > spec.max_tokens:
            return f"max_tokens {max_tokens} exceeds the {spec.max_tokens} limit of {model}"

    return None


def estimate_completion_cost(
    prompt_tokens: int,
    completion_tokens: int,
    model: str = DEFAULT_MODEL,
) -> float:
    """Estimated USD cost; unknown models cost 0."""
    spec = SUPPORTED_MODELS.get(model)
    if spec is None:
        logger.warning(f"No pricing data available for model {model}")
        return 0.0

    input_cost = (prompt_tokens / 1000) * spec.pricing.input_per_1k
    output_cost = (completion_tokens / 1000) * spec.pricing.output_per_1k
    return input_cost + output_cost
