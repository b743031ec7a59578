"""
Tests for token counting and the supported-model table.

tiktoken is patched out so these tests never download encodings.
"""

import math
from unittest.mock import MagicMock, patch

import pytest

from inference.models import (
    DEFAULT_TEMPERATURE,
    estimate_completion_cost,
    get_model_capabilities,
    is_valid_model,
    normalize_temperature,
    validate_model_config,
)
from inference.tokens import estimate_token_count, estimate_tokens_by_ratio


# ─────────────────────────────────────────────────────
# Character-ratio fallback
# ─────────────────────────────────────────────────────


class TestRatioFallback:
    def test_empty_text_is_zero(self):
        assert estimate_tokens_by_ratio("") == 0

    def test_single_character_is_at_least_one(self):
        assert estimate_tokens_by_ratio("a") == 1

    def test_base_ratio(self):
        assert estimate_tokens_by_ratio("abcdefg") == 2  # 7 / 3.5

    def test_medical_terms_ratio(self):
        text = "therapie"
        assert estimate_tokens_by_ratio(text) == math.ceil(len(text) / 3.8)

    def test_numbers_with_punctuation_ratio(self):
        text = "therapie 1."
        assert estimate_tokens_by_ratio(text) == math.ceil(len(text) / 3.2)

    def test_formal_language_wins_last(self):
        text = "protocol 1."
        assert estimate_tokens_by_ratio(text) == math.ceil(len(text) / 4.0)


class TestEstimateTokenCount:
    def test_uses_encoding_when_available(self):
        encoding = MagicMock()
        encoding.encode.return_value = [1, 2, 3]
        with patch("inference.tokens._encoding_for", return_value=encoding):
            assert estimate_token_count("Hallo wereld") == 3

    def test_falls_back_when_encoding_fails(self):
        with patch("inference.tokens._encoding_for", side_effect=RuntimeError("offline")):
            assert estimate_token_count("abcdefg") == 2

    def test_never_zero_for_non_empty_text(self):
        encoding = MagicMock()
        encoding.encode.return_value = []
        with patch("inference.tokens._encoding_for", return_value=encoding):
            assert estimate_token_count(" ") == 1

    def test_empty_text_skips_encoding(self):
        with patch("inference.tokens._encoding_for") as encoding_for:
            assert estimate_token_count("") == 0
        encoding_for.assert_not_called()


# ─────────────────────────────────────────────────────
# Model table
# ─────────────────────────────────────────────────────


class TestModelValidation:
    def test_default_model_valid(self):
        assert validate_model_config("gpt-4.1-mini", 0.8, 2000) is None
        assert is_valid_model("gpt-4.1-mini")
        assert get_model_capabilities("gpt-4.1-mini").max_tokens == 128000

    def test_unsupported_model(self):
        assert "Unsupported model" in validate_model_config("gpt-2", None)
        assert not is_valid_model("gpt-2")
        assert get_model_capabilities("gpt-2") is None

    @pytest.mark.parametrize("temperature", [-0.1, 2.5, float("nan")])
    def test_temperature_out_of_range(self, temperature):
        assert validate_model_config("gpt-4.1-mini", temperature) is not None

    @pytest.mark.parametrize("temperature", [None, 0, 0.0, 2.0, 1])
    def test_temperature_in_range(self, temperature):
        assert validate_model_config("gpt-4.1-mini", temperature) is None

    @pytest.mark.parametrize("max_tokens", [0, -5, 128001])
    def test_max_tokens_out_of_range(self, max_tokens):
        assert validate_model_config("gpt-4.1-mini", None, max_tokens) is not None

    def test_normalize_temperature(self):
        assert normalize_temperature(None) == DEFAULT_TEMPERATURE
        assert normalize_temperature(float("nan")) == DEFAULT_TEMPERATURE
        assert normalize_temperature(3.0) == 2.0
        assert normalize_temperature(-1) == 0.0
        assert normalize_temperature(0.3) == 0.3

    def test_cost_estimate(self):
        assert estimate_completion_cost(1000, 1000) == pytest.approx(0.00075)
        assert estimate_completion_cost(1000, 1000, "unknown-model") == 0.0
