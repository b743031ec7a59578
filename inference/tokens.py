"""
Token counting for cost accounting.

tiktoken gives model-aware counts. When the encoding cannot be loaded
(first use downloads the BPE table) counting falls back to a character
ratio calibrated on Dutch clinical text. Neither path raises.
"""

import logging
import math
import re
from functools import lru_cache

import tiktoken

from .types import DEFAULT_MODEL


logger = logging.getLogger(__name__)

FALLBACK_ENCODING = "o200k_base"

BASE_CHARS_PER_TOKEN = 3.5

_DIGIT = re.compile(r"\d")
_PUNCTUATION = re.compile(r"[.,;:]")


def _has_any(*words):
    return lambda text: any(word in text for word in words)


# Applied in order; when several match, the last one wins.
_RATIO_RULES = (
    (_has_any("therapie", "behandeling", "diagnose"), 3.8),
    (lambda text: bool(_DIGIT.search(text) and _PUNCTUATION.search(text)), 3.2),
    (_has_any("conform", "protocol", "richtlijn"), 4.0),
)


@lru_cache(maxsize=8)
def _encoding_for(model: str) -> "tiktoken.Encoding":
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding(FALLBACK_ENCODING)


def estimate_tokens_by_ratio(text: str) -> int:
    """Character-ratio estimate: 0 for empty text, otherwise at least 1."""
    if not text:
        return 0

    chars_per_token = BASE_CHARS_PER_TOKEN
    for matches, ratio in _RATIO_RULES:
        if matches(text):
            chars_per_token = ratio

    return max(1, math.ceil(len(text) / chars_per_token))


def estimate_token_count(text: str, model: str = DEFAULT_MODEL) -> int:
    """Tokens in `text` for `model`; 0 for empty text, otherwise at least 1."""
    if not text:
        return 0

    try:
        encoding = _encoding_for(model)
        return max(1, len(encoding.encode(text)))
    except Exception as e:
        logger.debug(f"tiktoken unavailable for {model}, using character ratio: {e}")
        return estimate_tokens_by_ratio(text)
