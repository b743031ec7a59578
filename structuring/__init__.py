"""
Clinical-text structuring.

Deterministic extraction of HHSB intake cards, SOEP notes and red flags
from generated free text. Pure functions, safe to call from anywhere.
"""

from .hhsb import (
    HHSB_KEYS,
    ClinicalSections,
    build_hhsb_text,
    completeness_percentage,
    empty_sections,
    is_complete,
    parse_clinical_text,
)
from .red_flags import extract_red_flags
from .soep import SOEP_KEYS, SoepSections, parse_soep_text

__all__ = [
    "HHSB_KEYS",
    "ClinicalSections",
    "build_hhsb_text",
    "completeness_percentage",
    "empty_sections",
    "is_complete",
    "parse_clinical_text",
    "extract_red_flags",
    "SOEP_KEYS",
    "SoepSections",
    "parse_soep_text",
]
