"""
SOEP follow-up note parser.

SOEP: Subjectief, Objectief, Evaluatie, Plan. Same matcher policy as the
HHSB parser: ordered heading forms per key, first match wins.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Tuple

from .matchers import (
    bold_heading,
    extract_sections,
    first_match,
    lettered_heading,
    plain_heading,
    section_matcher,
)
from .red_flags import extract_red_flags


logger = logging.getLogger(__name__)

SOEP_KEYS = ("subjective", "objective", "evaluation", "plan")

_STOP = (
    r"\*\*[ \t]*(?:[SOEP][ \t]*[-:*]|Subjectief|Objectief|Evaluatie|Plan\b|Samenvatting|Rode)"
    r"|^[ \t]*(?:Subjectief|Objectief|Evaluatie|Plan|[SOEP]|Rode[ \t]*Vlag\w*)[ \t]*:"
)


def _key_matchers(letter: str, label: str):
    return [
        section_matcher(lettered_heading(letter, label), _STOP),
        section_matcher(bold_heading(label), _STOP),
        section_matcher(plain_heading(label), _STOP),
        section_matcher(plain_heading(letter), _STOP),
    ]


SOEP_MATCHERS = {
    "subjective": _key_matchers("S", "Subjectief"),
    "objective": _key_matchers("O", "Objectief"),
    "evaluation": _key_matchers("E", "Evaluatie"),
    "plan": _key_matchers("P", r"Plan\b"),
}

SUMMARY_MATCHERS = [
    section_matcher(r"\*\*[ \t]*Samenvatting(?:[ \t]*Consult)?[^*\n]*\*\*", _STOP),
    section_matcher(r"\*\*[ \t]*Consult[ \t]*Samenvatting[^*\n]*\*\*", _STOP),
]


@dataclass(frozen=True)
class SoepSections:
    """Structured view of one SOEP text."""

    fields: Mapping[str, str]
    red_flags: Tuple[str, ...] = ()
    raw_text: str = ""
    summary: str = ""
    matched: FrozenSet[str] = field(default_factory=frozenset)

    def to_dict(self) -> Dict:
        return {
            **self.fields,
            "redFlags": list(self.red_flags),
            "consultSummary": self.summary,
            "matched": sorted(self.matched),
            "fullStructuredText": self.raw_text,
        }


def empty_soep(raw_text: str = "") -> SoepSections:
    return SoepSections(
        fields=MappingProxyType({key: "" for key in SOEP_KEYS}),
        raw_text=raw_text,
    )


def parse_soep_text(raw_text) -> SoepSections:
    """Extract SOEP sections, consult summary and red flags. Never raises."""
    if not raw_text or not isinstance(raw_text, str):
        return empty_soep()

    try:
        fields, matched = extract_sections(raw_text, SOEP_MATCHERS)
        summary = first_match(SUMMARY_MATCHERS, raw_text) or ""
        red_flags = extract_red_flags(raw_text)
    except Exception as e:
        logger.error(f"Error parsing SOEP text: {e}")
        return empty_soep(raw_text)

    return SoepSections(
        fields=MappingProxyType(fields),
        red_flags=red_flags,
        raw_text=raw_text,
        summary=summary,
        matched=matched,
    )
