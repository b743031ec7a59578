"""
HHSB intake-card parser.

HHSB: Hulpvraag (patient need), Historie (history), Stoornissen
(impairments), Beperkingen (limitations). The generator's output format
drifts, so each key tries its heading forms from most to least specific.

Rules:
- Stateless, single pass per key plus one independent red-flag pass
- Never raises; no input or no matches gives empty fields and no flags
- A key without any matching heading is "" and absent from `matched`
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Tuple

from .matchers import (
    bold_heading,
    completeness_percentage as _completeness,
    extract_sections,
    first_match,
    lettered_heading,
    plain_heading,
    section_matcher,
)
from .red_flags import extract_red_flags


logger = logging.getLogger(__name__)

HHSB_KEYS = ("patientNeed", "history", "impairments", "limitations")

# Any heading that can open the next section.
_STOP = (
    r"\*\*[ \t]*(?:[HSB][ \t]*[-:*]|Hulpvraag|Historie|Stoornissen|Beperkingen|Samenvatting|Anamnese|Rode)"
    r"|^[ \t]*(?:Hulpvraag|Historie|Stoornissen|Beperkingen|HV|[HSB]|Rode[ \t]*Vlag\w*)[ \t]*:"
)

HHSB_MATCHERS = {
    "patientNeed": [
        section_matcher(lettered_heading("H", "Hulpvraag"), _STOP),
        section_matcher(bold_heading("Hulpvraag"), _STOP),
        section_matcher(r"\*\*[ \t]*H[ \t]*[-:]?[ \t]*\*\*", _STOP),
        section_matcher(plain_heading("Hulpvraag"), _STOP),
        section_matcher(plain_heading("HV"), _STOP),
    ],
    "history": [
        section_matcher(lettered_heading("H", "Historie"), _STOP),
        section_matcher(bold_heading("Historie"), _STOP),
        section_matcher(plain_heading("Historie"), _STOP),
        section_matcher(plain_heading("H"), _STOP),
    ],
    "impairments": [
        section_matcher(lettered_heading("S", "Stoornissen"), _STOP),
        section_matcher(bold_heading("Stoornissen"), _STOP),
        section_matcher(plain_heading("Stoornissen"), _STOP),
        section_matcher(plain_heading("S"), _STOP),
    ],
    "limitations": [
        section_matcher(lettered_heading("B", "Beperkingen"), _STOP),
        section_matcher(bold_heading("Beperkingen"), _STOP),
        section_matcher(plain_heading("Beperkingen"), _STOP),
        section_matcher(plain_heading("B"), _STOP),
    ],
}

SUMMARY_MATCHERS = [
    section_matcher(r"\*\*[ \t]*Samenvatting(?:[ \t]*Anamnese)?[^*\n]*\*\*", _STOP),
    section_matcher(r"\*\*[ \t]*Anamnese[ \t]*Samenvatting[^*\n]*\*\*", _STOP),
]


@dataclass(frozen=True)
class ClinicalSections:
    """Structured view of one HHSB text."""

    fields: Mapping[str, str]
    red_flags: Tuple[str, ...] = ()
    raw_text: str = ""
    summary: str = ""
    matched: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def patient_need(self) -> str:
        return self.fields["patientNeed"]

    @property
    def history(self) -> str:
        return self.fields["history"]

    @property
    def impairments(self) -> str:
        return self.fields["impairments"]

    @property
    def limitations(self) -> str:
        return self.fields["limitations"]

    def to_dict(self) -> Dict:
        return {
            **self.fields,
            "redFlags": list(self.red_flags),
            "summary": self.summary,
            "matched": sorted(self.matched),
            "fullStructuredText": self.raw_text,
        }


def empty_sections(raw_text: str = "") -> ClinicalSections:
    return ClinicalSections(
        fields=MappingProxyType({key: "" for key in HHSB_KEYS}),
        raw_text=raw_text,
    )


def parse_clinical_text(raw_text) -> ClinicalSections:
    """
    Extract the four HHSB sections, the summary and red flags.

    Args:
        raw_text: generator output; anything that is not a non-empty str
            yields empty sections

    Returns:
        ClinicalSections with all four keys present
    """
    if not raw_text or not isinstance(raw_text, str):
        return empty_sections()

    try:
        fields, matched = extract_sections(raw_text, HHSB_MATCHERS)
        summary = first_match(SUMMARY_MATCHERS, raw_text) or ""
        red_flags = extract_red_flags(raw_text)
    except Exception as e:
        logger.error(f"Critical error while parsing HHSB text: {e}")
        return empty_sections(raw_text)

    return ClinicalSections(
        fields=MappingProxyType(fields),
        red_flags=red_flags,
        raw_text=raw_text,
        summary=summary,
        matched=matched,
    )


def is_complete(sections: ClinicalSections) -> bool:
    """True when all four HHSB sections have content."""
    return all(sections.fields.get(key, "").strip() for key in HHSB_KEYS)


def completeness_percentage(sections: ClinicalSections) -> int:
    return _completeness({key: sections.fields.get(key, "") for key in HHSB_KEYS})


def build_hhsb_text(sections: ClinicalSections) -> str:
    """Render sections back into the canonical bold-heading layout."""
    parts = []
    headings = (
        ("patientNeed", "**H - Hulpvraag:**"),
        ("history", "**H - Historie:**"),
        ("impairments", "**S - Stoornissen:**"),
        ("limitations", "**B - Beperkingen:**"),
    )
    for key, heading in headings:
        content = sections.fields.get(key, "")
        if content:
            parts.append(f"{heading}\n{content}")

    if sections.summary:
        parts.append(f"**Samenvatting Anamnese:**\n{sections.summary}")

    if sections.red_flags:
        flags = "\n".join(f"- {flag}" for flag in sections.red_flags)
        parts.append(f"**Rode Vlagen:**\n{flags}")

    return "\n\n".join(parts)
