"""
Red-flag extraction.

Two families, merged and deduplicated by exact text:
- a labeled block ("Rode Vlagen:") with one flag per line
- bracketed markers ("[RODE VLAG: ...]") anywhere in the text
"""

import re
from typing import List, Tuple


# A bold line or a plain HHSB/SOEP `Label:` line ends the block.
_BLOCK_END = (
    r"^[ \t]*\*\*"
    r"|^[ \t]*(?:Hulpvraag|Historie|Stoornissen|Beperkingen|HV"
    r"|Subjectief|Objectief|Evaluatie|Plan|Samenvatting[^:\n]*|Anamnese|[HSBOEP])[ \t]*:"
)

RED_FLAG_BLOCK = re.compile(
    r"(?:\*\*[ \t]*Rode[ \t]*Vlag\w*[^*\n]*\*\*|^[ \t]*Rode[ \t]*Vlag\w*[ \t]*:)"
    r"(?P<content>.*?)(?=" + _BLOCK_END + r"|\Z)",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)

RED_FLAG_MARKER = re.compile(r"\[\s*RODE\s*VLAG\s*:?\s*([^\]]+)\]", re.IGNORECASE)

_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def _clean_line(line: str) -> str:
    line = _LIST_MARKER.sub("", line, count=1).strip()
    marker = RED_FLAG_MARKER.fullmatch(line)
    if marker:
        return marker.group(1).strip()
    return line


def block_flags(text: str) -> List[str]:
    """Flags listed under the first red-flag heading."""
    block = RED_FLAG_BLOCK.search(text)
    if block is None:
        return []

    content = block.group("content").lstrip(":")
    flags = []
    for line in content.splitlines():
        flag = _clean_line(line)
        if flag:
            flags.append(flag)
    return flags


def marker_flags(text: str) -> List[str]:
    return [m.group(1).strip() for m in RED_FLAG_MARKER.finditer(text) if m.group(1).strip()]


def extract_red_flags(text: str) -> Tuple[str, ...]:
    """All red flags in `text`, deduplicated, first occurrence first."""
    if not text or not isinstance(text, str):
        return ()
    return tuple(dict.fromkeys(block_flags(text) + marker_flags(text)))
