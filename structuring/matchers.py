"""
Ordered section matchers.

A matcher looks for one heading form in a text and returns the trimmed
content that follows it, up to the next known heading. Each section key
owns an ordered list of matchers; the first matcher that matches decides
the content, even when that content is empty.
"""

import re
from typing import Callable, Dict, FrozenSet, Mapping, Optional, Sequence, Tuple


Matcher = Callable[[str], Optional[str]]

_FLAGS = re.IGNORECASE | re.MULTILINE | re.DOTALL


def clean_content(content: str) -> str:
    """Trim whitespace and a stray colon left behind by `**Heading**:`."""
    content = content.strip()
    if content.startswith(":"):
        content = content[1:].strip()
    return content


def section_matcher(heading: str, stop: str) -> Matcher:
    """
    Build a matcher for one heading form.

    Args:
        heading: regex for the heading itself
        stop: regex alternatives marking where the section ends
    """
    pattern = re.compile(
        heading + r"(?P<content>.*?)(?=" + stop + r"|\Z)",
        _FLAGS,
    )

    def match(text: str) -> Optional[str]:
        found = pattern.search(text)
        if found is None:
            return None
        return clean_content(found.group("content"))

    match.pattern = pattern
    return match


def bold_heading(*labels: str) -> str:
    """`**Label**`, `**Label:**` or `**Label (anything):**`."""
    return r"\*\*[ \t]*(?:" + "|".join(labels) + r")[^*\n]*\*\*"


def lettered_heading(letter: str, label: str) -> str:
    """`**H - Historie:**`, `**H: Historie**` and friends."""
    return r"\*\*[ \t]*" + letter + r"[ \t]*[-:]?[ \t]*" + label + r"[^*\n]*\*\*"


def plain_heading(*labels: str) -> str:
    """A plain `Label:` at the start of a line."""
    return r"^[ \t]*(?:" + "|".join(labels) + r")[ \t]*:"


def first_match(matchers: Sequence[Matcher], text: str) -> Optional[str]:
    """Content of the first matcher that matches, or None."""
    for matcher in matchers:
        content = matcher(text)
        if content is not None:
            return content
    return None


def extract_sections(
    text: str,
    table: Mapping[str, Sequence[Matcher]],
) -> Tuple[Dict[str, str], FrozenSet[str]]:
    """
    Run every key's matchers over `text`.

    Returns:
        (fields, matched): every key present in `fields`, "" when unmatched;
        `matched` holds the keys for which some matcher matched
    """
    fields: Dict[str, str] = {}
    matched = set()
    for key, matchers in table.items():
        content = first_match(matchers, text)
        if content is None:
            fields[key] = ""
        else:
            fields[key] = content
            matched.add(key)
    return fields, frozenset(matched)


def completeness_percentage(fields: Mapping[str, str]) -> int:
    """Share of non-blank fields, rounded to a whole percent."""
    if not fields:
        return 0
    filled = sum(1 for value in fields.values() if value and value.strip())
    return round(filled / len(fields) * 100)
