"""
Heading-based extraction for ADR markdown.

Level-2 headings (``## Name``) delimit sections; a section runs until the next
level-2 heading or the end of the document. ``### Sub`` headings stay inside
the section that contains them.
"""
from __future__ import annotations

import re

UNTITLED = "Untitled"

_TITLE_PATTERN = re.compile(r"^#[ \t]+(.+?)[ \t]*$", re.MULTILINE)
_TITLE_LINE_PATTERN = re.compile(r"^#[ \t]+.+$\n?", re.MULTILINE)
_ADR_PREFIX_PATTERN = re.compile(r"^\[ADR-\d+\]\s*")
_METADATA_BLOCK_PATTERN = re.compile(
    r"^##[ \t]+Metadata[ \t]*\r?$.*?(?=^##\s|\Z)",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)


def _section_pattern(section_name: str) -> re.Pattern[str]:
    return re.compile(
        rf"^##[ \t]+{re.escape(section_name)}[ \t]*(?:\r?\n|\Z)(.*?)(?=^##\s|\Z)",
        re.IGNORECASE | re.MULTILINE | re.DOTALL,
    )


def extract_section(markdown: str, section_name: str) -> str:
    """Return the trimmed body of ``## section_name`` or "" when the heading is absent."""
    match = _section_pattern(section_name).search(markdown)
    if match is None:
        return ""
    return match.group(1).strip()


def extract_title(markdown: str) -> str:
    """Text of the first ``# `` heading without a leading ``[ADR-NNNN]`` tag."""
    match = _TITLE_PATTERN.search(markdown)
    if match is None:
        return UNTITLED

    title = match.group(1).strip()
    prefix = _ADR_PREFIX_PATTERN.match(title)
    if prefix:
        title = title[prefix.end():].strip()
    return title or UNTITLED


def strip_title_and_metadata(markdown: str) -> str:
    """Drop the title line and the Metadata section so the body starts at real content."""
    result = _TITLE_LINE_PATTERN.sub("", markdown, count=1)
    result = _METADATA_BLOCK_PATTERN.sub("", result, count=1)
    return result.lstrip()
