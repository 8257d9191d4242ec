"""
Metadata Table Extraction
-------------------------
Reads the key/value pipe table that ADRs conventionally keep under
``## Metadata`` and parses the values that need more than a string:

    | Field    | Value        |
    |----------|--------------|
    | Date     | 2026-01-09   |
    | Status   | Accepted     |
    | Deciders | Alice, Bob   |

The scan is not anchored to the Metadata heading: every pipe-delimited row in
the document contributes, so the first table-like block an author writes is
what gets read.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import date, datetime
from typing import Optional

from dateutil import parser as dtparser

_SEPARATOR_CHARS = frozenset("-: ")

# A value is a date only if year, month and day all come from the text:
# parsing against two defaults that differ in every field must agree.
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


class MetadataTable(Mapping[str, str]):
    """Read-only mapping with case-insensitive keys; iteration keeps the author's spelling."""

    def __init__(self, rows: list[tuple[str, str]] | None = None) -> None:
        self._data: dict[str, tuple[str, str]] = {}
        for key, value in rows or []:
            self._data[key.casefold()] = (key, value)

    def __getitem__(self, key: str) -> str:
        return self._data[key.casefold()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._data

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MetadataTable({dict(self.items())!r})"


def _split_row(line: str) -> list[str] | None:
    stripped = line.strip()
    if len(stripped) < 2 or not (stripped.startswith("|") and stripped.endswith("|")):
        return None
    return [cell.strip() for cell in stripped[1:-1].split("|")]


def _is_separator(cell: str) -> bool:
    return all(ch in _SEPARATOR_CHARS for ch in cell)


def extract_metadata_table(markdown: str) -> MetadataTable:
    """
    Collect ``key -> value`` pairs from every pipe-table row in the document.

    The first cell is the key and the second the value; rows with fewer than
    two cells and header-separator rows (``|---|:--:|``) are ignored. A key seen
    again later overwrites the earlier value.
    """
    rows: list[tuple[str, str]] = []
    for line in markdown.splitlines():
        cells = _split_row(line)
        if cells is None or len(cells) < 2:
            continue
        key, value = cells[0], cells[1]
        if _is_separator(key):
            continue
        rows.append((key, value))
    return MetadataTable(rows)


def parse_date(value: str) -> Optional[date]:
    """Parse a metadata date; anything unparseable yields None."""
    if not value or not value.strip():
        return None
    text = value.strip()

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        first, second = (dtparser.parse(text, default=d).date() for d in _DATE_DEFAULTS)
    except (ValueError, OverflowError, TypeError):
        return None
    return first if first == second else None


def parse_deciders(value: str) -> list[str]:
    """Split a comma-separated deciders cell, unwrapping ``[Placeholder]`` names."""
    if not value or not value.strip():
        return []

    deciders: list[str] = []
    for piece in value.split(","):
        name = piece.strip()
        if name.startswith("["):
            name = name[1:]
        if name.endswith("]"):
            name = name[:-1]
        name = name.strip()
        if name:
            deciders.append(name)
    return deciders
