from datetime import date

import pytest

from adr_registry.parsing.metadata import (
    MetadataTable,
    extract_metadata_table,
    parse_date,
    parse_deciders,
)


def test_two_column_rows_become_entries() -> None:
    md = (
        "## Metadata\n\n"
        "| Field | Value |\n"
        "|-------|-------|\n"
        "| Date | 2026-01-09 |\n"
        "| Status | Accepted |\n"
    )
    table = extract_metadata_table(md)

    assert table["Date"] == "2026-01-09"
    assert table["status"] == "Accepted"
    assert table["STATUS"] == "Accepted"
    # The header row is an ordinary row
    assert table["Field"] == "Value"


def test_separator_rows_are_never_keys() -> None:
    md = "| Key | Value |\n|:---|:---:|\n| - | x |\n| a | b |\n"
    table = extract_metadata_table(md)

    assert set(table) == {"Key", "a"}
    assert not any(set(k) <= set("-: ") for k in table)


def test_scan_is_not_anchored_to_metadata_heading() -> None:
    md = (
        "# Title\n\n"
        "## Context\n\n"
        "| Option | Cost |\n"
        "|--------|------|\n"
        "| Status | Draft |\n\n"
        "## Metadata\n\n"
        "| Date | 2026-02-02 |\n"
    )
    table = extract_metadata_table(md)

    assert table["Option"] == "Cost"
    assert table["Status"] == "Draft"
    assert table["Date"] == "2026-02-02"


def test_later_row_overwrites_earlier_key() -> None:
    table = extract_metadata_table("| Status | Proposed |\n| status | Accepted |\n")
    assert len(table) == 1
    assert table["Status"] == "Accepted"
    assert list(table) == ["status"]


def test_rows_need_two_cells_and_outer_pipes() -> None:
    md = "| lonely |\nStatus | Accepted\n|Status|Accepted\n| Deciders | Alice | extra |\n"
    table = extract_metadata_table(md)
    assert dict(table.items()) == {"Deciders": "Alice"}


def test_empty_document_gives_empty_table() -> None:
    table = extract_metadata_table("")
    assert len(table) == 0
    assert table.get("Status", "Unknown") == "Unknown"


def test_metadata_table_membership() -> None:
    table = MetadataTable([("Superseded by", "ADR-0003")])
    assert "superseded BY" in table
    assert 42 not in table
    with pytest.raises(KeyError):
        table["Supersedes"]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2026-01-09", date(2026, 1, 9)),
        ("  2026-01-09  ", date(2026, 1, 9)),
        ("January 9, 2026", date(2026, 1, 9)),
        ("2026/01/09", date(2026, 1, 9)),
    ],
)
def test_parse_date_accepts_common_formats(value: str, expected: date) -> None:
    assert parse_date(value) == expected


@pytest.mark.parametrize(
    "value",
    ["", "   ", "not-a-date", "YYYY-MM-DD", "TBD", "March", "5", "10:30", "March 2026", "2026", "9 May"],
)
def test_parse_date_rejects_unparseable_values(value: str) -> None:
    assert parse_date(value) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Alice, Bob, Charlie", ["Alice", "Bob", "Charlie"]),
        ("[Team Lead], [Architect]", ["Team Lead", "Architect"]),
        ("Alice,, ,Bob", ["Alice", "Bob"]),
        ("Solo", ["Solo"]),
        ("", []),
        ("   ", []),
    ],
)
def test_parse_deciders(value: str, expected: list[str]) -> None:
    assert parse_deciders(value) == expected
