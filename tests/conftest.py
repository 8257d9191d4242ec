from pathlib import Path

import pytest

from adr_registry.schemas import GeneratorConfig

SAMPLE_ADR = """# [ADR-0002] Use PostgreSQL for persistence

## Metadata

| Field         | Value                      |
|---------------|----------------------------|
| Date          | 2026-01-09                 |
| Status        | Accepted                   |
| Deciders      | Alice Chen, [Bob Smith]    |
| Supersedes    | ADR-0001                   |

## Context

We need a relational database.

### Constraints

- Managed service available

## Decision

Use **PostgreSQL** 16.

## Consequences

Team must learn `psql`.
"""


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_adr_markdown(
    number: str,
    title: str,
    status: str = "Accepted",
    date: str = "2026-01-01",
    context: str = "Some context.",
) -> str:
    return (
        f"# [ADR-{number}] {title}\n\n"
        "## Metadata\n\n"
        "| Field | Value |\n"
        "|-------|-------|\n"
        f"| Date | {date} |\n"
        f"| Status | {status} |\n\n"
        f"## Context\n\n{context}\n\n"
        "## Decision\n\nDo it.\n"
    )


@pytest.fixture
def sample_adr() -> str:
    return SAMPLE_ADR


@pytest.fixture
def adr_markdown():
    return make_adr_markdown


@pytest.fixture
def config(tmp_path: Path) -> GeneratorConfig:
    return GeneratorConfig(
        organization="acme",
        output_path=str(tmp_path / "site"),
        local_path=str(tmp_path / "repos"),
        request_delay=0.0,
        logging={"level": "DEBUG", "file": None},
    )


@pytest.fixture
def repos_root(tmp_path: Path) -> Path:
    """Two checked-out repositories with ADRs, one without an ADR directory."""
    root = tmp_path / "repos"
    write_file(root / "payments" / "docs" / "adr" / "0001-use-postgres.md", make_adr_markdown("0001", "Use Postgres"))
    write_file(
        root / "payments" / "docs" / "adr" / "0002-add-cache.md",
        make_adr_markdown("0002", "Add a cache", status="Proposed", date="2026-02-01"),
    )
    write_file(root / "payments" / "docs" / "adr" / "0000-template.md", make_adr_markdown("NNNN", "Title"))
    write_file(root / "payments" / "docs" / "adr" / "README.txt", "not an ADR")
    write_file(
        root / "users" / "docs" / "adr" / "0001-adopt-oauth.md",
        make_adr_markdown("0001", "Adopt OAuth", date="2025-06-30"),
    )
    (root / "website").mkdir(parents=True)
    return root
