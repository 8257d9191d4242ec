from datetime import date
from pathlib import Path

import pytest

from adr_registry.parsing.parser import AdrParser
from adr_registry.schemas import AdrIndex, GeneratorConfig, Repository
from adr_registry.site.generator import SiteGenerator
from adr_registry.utils.helpers import load_json


@pytest.fixture
def index(sample_adr: str, adr_markdown) -> AdrIndex:
    parser = AdrParser()
    old = parser.parse(
        adr_markdown("0001", "Use <MySQL> & friends", status="Superseded", date="2025-01-01"),
        "payments", "acme/payments", "docs/adr/0001-mysql.md", "0001-mysql.md", "https://example.test/1",
    )
    new = parser.parse(
        sample_adr, "payments", "acme/payments", "docs/adr/0002-postgres.md", "0002-postgres.md",
        "https://example.test/2",
    )
    proposed = parser.parse(
        adr_markdown("0003", "Adopt Kafka", status="Proposed"),
        "payments", "acme/payments", "docs/adr/0003-kafka.md", "0003-kafka.md", "https://example.test/3",
    ).model_copy(
        update={
            "id": "payments_0003_pr12",
            "is_from_pull_request": True,
            "pull_request_number": 12,
            "pull_request_title": "Kafka ADR",
            "pull_request_url": "https://github.com/acme/payments/pull/12",
            "pull_request_author": "erin",
            "source_branch": "adr/kafka",
        }
    )
    repo = Repository(name="payments", full_name="acme/payments", adrs=[old, new])
    return AdrIndex(repositories=[repo], adrs=[old, new, proposed])


def test_generate_writes_every_page(config: GeneratorConfig, index: AdrIndex) -> None:
    out = SiteGenerator(config).generate(index)

    for page in (
        "index.html",
        "adrs/index.html",
        "adr/payments_0001.html",
        "adr/payments_0002.html",
        "adr/payments_0003_pr12.html",
        "repos/index.html",
        "repos/payments.html",
        "proposed/index.html",
        "css/style.css",
        "js/app.js",
        "adrs.json",
    ):
        assert (out / page).is_file(), page


def test_output_directory_is_recreated(config: GeneratorConfig, index: AdrIndex) -> None:
    stale = Path(config.output_path) / "adr" / "gone.html"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")

    SiteGenerator(config).generate(index)

    assert not stale.exists()


def test_titles_are_html_escaped(config: GeneratorConfig, index: AdrIndex) -> None:
    out = SiteGenerator(config).generate(index)
    html = (out / "adr" / "payments_0001.html").read_text(encoding="utf-8")

    assert "Use &lt;MySQL&gt; &amp; friends" in html
    assert "<MySQL>" not in html


def test_detail_page_links_supersession(config: GeneratorConfig, index: AdrIndex) -> None:
    out = SiteGenerator(config).generate(index)
    html = (out / "adr" / "payments_0002.html").read_text(encoding="utf-8")

    assert "/adr/payments_0001.html" in html
    assert "data-pagefind-body" in html
    assert "<strong>PostgreSQL</strong>" in html
    assert "Alice Chen, Bob Smith" in html


def test_proposed_page_lists_pull_request_adrs(config: GeneratorConfig, index: AdrIndex) -> None:
    out = SiteGenerator(config).generate(index)
    html = (out / "proposed" / "index.html").read_text(encoding="utf-8")

    assert "Adopt Kafka" in html
    assert "PR #12" in html
    assert "Use PostgreSQL" not in html


def test_base_url_prefixes_links(config: GeneratorConfig, index: AdrIndex) -> None:
    config.base_url = "/registry"
    out = SiteGenerator(config).generate(index)
    html = (out / "index.html").read_text(encoding="utf-8")

    assert 'href="/registry/css/style.css"' in html
    assert 'href="/registry/repos/payments.html"' in html


def test_snapshot_contents(config: GeneratorConfig, index: AdrIndex) -> None:
    out = SiteGenerator(config).generate(index)
    snapshot = load_json(out / "adrs.json")

    assert snapshot["total_adr_count"] == 3
    assert snapshot["repository_count"] == 1
    assert [a["id"] for a in snapshot["adrs"]] == ["payments_0002", "payments_0003_pr12", "payments_0001"]
    first = snapshot["adrs"][0]
    assert first["date"] == date(2026, 1, 9).isoformat()
    assert first["status_slug"] == "accepted"
    assert "raw_content" not in first
    assert "rendered_body" not in first
