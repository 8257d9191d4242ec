"""
Core Pydantic schemas for the ADR Registry.

The parser produces Adr records, collectors group them into Repository
objects, and the pipeline assembles everything into one AdrIndex that the
site generator renders. Configuration models live here too so every stage
shares one definition.
"""
from __future__ import annotations

import datetime as dt
import uuid
from collections import Counter
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from adr_registry.utils.helpers import truncate_text

DEFAULT_NUMBER = "0000"
TEMPLATE_FILE_NAME = "0000-template.md"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Core Record -------------------------------------------------------------

class Adr(BaseModel):
    """
    One parsed Architecture Decision Record.

    Built once per file by AdrParser and never mutated afterwards; callers
    that need a variant (e.g. a pull-request copy with a suffixed id) use
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    number: str = DEFAULT_NUMBER
    title: str = "Untitled"
    status: str = "Unknown"
    date: Optional[dt.date] = None
    deciders: list[str] = Field(default_factory=list)

    context: str = ""
    decision: str = ""
    consequences: str = ""

    raw_content: str = ""               # Markdown exactly as read
    rendered_body: str = ""             # HTML without title + metadata block

    supersedes_id: Optional[str] = None
    superseded_by_id: Optional[str] = None

    # Provenance (supplied by the collector)
    repository_name: str = ""
    repository_full_name: str = ""
    file_path: str = ""
    source_url: str = ""

    # Open pull request copies
    is_from_pull_request: bool = False
    pull_request_number: Optional[int] = None
    pull_request_title: Optional[str] = None
    pull_request_url: Optional[str] = None
    pull_request_author: Optional[str] = None
    source_branch: Optional[str] = None

    @computed_field
    @property
    def status_slug(self) -> str:
        """Lower-case single-token status, used for badge CSS classes."""
        slug = "-".join(self.status.lower().split())
        return slug or "unknown"

    @computed_field
    @property
    def excerpt(self) -> str:
        return truncate_text(" ".join(self.context.split()), 200)


class Repository(BaseModel):
    """A source repository and the merged ADRs found in it."""

    name: str
    full_name: str
    default_branch: str = "main"
    adrs: list[Adr] = Field(default_factory=list)

    @computed_field
    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.full_name}"

    @property
    def status_counts(self) -> dict[str, int]:
        return dict(Counter(a.status for a in self.adrs))

    @property
    def sorted_adrs(self) -> list[Adr]:
        return sorted(self.adrs, key=lambda a: a.number)


class PullRequestInfo(BaseModel):
    """An open pull request that adds or changes ADR files."""

    number: int
    title: str
    url: str
    author: str = "unknown"
    source_branch: str
    repository_full_name: str
    head_repository_full_name: str = ""
    adr_files: list[str] = Field(default_factory=list)


# --- Aggregate Index ---------------------------------------------------------

class AdrIndex(BaseModel):
    """Every repository and ADR seen in one run, plus the views the site needs."""

    repositories: list[Repository] = Field(default_factory=list)
    adrs: list[Adr] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)

    @property
    def total_adr_count(self) -> int:
        return len(self.adrs)

    @property
    def repository_count(self) -> int:
        return sum(1 for r in self.repositories if r.adrs)

    @property
    def adrs_by_status(self) -> dict[str, int]:
        return dict(Counter(a.status for a in self.adrs))

    @property
    def merged_adrs(self) -> list[Adr]:
        return [a for a in self.adrs if not a.is_from_pull_request]

    @property
    def proposed_adrs(self) -> list[Adr]:
        prs = [a for a in self.adrs if a.is_from_pull_request]
        return sorted(prs, key=lambda a: a.pull_request_number or 0, reverse=True)

    @property
    def merged_adr_count(self) -> int:
        return len(self.merged_adrs)

    @property
    def proposed_adr_count(self) -> int:
        return len(self.proposed_adrs)

    @property
    def recent_adrs(self) -> list[Adr]:
        """Ten newest merged ADRs that carry a date."""
        dated = [a for a in self.merged_adrs if a.date is not None]
        return sorted(dated, key=lambda a: a.date, reverse=True)[:10]

    @property
    def sorted_adrs(self) -> list[Adr]:
        """Newest first (undated last), then repository name, then number."""
        by_name = sorted(self.adrs, key=lambda a: (a.repository_name, a.number))
        return sorted(by_name, key=lambda a: a.date or date.min, reverse=True)

    @property
    def sorted_repositories(self) -> list[Repository]:
        return sorted(self.repositories, key=lambda r: r.name)

    def get(self, adr_id: str | None) -> Optional[Adr]:
        if not adr_id:
            return None
        for adr in self.adrs:
            if adr.id == adr_id:
                return adr
        return None


# --- Configuration -----------------------------------------------------------

class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = "logs/adr-registry.log"


class GeneratorConfig(BaseModel):
    """Settings for one generator run (config/config.yaml + environment)."""

    organization: str = ""
    discover_all: bool = True
    adr_path: str = "docs/adr"
    exclude: list[str] = Field(default_factory=list)
    include: list[str] = Field(default_factory=list)

    site_title: str = "Architecture Decision Records"
    site_description: str = "Cross-project ADR registry"
    base_url: str = ""
    output_path: str = "docs"

    local_mode: bool = False
    local_path: str = ""

    include_pull_requests: bool = True
    request_delay: float = 0.1          # seconds between GitHub repository scans
    github_api_url: str = "https://api.github.com"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("adr_path")
    @classmethod
    def _normalise_adr_path(cls, value: str) -> str:
        return value.replace("\\", "/").strip("/")

    @field_validator("base_url")
    @classmethod
    def _normalise_base_url(cls, value: str) -> str:
        return value.rstrip("/")


class GitHubAppConfig(BaseModel):
    app_id: int
    installation_id: int
    private_key_path: str


# --- Run Metadata ------------------------------------------------------------

class CollectionStats(BaseModel):
    """Aggregated statistics from a collection run."""

    run_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    repositories_scanned: int = 0
    files_seen: int = 0
    files_failed: int = 0
    sources_failed: int = 0             # repositories or PR listings that could not be scanned
    by_repository: dict[str, int] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
