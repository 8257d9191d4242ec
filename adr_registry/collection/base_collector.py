"""Abstract base class for all ADR collectors."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from loguru import logger

from adr_registry.parsing.parser import AdrParser
from adr_registry.schemas import TEMPLATE_FILE_NAME, Adr, GeneratorConfig, Repository
from adr_registry.utils.helpers import matches_wildcard


class BaseCollector(ABC):
    """
    All collectors inherit from this class.

    Guarantees a uniform async interface so the CollectionPipeline can treat
    the local filesystem and the GitHub API identically.
    """

    source_name: str = "base"
    request_delay: float = 0.0

    def __init__(self, config: GeneratorConfig, parser: AdrParser | None = None) -> None:
        self.config = config
        self.parser = parser or AdrParser()
        self.collected_count: int = 0
        self.file_error_count: int = 0      # one unreadable or unparseable ADR file
        self.source_error_count: int = 0    # a whole repository or PR listing lost

    @property
    def error_count(self) -> int:
        return self.file_error_count + self.source_error_count

    @abstractmethod
    async def discover_repositories(self) -> list[Repository]:
        """Return the repositories that should be scanned."""
        ...

    @abstractmethod
    async def collect(self, repo: Repository) -> AsyncIterator[Adr]:
        """Yield the merged ADRs of one repository."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the source is reachable and responsive."""
        ...

    async def collect_pull_requests(self, repo: Repository) -> AsyncIterator[Adr]:
        """Yield ADRs proposed in open pull requests (none by default)."""
        return
        yield

    async def aclose(self) -> None:
        """Release any held resources."""

    # --- Error isolation --------------------------------------------------------

    async def safe_collect(self, repo: Repository) -> AsyncIterator[Adr]:
        """collect() wrapped with per-repository error isolation."""
        try:
            async for adr in self.collect(repo):
                self.collected_count += 1
                yield adr
        except Exception as exc:
            self.source_error_count += 1
            logger.error(f"[{self.__class__.__name__}] Unhandled error scanning {repo.full_name}: {exc}")

    async def safe_collect_pull_requests(self, repo: Repository) -> AsyncIterator[Adr]:
        try:
            async for adr in self.collect_pull_requests(repo):
                self.collected_count += 1
                yield adr
        except Exception as exc:
            self.source_error_count += 1
            logger.warning(f"[{self.__class__.__name__}] Failed to scan PRs for {repo.full_name}: {exc}")

    def parse_file(
        self,
        markdown: str,
        repo: Repository,
        file_path: str,
        file_name: str,
        source_url: str,
    ) -> Adr | None:
        """Parse one file; a failure is logged and counted, never raised."""
        try:
            return self.parser.parse(
                markdown,
                repo.name,
                repo.full_name,
                file_path,
                file_name,
                source_url,
            )
        except Exception as exc:
            self.file_error_count += 1
            logger.warning(f"[{self.source_name}] Failed to parse {file_name}: {exc}")
            return None

    # --- Selection rules --------------------------------------------------------

    def is_selected(self, repo_full_name: str) -> bool:
        """Apply exclude patterns, then include patterns when discover_all is off."""
        if any(matches_wildcard(repo_full_name, p) for p in self.config.exclude):
            return False
        if self.config.discover_all or not self.config.include:
            return True
        return any(matches_wildcard(repo_full_name, p) for p in self.config.include)

    @staticmethod
    def is_adr_file(file_name: str) -> bool:
        name = file_name.rsplit("/", 1)[-1].lower()
        return name.endswith(".md") and name != TEMPLATE_FILE_NAME
