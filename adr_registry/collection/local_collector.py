"""
Local Filesystem Collector
--------------------------
Reads ADRs from a directory of checked-out repositories:

    <local_path>/
        payment-service/docs/adr/0001-use-postgres.md
        user-management/docs/adr/0001-adopt-oauth.md

Each immediate sub-directory is treated as one repository. File reads run in
a thread pool so the pipeline stays async-friendly.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator

from loguru import logger

from adr_registry.collection.base_collector import BaseCollector
from adr_registry.parsing.parser import AdrParser
from adr_registry.schemas import Adr, GeneratorConfig, Repository


class LocalFileSystemCollector(BaseCollector):
    """Collects ADRs from repository folders on disk (no GitHub access needed)."""

    source_name = "Local"

    def __init__(
        self,
        config: GeneratorConfig,
        parser: AdrParser | None = None,
        base_path: str | Path | None = None,
    ) -> None:
        super().__init__(config, parser)
        self.base_path = Path(base_path or config.local_path)

    def _adr_dir(self, repo_dir: Path) -> Path:
        return repo_dir.joinpath(*self.config.adr_path.split("/"))

    async def health_check(self) -> bool:
        ok = self.base_path.is_dir()
        if not ok:
            logger.warning(f"[Local] Directory not found: {self.base_path}")
        return ok

    async def discover_repositories(self) -> list[Repository]:
        logger.info(f"[Local] Scanning local directory: {self.base_path}")
        repositories: list[Repository] = []

        if not self.base_path.is_dir():
            logger.warning(f"[Local] Directory not found: {self.base_path}")
            return repositories

        for repo_dir in sorted(p for p in self.base_path.iterdir() if p.is_dir()):
            name = repo_dir.name
            full_name = f"{self.config.organization}/{name}"

            if not self.is_selected(full_name):
                logger.debug(f"[Local] Skipping {name} (excluded)")
                continue

            if self._adr_dir(repo_dir).is_dir():
                repositories.append(Repository(name=name, full_name=full_name))

        logger.info(f"[Local] Found {len(repositories)} repositories with ADR directories")
        return repositories

    async def collect(self, repo: Repository) -> AsyncIterator[Adr]:
        """Yield one Adr per markdown file in the repository's ADR directory."""
        adr_dir = self._adr_dir(self.base_path / repo.name)
        if not adr_dir.is_dir():
            logger.info(f"[Local] {repo.name}: no ADR directory found")
            return

        files = sorted(
            p for p in adr_dir.iterdir() if p.is_file() and self.is_adr_file(p.name)
        )
        logger.info(f"[Local] {repo.name}: {len(files)} ADR file(s)")

        loop = asyncio.get_running_loop()
        for path in files:
            try:
                markdown = await loop.run_in_executor(None, lambda p=path: p.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as exc:
                self.file_error_count += 1
                logger.warning(f"[Local] Failed to read {path.name}: {exc}")
                continue

            file_path = f"{self.config.adr_path}/{path.name}"
            source_url = f"https://github.com/{repo.full_name}/blob/{repo.default_branch}/{file_path}"

            adr = self.parse_file(markdown, repo, file_path, path.name, source_url)
            if adr is not None:
                yield adr
