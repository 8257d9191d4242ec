"""
Collection Pipeline
-------------------
Drives one collector over every selected repository and assembles the
in-memory AdrIndex the site generator renders. The index is rebuilt from
scratch on every run.

Flow:
    1. run_health_check()   - verify the source is reachable
    2. build_index()        - discover repositories, collect merged ADRs,
                              then ADRs proposed in open pull requests
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from loguru import logger
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from adr_registry.collection.base_collector import BaseCollector
from adr_registry.schemas import Adr, AdrIndex, CollectionStats, GeneratorConfig

console = Console()


class CollectionPipeline:
    """Builds the AdrIndex from one collector."""

    def __init__(self, config: GeneratorConfig, collector: BaseCollector) -> None:
        self.config = config
        self.collector = collector
        self.stats = CollectionStats()
        self._seen_ids: set[str] = set()

    # --- Public API -----------------------------------------------------------

    async def run_health_check(self) -> bool:
        name = self.collector.__class__.__name__
        ok = await self.collector.health_check()
        icon = "[OK]" if ok else "[FAIL]"
        level = "INFO" if ok else "WARNING"
        logger.log(level, f"  {icon} {name}: {'healthy' if ok else 'UNREACHABLE'}")
        return ok

    async def build_index(self) -> AdrIndex:
        """Scan every repository and return the populated index."""
        self.stats = CollectionStats()
        self._seen_ids = set()
        index = AdrIndex()

        repositories = await self.collector.discover_repositories()
        logger.info(f"[Pipeline] Scanning {len(repositories)} repositories...")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("[cyan]Repositories[/cyan]", total=len(repositories))

            for repo in repositories:
                progress.update(task_id, description=f"[cyan]{repo.name}[/cyan]")
                batch = [self._unique(adr) async for adr in self.collector.safe_collect(repo)]

                if batch:
                    repo.adrs = batch
                    index.repositories.append(repo)
                    index.adrs.extend(batch)
                self.stats.by_repository[repo.name] = len(batch)
                self.stats.repositories_scanned += 1
                progress.advance(task_id)
                logger.info(f"[Pipeline] {repo.name}: {len(batch)} ADR(s)")

                await self._throttle()

        if self.config.include_pull_requests:
            logger.info("[Pipeline] Scanning for ADRs in open pull requests...")
            for repo in repositories:
                async for adr in self.collector.safe_collect_pull_requests(repo):
                    index.adrs.append(self._unique(adr))
                await self._throttle()

        self.stats.files_failed = self.collector.file_error_count
        self.stats.files_seen = len(index.adrs) + self.stats.files_failed
        self.stats.sources_failed = self.collector.source_error_count
        self.stats.completed_at = datetime.now(timezone.utc)

        logger.info(
            f"[Pipeline] Total: {index.merged_adr_count} merged ADRs, "
            f"{index.proposed_adr_count} proposed ADRs across "
            f"{index.repository_count} repositories"
        )
        return index

    # --- Internals ------------------------------------------------------------

    def _unique(self, adr: Adr) -> Adr:
        """Suffix ``_2``, ``_3``... onto ids already present in this run."""
        if adr.id not in self._seen_ids:
            self._seen_ids.add(adr.id)
            return adr

        n = 2
        while f"{adr.id}_{n}" in self._seen_ids:
            n += 1
        new_id = f"{adr.id}_{n}"
        logger.warning(f"[Pipeline] Duplicate ADR id {adr.id} ({adr.file_path}); using {new_id}")
        self.stats.errors.append(f"duplicate id {adr.id}: {adr.file_path}")
        self._seen_ids.add(new_id)
        return adr.model_copy(update={"id": new_id})

    async def _throttle(self) -> None:
        if self.collector.request_delay > 0:
            await asyncio.sleep(self.collector.request_delay)
