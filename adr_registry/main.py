"""
ADR Registry - CLI Entry Point
------------------------------
Exposes Typer commands for building the registry site.

Usage:
    python -m adr_registry.main generate                      # GitHub API mode
    python -m adr_registry.main generate --local -p ./repos   # Local filesystem mode
    python -m adr_registry.main generate --dry-run            # Validate config only
    python -m adr_registry.main parse docs/adr/0001-x.md      # Parse a single ADR
"""
from __future__ import annotations

import sys

# Windows cp1252 terminal fix: force UTF-8 so ADR content with emoji does not
# crash the Rich console renderer.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

import httpx
import typer
from dotenv import load_dotenv
from loguru import logger
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from adr_registry.collection.base_collector import BaseCollector
from adr_registry.collection.github_auth import GitHubAppAuthenticator
from adr_registry.collection.github_collector import GitHubCollector
from adr_registry.collection.local_collector import LocalFileSystemCollector
from adr_registry.collection.pipeline import CollectionPipeline
from adr_registry.config import ConfigurationError, load_generator_config, load_github_app_config
from adr_registry.parsing.parser import AdrParser
from adr_registry.report import IndexReportGenerator
from adr_registry.schemas import GeneratorConfig
from adr_registry.site.generator import SiteGenerator
from adr_registry.utils.logger import setup_logger

app = typer.Typer(
    name="adr-registry",
    help="Cross-project Architecture Decision Record registry generator",
    add_completion=False,
)
console = Console()


# --- Commands -----------------------------------------------------------------

@app.command()
def generate(
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to config YAML (default: $ADR_CONFIG_FILE or config/config.yaml)"
    ),
    local: bool = typer.Option(
        False, "--local", "-l", help="Read repositories from the local filesystem instead of GitHub"
    ),
    path: Optional[str] = typer.Option(
        None, "--path", "-p", help="Directory containing repository folders (local mode)"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output directory for the generated site"
    ),
    report_dir: str = typer.Option(
        "data", "--report-dir", help="Where to write index_report.json"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Load config and exit without scanning"
    ),
    skip_health: bool = typer.Option(
        False, "--skip-health", help="Skip the source health check"
    ),
) -> None:
    """
    Scan repositories for ADRs and render the static registry site.

    \b
    Steps:
      1. Source health check
      2. ADR collection  (merged + open pull requests)
      3. Index report
      4. Site generation
    """
    load_dotenv()
    try:
        cfg = load_generator_config(config)
    except ConfigurationError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if local:
        cfg.local_mode = True
    if path:
        cfg.local_path = path
    if output:
        cfg.output_path = output

    setup_logger(log_level=cfg.logging.level, log_file=cfg.logging.file)

    try:
        asyncio.run(_generate_async(cfg, report_dir, dry_run, skip_health))
    except (ConfigurationError, FileNotFoundError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    except httpx.HTTPError as exc:
        # e.g. unknown organisation or rejected token
        logger.opt(exception=exc).debug("GitHub request failed")
        console.print(f"[red]Error:[/red] GitHub request failed: {exc}")
        raise typer.Exit(1)


@app.command()
def parse(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="ADR markdown file"),
    repo: Optional[str] = typer.Option(
        None, "--repo", "-r", help="Repository name (default: inferred from the path)"
    ),
    org: str = typer.Option("local", "--org", help="Organization used for the full repository name"),
    json_out: bool = typer.Option(False, "--json", help="Print the parsed record as JSON"),
) -> None:
    """Parse one ADR file and show the extracted record."""
    repo_name = repo or _infer_repo_name(file)
    markdown = file.read_text(encoding="utf-8")

    adr = AdrParser().parse(
        markdown,
        repo_name,
        f"{org}/{repo_name}",
        file.as_posix(),
        file.name,
        file.resolve().as_uri(),
    )

    if json_out:
        console.print_json(json.dumps(adr.model_dump(mode="json", exclude={"raw_content"})))
        return

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Id", adr.id)
    table.add_row("Number", adr.number)
    table.add_row("Status", adr.status)
    table.add_row("Date", adr.date.isoformat() if adr.date else "[dim]-[/dim]")
    table.add_row("Deciders", ", ".join(adr.deciders) or "[dim]-[/dim]")
    table.add_row("Supersedes", adr.supersedes_id or "[dim]-[/dim]")
    table.add_row("Superseded by", adr.superseded_by_id or "[dim]-[/dim]")

    console.print()
    console.print(Panel(table, title=f"[bold]{adr.title}[/bold]", border_style="cyan", expand=False))
    for heading, body in (
        ("Context", adr.context),
        ("Decision", adr.decision),
        ("Consequences", adr.consequences),
    ):
        if body:
            console.print(Panel(Markdown(body), title=heading, border_style="dim"))


def _infer_repo_name(file: Path) -> str:
    """<repo>/docs/adr/0001-x.md -> <repo>; falls back to the parent directory name."""
    parts = file.resolve().parts
    if "docs" in parts:
        idx = len(parts) - 1 - parts[::-1].index("docs")
        if idx > 0:
            return parts[idx - 1]
    return file.resolve().parent.name


# --- Async generate -------------------------------------------------------------

async def _build_collector(cfg: GeneratorConfig) -> BaseCollector:
    parser = AdrParser()

    if cfg.local_mode:
        if not cfg.local_path:
            raise ConfigurationError(
                "local_path is required in local mode. "
                "Set it in config, via --path, or the ADR_LOCAL_PATH environment variable."
            )
        if not Path(cfg.local_path).is_dir():
            raise ConfigurationError(f"Local path does not exist: {cfg.local_path}")
        return LocalFileSystemCollector(cfg, parser)

    if not cfg.organization:
        raise ConfigurationError("organization is required in GitHub mode")

    token = os.environ.get("GITHUB_TOKEN")
    if not token:
        app_cfg = load_github_app_config()
        console.print("Authenticating with GitHub App...")
        authenticator = GitHubAppAuthenticator.from_key_file(
            app_cfg.app_id, app_cfg.private_key_path, api_url=cfg.github_api_url
        )
        token = await authenticator.get_installation_token(app_cfg.installation_id)
        console.print("[green][OK] Authentication successful[/green]")

    return GitHubCollector(cfg, parser, token=token)


async def _generate_async(
    cfg: GeneratorConfig, report_dir: str, dry_run: bool, skip_health: bool
) -> None:
    mode = "Local Filesystem" if cfg.local_mode else "GitHub API"
    logger.info("=" * 60)
    logger.info(f"Mode         : {mode}")
    logger.info(f"Organization : {cfg.organization}")
    logger.info(f"ADR Path     : {cfg.adr_path}")
    logger.info(f"Output Path  : {cfg.output_path}")
    if cfg.local_mode:
        logger.info(f"Local Path   : {cfg.local_path}")
    logger.info("=" * 60)

    if dry_run:
        console.print(
            "[green][OK] Config loaded successfully.  "
            "Dry-run mode -- no repositories will be scanned.[/green]"
        )
        return

    collector = await _build_collector(cfg)
    pipeline = CollectionPipeline(cfg, collector)
    try:
        # -- Step 1: Health check ------------------------------------------------
        if not skip_health:
            console.print("\n[bold cyan]Step 1 / 4 - Source health check[/bold cyan]")
            if not await pipeline.run_health_check():
                console.print("[yellow]Source health check failed; continuing anyway[/yellow]")
        else:
            console.print("\n[yellow]Health check skipped[/yellow]")

        # -- Step 2: Collect -------------------------------------------------------
        console.print("\n[bold cyan]Step 2 / 4 - Collecting ADRs[/bold cyan]")
        index = await pipeline.build_index()
        console.print(
            f"[green][OK] {index.merged_adr_count} merged ADRs[/green]  "
            f"[yellow]{index.proposed_adr_count} proposed[/yellow]  "
            f"across {index.repository_count} repositories"
        )
    finally:
        await collector.aclose()

    # -- Step 3: Report ------------------------------------------------------------
    console.print("\n[bold cyan]Step 3 / 4 - Index report[/bold cyan]")
    reporter = IndexReportGenerator(output_dir=report_dir)
    reporter.print_report(reporter.generate(index, pipeline.stats))

    # -- Step 4: Site ----------------------------------------------------------------
    console.print("[bold cyan]Step 4 / 4 - Generating site[/bold cyan]")
    out = SiteGenerator(cfg).generate(index)
    console.print(f"[green][OK] Site written to {out}[/green]")
    console.print(
        f"\nDone! Run '[bold]npx pagefind --site {cfg.output_path}[/bold]' to build the search index."
    )


# --- Entry Point --------------------------------------------------------------

if __name__ == "__main__":
    app()
