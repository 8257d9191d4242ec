"""
Index Report Generator
----------------------
Produces a machine-readable JSON summary of a collection run and a
Rich-formatted console summary of the index.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adr_registry.schemas import AdrIndex, CollectionStats
from adr_registry.utils.helpers import save_json, truncate_text

console = Console()


class IndexReportGenerator:
    """Builds and prints the run report."""

    def __init__(self, output_dir: str | Path = "data") -> None:
        self.output_dir = Path(output_dir)

    # --- Public API -----------------------------------------------------------

    def generate(self, index: AdrIndex, stats: CollectionStats) -> dict:
        """Build the full report dict and save it to disk."""
        report = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "run_id": stats.run_id,
            "collection_summary": {
                "repositories_scanned": stats.repositories_scanned,
                "repositories_with_adrs": index.repository_count,
                "merged_adrs": index.merged_adr_count,
                "proposed_adrs": index.proposed_adr_count,
                "files_failed": stats.files_failed,
                "sources_failed": stats.sources_failed,
                "by_repository": stats.by_repository,
            },
            "status_breakdown": index.adrs_by_status,
            "data_profile": self._data_profile(index),
            "issues": stats.errors,
        }

        path = self.output_dir / "index_report.json"
        save_json(report, path)
        logger.info(f"Index report saved -> {path}")
        return report

    def print_report(self, report: dict) -> None:
        """Print a formatted summary to the console."""
        c = console

        c.print()
        c.print(
            Panel(
                "[bold cyan]ADR Registry[/bold cyan]\n"
                "[white]Collection Report[/white]",
                subtitle=f"[dim]{report['generated_at']}[/dim]",
                box=box.DOUBLE_EDGE,
                expand=False,
            )
        )

        # -- Collection Summary ------------------------------------------------
        s = report["collection_summary"]
        t = Table(title="Collection Summary", box=box.ROUNDED, show_header=True)
        t.add_column("Metric", style="cyan", no_wrap=True)
        t.add_column("Value", style="bold white")
        t.add_row("Repositories scanned", str(s["repositories_scanned"]))
        t.add_row("Repositories with ADRs", str(s["repositories_with_adrs"]))
        t.add_row("Merged ADRs", f"[green]{s['merged_adrs']}[/green]")
        t.add_row("Proposed ADRs (open PRs)", f"[yellow]{s['proposed_adrs']}[/yellow]")
        t.add_row("Files failed", f"[red]{s['files_failed']}[/red]")
        t.add_row("Repositories / PR listings failed", f"[red]{s['sources_failed']}[/red]")
        c.print(t)

        # -- By Status ---------------------------------------------------------
        if report["status_breakdown"]:
            c.print()
            t2 = Table(title="ADRs by Status", box=box.ROUNDED)
            t2.add_column("Status", style="cyan")
            t2.add_column("Count", style="bold white", justify="right")
            for status, count in sorted(report["status_breakdown"].items(), key=lambda kv: -kv[1]):
                t2.add_row(status, str(count))
            c.print(t2)

        # -- Data Profile ------------------------------------------------------
        p = report["data_profile"]
        c.print()
        c.print(
            Panel(
                f"Undated: [yellow]{p['undated']}[/yellow]  "
                f"Untitled: [yellow]{p['untitled']}[/yellow]  "
                f"No deciders: [yellow]{p['without_deciders']}[/yellow]  "
                f"Unresolved links: [red]{len(p['unresolved_references'])}[/red]",
                title="Data Profile",
                box=box.ROUNDED,
                expand=False,
            )
        )

        # -- Issues ------------------------------------------------------------
        if report["issues"]:
            c.print()
            t3 = Table(title="Issues", box=box.ROUNDED)
            t3.add_column("Issue", style="red")
            for issue in report["issues"][:20]:
                t3.add_row(truncate_text(issue, 100))
            c.print(t3)
        c.print()

    # --- Sections -------------------------------------------------------------

    @staticmethod
    def _data_profile(index: AdrIndex) -> dict:
        known = {a.id for a in index.adrs}
        unresolved = [
            f"{a.id} -> {ref}"
            for a in index.adrs
            for ref in (a.supersedes_id, a.superseded_by_id)
            if ref and ref not in known
        ]
        return {
            "undated": sum(1 for a in index.adrs if a.date is None),
            "untitled": sum(1 for a in index.adrs if a.title == "Untitled"),
            "without_deciders": sum(1 for a in index.adrs if not a.deciders),
            "unresolved_references": unresolved,
        }
