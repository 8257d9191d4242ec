"""
Static Site Generator
---------------------
Renders the AdrIndex into a static HTML site with Jinja2:

    index.html              dashboard (counts, status breakdown, recent ADRs)
    adrs/index.html         every ADR, newest first
    adr/<id>.html           one page per ADR
    repos/index.html        repository list
    repos/<name>.html       one page per repository
    proposed/index.html     ADRs from open pull requests
    css/, js/               static assets
    adrs.json               machine-readable snapshot of the index

The output directory is recreated from scratch on every run.
"""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from loguru import logger

from adr_registry.schemas import AdrIndex, GeneratorConfig
from adr_registry.utils.helpers import ensure_dirs, format_datetime, reset_dir, safe_filename, save_json

TEMPLATE_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


class SiteGenerator:
    """Writes every page of the registry site for one AdrIndex."""

    def __init__(self, config: GeneratorConfig, template_dir: str | Path | None = None) -> None:
        self.config = config
        self.output_dir = Path(config.output_path)
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["page_name"] = safe_filename
        self.env.filters["isodate"] = lambda d: d.isoformat() if d else ""

    # --- Public API -----------------------------------------------------------

    def generate(self, index: AdrIndex) -> Path:
        """Render the whole site and return the output directory."""
        logger.info(f"[Site] Generating site to: {self.output_dir}")
        reset_dir(self.output_dir)
        ensure_dirs(
            self.output_dir / "adr",
            self.output_dir / "adrs",
            self.output_dir / "repos",
            self.output_dir / "proposed",
        )

        self._render_dashboard(index)
        self._render_adr_list(index)
        self._render_adr_pages(index)
        self._render_repository_list(index)
        self._render_repository_pages(index)
        self._render_proposed(index)
        self._copy_static_assets()
        self._write_snapshot(index)

        logger.info("[Site] Site generation complete")
        return self.output_dir

    # --- Pages ----------------------------------------------------------------

    def _render_dashboard(self, index: AdrIndex) -> None:
        logger.debug("[Site] Generating dashboard...")
        self._write(
            "index.html",
            "index.html",
            index,
            page_title="Dashboard",
            adrs_by_status=dict(sorted(index.adrs_by_status.items())),
            recent_adrs=index.recent_adrs,
            repositories=index.sorted_repositories,
        )

    def _render_adr_list(self, index: AdrIndex) -> None:
        logger.debug("[Site] Generating ADR list...")
        self._write("adr_list.html", "adrs/index.html", index, page_title="All ADRs", adrs=index.sorted_adrs)

    def _render_adr_pages(self, index: AdrIndex) -> None:
        logger.info(f"[Site] Generating {len(index.adrs)} ADR detail pages...")
        for adr in index.adrs:
            self._write(
                "adr_detail.html",
                f"adr/{safe_filename(adr.id)}.html",
                index,
                page_title=adr.title,
                adr=adr,
                supersedes=index.get(adr.supersedes_id),
                superseded_by=index.get(adr.superseded_by_id),
            )

    def _render_repository_list(self, index: AdrIndex) -> None:
        logger.debug("[Site] Generating repository list...")
        self._write(
            "repository_list.html",
            "repos/index.html",
            index,
            page_title="Repositories",
            repositories=index.sorted_repositories,
        )

    def _render_repository_pages(self, index: AdrIndex) -> None:
        logger.info(f"[Site] Generating {len(index.repositories)} repository pages...")
        for repo in index.repositories:
            self._write(
                "repository.html",
                f"repos/{safe_filename(repo.name)}.html",
                index,
                page_title=repo.name,
                repository=repo,
                status_counts=dict(sorted(repo.status_counts.items())),
            )

    def _render_proposed(self, index: AdrIndex) -> None:
        logger.debug("[Site] Generating proposed ADR list...")
        self._write(
            "proposed.html",
            "proposed/index.html",
            index,
            page_title="Proposed ADRs",
            adrs=index.proposed_adrs,
        )

    # --- Output ---------------------------------------------------------------

    def _write(self, template_name: str, relative_path: str, index: AdrIndex, **context: Any) -> None:
        html = self.render(template_name, index=index, **context)
        path = self.output_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")

    def render(self, template_name: str, index: AdrIndex, **context: Any) -> str:
        """Render one template with the site-wide variables every page needs."""
        template = self.env.get_template(template_name)
        return template.render(
            site_title=self.config.site_title,
            site_description=self.config.site_description,
            base_url=self.config.base_url,
            generated_at=format_datetime(index.generated_at),
            total_adr_count=index.total_adr_count,
            repository_count=index.repository_count,
            proposed_adr_count=index.proposed_adr_count,
            **context,
        )

    def _copy_static_assets(self) -> None:
        logger.debug("[Site] Copying static assets...")
        for sub, pattern in (("css", "*.css"), ("js", "*.js")):
            target = self.output_dir / sub
            ensure_dirs(target)
            for asset in STATIC_DIR.glob(pattern):
                shutil.copy2(asset, target / asset.name)

    def _write_snapshot(self, index: AdrIndex) -> None:
        snapshot = {
            "generated_at": index.generated_at.isoformat(),
            "total_adr_count": index.total_adr_count,
            "repository_count": index.repository_count,
            "adrs_by_status": index.adrs_by_status,
            "adrs": [
                adr.model_dump(mode="json", exclude={"raw_content", "rendered_body"})
                for adr in index.sorted_adrs
            ],
        }
        save_json(snapshot, self.output_dir / "adrs.json")
