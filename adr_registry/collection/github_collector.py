"""
GitHub Collector
----------------
Fetches ADRs from every repository of a GitHub organisation through the
REST API using httpx, including ADRs proposed in open pull requests.

Transient failures (network errors, 5xx, 429) are retried with tenacity;
anything else on a single file, pull request, or repository is logged and
skipped so one bad source never aborts the scan.
"""
from __future__ import annotations

from typing import Any, AsyncIterator

import httpx
from loguru import logger
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from adr_registry.collection.base_collector import BaseCollector
from adr_registry.parsing.parser import AdrParser
from adr_registry.schemas import Adr, GeneratorConfig, PullRequestInfo, Repository

_USER_AGENT = "adr-registry/1.0"
_RAW = "application/vnd.github.raw"


def is_transient_http_error(exc: BaseException) -> bool:
    """Network failures, 5xx and 429 are worth another attempt; other statuses are final."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code >= 500 or code == 429
    return False


def _is_not_found(exc: Exception) -> bool:
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 404


class GitHubCollector(BaseCollector):
    """Collects ADRs from the repositories of one GitHub organisation."""

    source_name = "GitHub"

    def __init__(
        self,
        config: GeneratorConfig,
        parser: AdrParser | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config, parser)
        self.request_delay = config.request_delay
        self._owns_client = client is None
        if client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "User-Agent": _USER_AGENT,
            }
            if token:
                headers["Authorization"] = f"Bearer {token}"
            client = httpx.AsyncClient(
                base_url=config.github_api_url,
                headers=headers,
                timeout=30.0,
                follow_redirects=True,
            )
        self._client = client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # --- HTTP -------------------------------------------------------------------

    @retry(
        retry=retry_if_exception(is_transient_http_error),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        resp = await self._client.get(url, params=params, headers=headers)
        resp.raise_for_status()
        return resp

    async def _get_paginated(self, url: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Follow ``Link: rel="next"`` headers and concatenate every page."""
        items: list[dict] = []
        next_url: str | None = url
        next_params = {"per_page": 100, **(params or {})}

        while next_url:
            resp = await self._get(next_url, params=next_params)
            items.extend(resp.json())
            next_url = resp.links.get("next", {}).get("url")
            next_params = None  # the next link already carries the query string
        return items

    async def _get_raw(self, full_name: str, path: str, ref: str | None = None) -> str:
        params = {"ref": ref} if ref else None
        resp = await self._get(
            f"/repos/{full_name}/contents/{path}",
            params=params,
            headers={"Accept": _RAW},
        )
        return resp.text

    # --- BaseCollector ----------------------------------------------------------

    async def health_check(self) -> bool:
        try:
            await self._get("/rate_limit")
            return True
        except Exception as exc:
            logger.warning(f"[GitHub] Health check failed: {exc}")
            return False

    async def discover_repositories(self) -> list[Repository]:
        org = self.config.organization
        logger.info(f"[GitHub] Fetching repositories from organization: {org}")

        raw_repos = await self._get_paginated(f"/orgs/{org}/repos", {"type": "all"})
        repositories = [
            Repository(
                name=r["name"],
                full_name=r["full_name"],
                default_branch=r.get("default_branch") or "main",
            )
            for r in raw_repos
            if not r.get("archived", False) and self.is_selected(r["full_name"])
        ]

        logger.info(f"[GitHub] Found {len(repositories)} repositories to scan")
        return repositories

    async def collect(self, repo: Repository) -> AsyncIterator[Adr]:
        """Yield one Adr per markdown file in the repository's ADR directory."""
        try:
            resp = await self._get(f"/repos/{repo.full_name}/contents/{self.config.adr_path}")
        except httpx.HTTPStatusError as exc:
            if _is_not_found(exc):
                logger.debug(f"[GitHub] {repo.full_name}: no ADR directory found")
                return
            raise

        listing = resp.json()
        if not isinstance(listing, list):
            logger.debug(f"[GitHub] {repo.full_name}: {self.config.adr_path} is not a directory")
            return

        files = [
            entry for entry in listing
            if entry.get("type") == "file" and self.is_adr_file(entry.get("name", ""))
        ]
        logger.info(f"[GitHub] {repo.full_name}: {len(files)} ADR file(s)")

        for entry in files:
            name = entry["name"]
            try:
                markdown = await self._get_raw(repo.full_name, entry["path"])
            except httpx.HTTPError as exc:
                self.file_error_count += 1
                logger.warning(f"[GitHub] Failed to fetch {name}: {exc}")
                continue

            source_url = entry.get("html_url") or (
                f"https://github.com/{repo.full_name}/blob/{repo.default_branch}/{entry['path']}"
            )
            adr = self.parse_file(markdown, repo, entry["path"], name, source_url)
            if adr is not None:
                yield adr

    # --- Pull requests ----------------------------------------------------------

    def _is_pr_adr_file(self, file: dict) -> bool:
        name: str = file.get("filename", "")
        prefix = f"{self.config.adr_path}/".lower()
        return (
            name.lower().startswith(prefix)
            and self.is_adr_file(name)
            and file.get("status") != "removed"
        )

    async def get_open_pull_requests(self, repo: Repository) -> list[PullRequestInfo]:
        """Open pull requests that add or modify at least one ADR file."""
        result: list[PullRequestInfo] = []
        pulls = await self._get_paginated(f"/repos/{repo.full_name}/pulls", {"state": "open"})

        for pr in pulls:
            number = pr["number"]
            try:
                files = await self._get_paginated(f"/repos/{repo.full_name}/pulls/{number}/files")
            except httpx.HTTPError as exc:
                logger.warning(f"[GitHub] Failed to get files for PR #{number}: {exc}")
                continue

            adr_files = [f["filename"] for f in files if self._is_pr_adr_file(f)]
            if not adr_files:
                continue

            head = pr.get("head") or {}
            head_repo = head.get("repo") or {}
            result.append(
                PullRequestInfo(
                    number=number,
                    title=pr.get("title", ""),
                    url=pr.get("html_url", ""),
                    author=(pr.get("user") or {}).get("login") or "unknown",
                    source_branch=head.get("ref", ""),
                    repository_full_name=repo.full_name,
                    head_repository_full_name=head_repo.get("full_name") or repo.full_name,
                    adr_files=adr_files,
                )
            )
        return result

    async def collect_pull_requests(self, repo: Repository) -> AsyncIterator[Adr]:
        """Yield ADRs as they appear on the head branch of each open pull request."""
        if not self.config.include_pull_requests:
            return

        for pr in await self.get_open_pull_requests(repo):
            logger.info(f"[GitHub] PR #{pr.number} in {repo.name}: {pr.title}")
            for path in pr.adr_files:
                adr = await self._fetch_pull_request_adr(repo, pr, path)
                if adr is not None:
                    yield adr

    async def _fetch_pull_request_adr(
        self, repo: Repository, pr: PullRequestInfo, path: str
    ) -> Adr | None:
        head = pr.head_repository_full_name or repo.full_name
        try:
            markdown = await self._get_raw(head, path, ref=pr.source_branch)
        except httpx.HTTPError as exc:
            self.file_error_count += 1
            logger.warning(f"[GitHub] Failed to fetch ADR from PR #{pr.number}: {exc}")
            return None

        file_name = path.rsplit("/", 1)[-1]
        source_url = f"https://github.com/{head}/blob/{pr.source_branch}/{path}"
        adr = self.parse_file(markdown, repo, path, file_name, source_url)
        if adr is None:
            return None

        # PR copy id: "{repo}_{number}_pr{N}"
        return adr.model_copy(
            update={
                "id": f"{adr.id}_pr{pr.number}",
                "is_from_pull_request": True,
                "pull_request_number": pr.number,
                "pull_request_title": pr.title,
                "pull_request_url": pr.url,
                "pull_request_author": pr.author,
                "source_branch": pr.source_branch,
            }
        )
