"""
GitHub App authentication.

Signs a short-lived RS256 JWT as the App, then exchanges it for an
installation access token that the GitHub collector uses as a bearer token.
"""
from __future__ import annotations

import time
from pathlib import Path

import httpx
import jwt
from loguru import logger
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from adr_registry.collection.github_collector import is_transient_http_error

_USER_AGENT = "adr-registry/1.0"


class GitHubAppAuthenticator:
    """JWT generation and installation-token exchange for a GitHub App."""

    def __init__(
        self,
        app_id: int,
        private_key: str,
        api_url: str = "https://api.github.com",
    ) -> None:
        self.app_id = app_id
        self._private_key = private_key
        self.api_url = api_url.rstrip("/")

    @classmethod
    def from_key_file(
        cls, app_id: int, private_key_path: str | Path, api_url: str = "https://api.github.com"
    ) -> "GitHubAppAuthenticator":
        path = Path(private_key_path)
        if not path.is_file():
            raise FileNotFoundError(f"GitHub App private key not found at: {path}")
        return cls(app_id, path.read_text(encoding="utf-8"), api_url=api_url)

    def generate_jwt(self, now: float | None = None) -> str:
        """App JWT: issued a minute in the past to absorb clock drift, valid ten minutes."""
        now = int(now if now is not None else time.time())
        payload = {
            "iat": now - 60,
            "exp": now + 600,
            "iss": str(self.app_id),
        }
        return jwt.encode(payload, self._private_key, algorithm="RS256")

    @retry(
        retry=retry_if_exception(is_transient_http_error),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get_installation_token(
        self,
        installation_id: int,
        client: httpx.AsyncClient | None = None,
    ) -> str:
        """Exchange the App JWT for an installation access token."""
        headers = {
            "Authorization": f"Bearer {self.generate_jwt()}",
            "Accept": "application/vnd.github+json",
            "User-Agent": _USER_AGENT,
        }
        url = f"{self.api_url}/app/installations/{installation_id}/access_tokens"

        if client is None:
            async with httpx.AsyncClient(timeout=30.0) as own_client:
                resp = await own_client.post(url, headers=headers)
        else:
            resp = await client.post(url, headers=headers)
        resp.raise_for_status()

        logger.info(f"[GitHub] Installation token issued for installation {installation_id}")
        return resp.json()["token"]
