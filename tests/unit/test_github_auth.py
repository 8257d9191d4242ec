import asyncio
import json
from pathlib import Path

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from tenacity import wait_none

from adr_registry.collection.github_auth import GitHubAppAuthenticator


@pytest.fixture(scope="module")
def private_key_pem() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def test_generate_jwt_claims(private_key_pem: str) -> None:
    auth = GitHubAppAuthenticator(42, private_key_pem)
    token = auth.generate_jwt(now=1_700_000_000)

    claims = jwt.decode(token, options={"verify_signature": False})
    assert claims == {"iat": 1_699_999_940, "exp": 1_700_000_600, "iss": "42"}
    assert jwt.get_unverified_header(token)["alg"] == "RS256"


def test_from_key_file(tmp_path: Path, private_key_pem: str) -> None:
    key_file = tmp_path / "app.pem"
    key_file.write_text(private_key_pem, encoding="utf-8")

    auth = GitHubAppAuthenticator.from_key_file(7, key_file)
    assert auth.app_id == 7

    with pytest.raises(FileNotFoundError):
        GitHubAppAuthenticator.from_key_file(7, tmp_path / "missing.pem")


def test_installation_token_exchange(private_key_pem: str) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, content=json.dumps({"token": "ghs_abc"}))

    auth = GitHubAppAuthenticator(42, private_key_pem, api_url="https://api.github.test/")

    async def run() -> str:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await auth.get_installation_token(99, client=client)

    assert asyncio.run(run()) == "ghs_abc"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.github.test/app/installations/99/access_tokens"
    assert request.headers["Authorization"].startswith("Bearer ")


def test_rejected_token_exchange_is_not_retried(private_key_pem: str) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(401, json={"message": "Bad credentials"})

    auth = GitHubAppAuthenticator(42, private_key_pem, api_url="https://api.github.test")

    async def run() -> str:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await auth.get_installation_token(99, client=client)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(run())
    assert len(calls) == 1


def test_server_error_on_token_exchange_is_retried(private_key_pem: str) -> None:
    responses = [
        httpx.Response(503, json={"message": "unavailable"}),
        httpx.Response(201, json={"token": "ghs_retry"}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    auth = GitHubAppAuthenticator(42, private_key_pem, api_url="https://api.github.test")
    get_token = GitHubAppAuthenticator.get_installation_token.retry_with(wait=wait_none())

    async def run() -> str:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await get_token(auth, 99, client=client)

    assert asyncio.run(run()) == "ghs_retry"
    assert responses == []
