# tests/conftest.py
from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey

from hookbot.config import Settings
from hookbot.main import create_app

TEST_TIMESTAMP = "1700000000"


@pytest.fixture(scope="session")
def signing_key() -> SigningKey:
    return SigningKey(bytes(range(32)))


@pytest.fixture(scope="session")
def public_key_hex(signing_key: SigningKey) -> str:
    return signing_key.verify_key.encode().hex()


@pytest.fixture()
def settings(public_key_hex: str) -> Settings:
    # No app id / bot token: command registration is skipped on startup
    return Settings(public_key=public_key_hex)


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def sign(signing_key: SigningKey) -> Callable[[str, bytes], str]:
    def _sign(timestamp: str, body: bytes) -> str:
        return signing_key.sign(timestamp.encode("utf-8") + body).signature.hex()

    return _sign


@pytest.fixture()
def signed_post(client: TestClient, sign: Callable[[str, bytes], str]) -> Callable[..., Any]:
    """POST a JSON payload to /interactions with valid signature headers."""

    def _post(payload: Any, timestamp: str = TEST_TIMESTAMP) -> Any:
        body = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "X-Signature-Timestamp": timestamp,
            "X-Signature-Ed25519": sign(timestamp, body),
        }
        return client.post("/interactions", content=body, headers=headers)

    return _post


@pytest.fixture()
def asgi_post() -> Callable[..., Any]:
    """
    POST straight into an ASGI app with raw header bytes and an optional root_path.

    Returns (status, decoded JSON body).
    """

    async def _post(
        app: Any,
        path: str,
        body: bytes,
        headers: list[tuple[bytes, bytes]] | None = None,
        root_path: str = "",
    ) -> tuple[int, Any]:
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "http",
            "path": path,
            "raw_path": path.encode("ascii"),
            "root_path": root_path,
            "query_string": b"",
            "headers": [(b"content-type", b"application/json"), *(headers or [])],
            "client": ("testclient", 50000),
            "server": ("testserver", 80),
        }
        incoming = [{"type": "http.request", "body": body, "more_body": False}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            if incoming:
                return incoming.pop(0)
            return {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app(scope, receive, send)

        start = next(m for m in sent if m["type"] == "http.response.start")
        content = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
        return start["status"], json.loads(content)

    return _post
