"""
tests.conftest

Shared fixtures: an in-memory PDS behind `httpx.MockTransport` and an app wired to it.
"""

from __future__ import annotations

import json
import time
from collections.abc import AsyncIterator
from typing import Any

import httpx
import jwt
import pytest
import pytest_asyncio
from fastapi import FastAPI

from post_cleaner.api.app import create_app
from post_cleaner.settings import Settings

DID = "did:plc:alice123"
HANDLE = "alice.example"
PASSWORD = "app-pass-word"
SECRET = "pds-test-signing-secret-0123456789abcdef"
POST = "app.bsky.feed.post"


def mint_token(
    *, sub: str = DID, scope: str = "com.atproto.access", ttl: int = 3600, secret: str = SECRET
) -> str:
    now = int(time.time())
    return jwt.encode(
        {"sub": sub, "scope": scope, "iat": now, "exp": now + ttl}, secret, algorithm="HS256"
    )


class FakePds:
    """
    Just enough of a PDS: sessions plus getRecord/putRecord/deleteRecord on one repo.
    """

    def __init__(self) -> None:
        self.access_jwt = mint_token()
        self.refresh_jwt = mint_token(scope="com.atproto.refresh", ttl=86400)
        self.records: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[str] = []
        self.writes: list[dict[str, Any]] = []
        # nsid -> (status, error name) returned instead of the normal response
        self.failures: dict[str, tuple[int, str]] = {}
        self._cid = 0

    def add_post(self, rkey: str, text: str = "hello") -> None:
        self.records[(POST, rkey)] = {"cid": self._next_cid(), "value": {"text": text}}

    def _next_cid(self) -> str:
        self._cid += 1
        return f"bafycid{self._cid}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        nsid = request.url.path.removeprefix("/xrpc/")
        self.calls.append(nsid)
        if nsid in self.failures:
            status, error = self.failures[nsid]
            return httpx.Response(status, json={"error": error, "message": "injected failure"})

        body = json.loads(request.content) if request.content else {}
        token = request.headers.get("authorization", "").removeprefix("Bearer ")

        if nsid == "com.atproto.server.describeServer":
            return httpx.Response(200, json={"did": "did:web:pds.test", "availableUserDomains": []})
        if nsid == "com.atproto.server.createSession":
            if body.get("identifier") in (HANDLE, DID) and body.get("password") == PASSWORD:
                return httpx.Response(200, json=self._session_body())
            return _error(401, "AuthenticationRequired", "Invalid identifier or password")
        if nsid == "com.atproto.server.refreshSession":
            if token != self.refresh_jwt:
                return _error(400, "ExpiredToken", "Token has expired")
            return httpx.Response(200, json=self._session_body())

        if token != self.access_jwt:
            return _error(400, "InvalidToken", "Token could not be verified")
        if nsid == "com.atproto.server.getSession":
            return httpx.Response(200, json={"did": DID, "handle": HANDLE})
        if nsid == "com.atproto.repo.getRecord":
            params = request.url.params
            rec = self.records.get((params["collection"], params["rkey"]))
            if rec is None or params["repo"] != DID:
                return _error(400, "RecordNotFound", "Could not locate record")
            uri = f"at://{DID}/{params['collection']}/{params['rkey']}"
            return httpx.Response(200, json={"uri": uri, **rec})
        if body.get("repo") != DID:
            return _error(401, "AuthRequired", "Cannot write to another repo")
        key = (body["collection"], body["rkey"])
        if nsid == "com.atproto.repo.putRecord":
            current = self.records.get(key)
            swap = body.get("swapRecord")
            if swap is not None and (current is None or current["cid"] != swap):
                return _error(400, "InvalidSwap", "Record was at a different cid")
            self.writes.append(body)
            self.records[key] = {"cid": self._next_cid(), "value": body["record"]}
            uri = f"at://{DID}/{body['collection']}/{body['rkey']}"
            return httpx.Response(200, json={"uri": uri, "cid": self.records[key]["cid"]})
        if nsid == "com.atproto.repo.deleteRecord":
            self.records.pop(key, None)
            return httpx.Response(200, json={})
        return _error(501, "MethodNotImplemented", nsid)

    def _session_body(self) -> dict[str, Any]:
        return {
            "did": DID,
            "handle": HANDLE,
            "accessJwt": self.access_jwt,
            "refreshJwt": self.refresh_jwt,
        }

    def repo_calls(self) -> list[str]:
        return [c for c in self.calls if c.startswith("com.atproto.repo.")]


def _error(status: int, error: str, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": error, "message": message})


@pytest.fixture
def pds() -> FakePds:
    return FakePds()


@pytest.fixture
def app(pds: FakePds) -> FastAPI:
    return create_app(
        settings=Settings(env="test", pds_url="https://pds.test"),
        pds_transport=httpx.MockTransport(pds.handler),
    )


@pytest_asyncio.fixture
async def api(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    # httpx ASGITransport does not run lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
