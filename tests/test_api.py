"""
tests.test_api

End-to-end HTTP tests against the in-memory PDS from conftest.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from conftest import DID, HANDLE, PASSWORD, FakePds, auth, mint_token

POST_URL = f"https://bsky.app/profile/{HANDLE}/post/abc123"


@pytest.mark.asyncio
async def test_create_session(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.post("/v1/session", json={"identifier": HANDLE, "password": PASSWORD})

    assert r.status_code == 200
    body = r.json()
    assert body["did"] == DID
    assert body["handle"] == HANDLE
    assert body["access_jwt"] == pds.access_jwt
    assert body["refresh_jwt"] == pds.refresh_jwt


@pytest.mark.asyncio
async def test_create_session_bad_password(api: httpx.AsyncClient) -> None:
    r = await api.post("/v1/session", json={"identifier": HANDLE, "password": "nope"})

    assert r.status_code == 401


@pytest.mark.asyncio
async def test_refresh_session(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.post("/v1/session/refresh", headers=auth(pds.refresh_jwt))
    assert r.status_code == 200
    assert r.json()["did"] == DID

    # An access token is not accepted where a refresh token is expected.
    r = await api.post("/v1/session/refresh", headers=auth(pds.access_jwt))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_current_actor(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.get("/v1/session", headers=auth(pds.access_jwt))

    assert r.status_code == 200
    assert r.json() == {"did": DID, "handle": HANDLE}


@pytest.mark.asyncio
async def test_missing_bearer_token(api: httpx.AsyncClient) -> None:
    r = await api.post("/v1/posts/cleanup", json={"target": POST_URL})

    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_rejected_locally(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(mint_token(ttl=-60))
    )

    assert r.status_code == 401
    assert pds.calls == []


@pytest.mark.asyncio
async def test_unknown_token_is_rejected_by_pds(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.post(
        "/v1/posts/cleanup",
        json={"target": POST_URL},
        headers=auth(mint_token(sub="did:plc:mallory")),
    )

    assert r.status_code == 401
    assert pds.calls == ["com.atproto.server.getSession"]


@pytest.mark.asyncio
async def test_resolve_endpoint(api: httpx.AsyncClient) -> None:
    r = await api.post("/v1/posts/resolve", json={"target": POST_URL})
    assert r.status_code == 200
    assert r.json() == {
        "outcome": "resolved",
        "authority": HANDLE,
        "record_key": "abc123",
        "uri": f"at://{HANDLE}/app.bsky.feed.post/abc123",
    }

    r = await api.post("/v1/posts/resolve", json={"target": "https://example.com/x"})
    assert r.status_code == 422
    assert r.json()["reason"] == "wrong_domain"
    assert r.json()["message"] == "wrong domain"


@pytest.mark.asyncio
async def test_cleanup_overwrites_then_deletes(api: httpx.AsyncClient, pds: FakePds) -> None:
    pds.add_post("abc123")

    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(pds.access_jwt)
    )

    assert r.status_code == 200
    assert r.json() == {"outcome": "success", "uri": f"at://{DID}/app.bsky.feed.post/abc123"}
    assert pds.repo_calls() == [
        "com.atproto.repo.getRecord",
        "com.atproto.repo.putRecord",
        "com.atproto.repo.deleteRecord",
    ]
    written = pds.writes[0]["record"]
    assert written["text"] == "bsky-post-cleanerにより削除中"
    assert written["via"] == "bsky-post-cleaner"
    assert written["createdAt"].endswith("Z")
    assert ("app.bsky.feed.post", "abc123") not in pds.records


@pytest.mark.asyncio
async def test_cleanup_by_at_uri(api: httpx.AsyncClient, pds: FakePds) -> None:
    pds.add_post("3kabc")

    r = await api.post(
        "/v1/posts/cleanup",
        json={"target": f"at://{DID}/app.bsky.feed.post/3kabc"},
        headers=auth(pds.access_jwt),
    )

    assert r.status_code == 200
    assert pds.records == {}


@pytest.mark.asyncio
async def test_cleanup_of_someone_elses_post(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.post(
        "/v1/posts/cleanup",
        json={"target": "https://bsky.app/profile/bob.example/post/abc123"},
        headers=auth(pds.access_jwt),
    )

    assert r.status_code == 403
    assert r.json()["outcome"] == "ownership_denied"
    assert pds.repo_calls() == []


@pytest.mark.asyncio
async def test_cleanup_with_unresolvable_target(api: httpx.AsyncClient, pds: FakePds) -> None:
    r = await api.post(
        "/v1/posts/cleanup",
        json={"target": "at://did:plc:alice123/app.bsky.feed.like/abc"},
        headers=auth(pds.access_jwt),
    )

    assert r.status_code == 422
    assert r.json()["reason"] == "not_a_post_identifier"
    assert pds.repo_calls() == []


@pytest.mark.asyncio
async def test_cleanup_twice_reports_not_found(api: httpx.AsyncClient, pds: FakePds) -> None:
    pds.add_post("abc123")
    headers = auth(pds.access_jwt)

    first = await api.post("/v1/posts/cleanup", json={"target": POST_URL}, headers=headers)
    second = await api.post("/v1/posts/cleanup", json={"target": POST_URL}, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 404
    assert second.json()["outcome"] == "record_not_found"


@pytest.mark.asyncio
async def test_overwrite_failure_never_deletes(api: httpx.AsyncClient, pds: FakePds) -> None:
    pds.add_post("abc123")
    pds.failures["com.atproto.repo.putRecord"] = (500, "InternalServerError")

    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(pds.access_jwt)
    )

    assert r.status_code == 502
    body = r.json()
    assert body["outcome"] == "remote_error"
    assert body["stage"] == "overwrite"
    assert body["record_overwritten"] is False
    assert "com.atproto.repo.deleteRecord" not in pds.calls


@pytest.mark.asyncio
async def test_delete_failure_leaves_placeholder(api: httpx.AsyncClient, pds: FakePds) -> None:
    pds.add_post("abc123", text="original")
    pds.failures["com.atproto.repo.deleteRecord"] = (500, "InternalServerError")

    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(pds.access_jwt)
    )

    assert r.status_code == 502
    body = r.json()
    assert body["stage"] == "delete"
    assert body["record_overwritten"] is True
    assert pds.records[("app.bsky.feed.post", "abc123")]["value"]["text"] != "original"

    # Retrying once the store recovers finishes the job.
    del pds.failures["com.atproto.repo.deleteRecord"]
    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(pds.access_jwt)
    )
    assert r.status_code == 200
    assert pds.records == {}


@pytest.mark.asyncio
async def test_second_submission_while_busy_is_rejected(
    api: httpx.AsyncClient, app: FastAPI, pds: FakePds
) -> None:
    pds.add_post("abc123")
    app.state.in_flight.acquire(DID)

    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(pds.access_jwt)
    )
    assert r.status_code == 409
    assert pds.repo_calls() == []

    app.state.in_flight.release(DID)
    r = await api.post(
        "/v1/posts/cleanup", json={"target": POST_URL}, headers=auth(pds.access_jwt)
    )
    assert r.status_code == 200
    assert not app.state.in_flight.is_busy(DID)
