"""
post_cleaner.records.client

XRPC client for the actor's repository on their PDS.

Responsibilities:
- Build the replacement payload written during the overwrite phase.
- Call `com.atproto.repo.getRecord` / `putRecord` / `deleteRecord` with the session token.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

import httpx

from post_cleaner import xrpc
from post_cleaner.identifiers.models import POST_COLLECTION


def format_datetime(dt: datetime) -> str:
    # Same shape as JS Date.toISOString(): millisecond precision, "Z" suffix.
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class RecordPayload:
    text: str
    via: str
    created_at: datetime

    def to_record(self) -> dict[str, Any]:
        return {
            "$type": POST_COLLECTION,
            "text": self.text,
            "via": self.via,
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True, slots=True)
class RecordRef:
    uri: str
    cid: str | None = None


class RecordStore(Protocol):
    async def get_record(self, *, repo: str, collection: str, rkey: str) -> RecordRef: ...

    async def put_record(
        self,
        *,
        repo: str,
        collection: str,
        rkey: str,
        payload: RecordPayload,
        swap_record: str | None = None,
    ) -> RecordRef: ...

    async def delete_record(
        self,
        *,
        repo: str,
        collection: str,
        rkey: str,
        swap_record: str | None = None,
    ) -> None: ...


class RecordStoreClient:
    """
    Repository operations against one PDS, authorised by one session's access token.
    """

    def __init__(self, *, http: httpx.AsyncClient, access_jwt: str) -> None:
        self._http = http
        self._token = access_jwt

    async def get_record(self, *, repo: str, collection: str, rkey: str) -> RecordRef:
        data = await xrpc.query(
            self._http,
            "com.atproto.repo.getRecord",
            params={"repo": repo, "collection": collection, "rkey": rkey},
            token=self._token,
        )
        return RecordRef(uri=str(data.get("uri", "")), cid=data.get("cid"))

    async def put_record(
        self,
        *,
        repo: str,
        collection: str,
        rkey: str,
        payload: RecordPayload,
        swap_record: str | None = None,
    ) -> RecordRef:
        body: dict[str, Any] = {
            "repo": repo,
            "collection": collection,
            "rkey": rkey,
            "record": payload.to_record(),
        }
        if swap_record is not None:
            body["swapRecord"] = swap_record
        data = await xrpc.procedure(
            self._http, "com.atproto.repo.putRecord", body=body, token=self._token
        )
        return RecordRef(uri=str(data.get("uri", "")), cid=data.get("cid"))

    async def delete_record(
        self,
        *,
        repo: str,
        collection: str,
        rkey: str,
        swap_record: str | None = None,
    ) -> None:
        body: dict[str, Any] = {"repo": repo, "collection": collection, "rkey": rkey}
        if swap_record is not None:
            body["swapRecord"] = swap_record
        await xrpc.procedure(
            self._http, "com.atproto.repo.deleteRecord", body=body, token=self._token
        )


# --- Module Notes -----------------------------------------------------------
# All methods raise `xrpc.XrpcClientError` subclasses; the orchestrator classifies them.
