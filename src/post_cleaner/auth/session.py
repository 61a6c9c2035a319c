"""
post_cleaner.auth.session

Client for the PDS session endpoints.

Responsibilities:
- Create a session from an identifier + app password.
- Describe the session behind an access token (DID + handle).
- Refresh a session with its refresh token.
"""

from __future__ import annotations

from typing import Any

import httpx

from post_cleaner import xrpc
from post_cleaner.auth.models import PdsSession


class SessionClient:
    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    async def create_session(self, *, identifier: str, password: str) -> PdsSession:
        data = await xrpc.procedure(
            self._http,
            "com.atproto.server.createSession",
            body={"identifier": identifier, "password": password},
        )
        return _session(data)

    async def get_session(self, *, access_jwt: str) -> PdsSession:
        data = await xrpc.query(self._http, "com.atproto.server.getSession", token=access_jwt)
        # getSession does not echo tokens back; keep the one we were given.
        return PdsSession(
            did=_required(data, "did"),
            handle=data.get("handle"),
            access_jwt=access_jwt,
        )

    async def refresh_session(self, *, refresh_jwt: str) -> PdsSession:
        data = await xrpc.procedure(
            self._http, "com.atproto.server.refreshSession", token=refresh_jwt
        )
        return _session(data)


def _session(data: dict[str, Any]) -> PdsSession:
    return PdsSession(
        did=_required(data, "did"),
        handle=data.get("handle"),
        access_jwt=_required(data, "accessJwt"),
        refresh_jwt=data.get("refreshJwt"),
    )


def _required(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise xrpc.XrpcTransportError("com.atproto.server", f"session response missing {key!r}")
    return value
