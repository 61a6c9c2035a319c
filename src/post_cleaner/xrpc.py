"""
post_cleaner.xrpc

Minimal XRPC call helpers shared by the record-store and session clients.

Responsibilities:
- Issue `/xrpc/<nsid>` queries (GET) and procedures (POST) over a shared httpx client.
- Convert every failure into an `XrpcClientError` subclass so callers classify one type.
"""

from __future__ import annotations

from typing import Any

import httpx


class XrpcClientError(Exception):
    """
    Base class for every failure raised at the remote-call boundary.
    """

    def __init__(self, nsid: str, detail: str) -> None:
        super().__init__(f"{nsid}: {detail}")
        self.nsid = nsid
        self.detail = str(self)

    @property
    def is_not_found(self) -> bool:
        return False


class XrpcError(XrpcClientError):
    """
    The server answered with a non-2xx status and (usually) an `{error, message}` body.
    """

    def __init__(self, nsid: str, *, status: int, error: str | None, message: str | None) -> None:
        label = f"{status} {error}" if error else str(status)
        super().__init__(nsid, f"{label}: {message}" if message else label)
        self.status = status
        self.error = error
        self.message = message

    @property
    def is_not_found(self) -> bool:
        return self.status == 404 or self.error == "RecordNotFound"

    @property
    def is_auth_error(self) -> bool:
        return self.status == 401 or self.error in ("ExpiredToken", "InvalidToken")


class XrpcTransportError(XrpcClientError):
    """
    The request never produced a usable response (network, timeout, invalid body).
    """


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def query(
    http: httpx.AsyncClient,
    nsid: str,
    *,
    params: dict[str, Any] | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    return await _call(http, "GET", nsid, params=params, token=token)


async def procedure(
    http: httpx.AsyncClient,
    nsid: str,
    *,
    body: dict[str, Any] | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    return await _call(http, "POST", nsid, body=body, token=token)


async def _call(
    http: httpx.AsyncClient,
    verb: str,
    nsid: str,
    *,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    try:
        r = await http.request(
            verb,
            f"/xrpc/{nsid}",
            params=params,
            json=body,
            headers=bearer(token) if token else None,
        )
    except httpx.HTTPError as e:
        raise XrpcTransportError(nsid, f"{type(e).__name__}: {e}") from e

    if r.is_success:
        # deleteRecord answered with an empty body on older PDS versions.
        if not r.content:
            return {}
        try:
            data = r.json()
        except ValueError as e:
            raise XrpcTransportError(nsid, "response body is not JSON") from e
        if not isinstance(data, dict):
            raise XrpcTransportError(nsid, "response body is not a JSON object")
        return data

    error, message = _error_body(r)
    raise XrpcError(nsid, status=r.status_code, error=error, message=message)


def _error_body(r: httpx.Response) -> tuple[str | None, str | None]:
    try:
        data = r.json()
    except ValueError:
        return None, r.text[:200] or None
    if not isinstance(data, dict):
        return None, None
    error = data.get("error")
    message = data.get("message")
    return (str(error) if error else None, str(message) if message else None)


# --- Module Notes -----------------------------------------------------------
# Retries and timeouts are transport concerns configured on the httpx client;
# nothing here retries.
