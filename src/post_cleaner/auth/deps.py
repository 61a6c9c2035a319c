"""
post_cleaner.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Extract the PDS token from the bearer header.
- Reject malformed, expired or wrong-scope tokens locally (401) before any XRPC call.
- Convert an access token into a `PdsSession` via `com.atproto.server.getSession`.
"""

from __future__ import annotations

from datetime import timedelta

import httpx
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_502_BAD_GATEWAY

from post_cleaner.api.deps import pds_http, settings_dep
from post_cleaner.auth.models import PdsSession
from post_cleaner.auth.session import SessionClient
from post_cleaner.auth.tokens import TokenClaims, TokenInspectionError, inspect_token
from post_cleaner.settings import Settings
from post_cleaner.xrpc import XrpcClientError, XrpcError

_bearer = HTTPBearer(auto_error=False)


def bearer_token(creds: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> str:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return creds.credentials


def _claims(token: str, settings: Settings) -> TokenClaims:
    try:
        claims = inspect_token(token)
    except TokenInspectionError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e
    if claims.expired(leeway=timedelta(seconds=settings.token_leeway_seconds)):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token expired")
    return claims


def access_token(
    token: str = Depends(bearer_token),
    settings: Settings = Depends(settings_dep),
) -> str:
    if not _claims(token, settings).is_access:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Not an access token")
    return token


def refresh_token(
    token: str = Depends(bearer_token),
    settings: Settings = Depends(settings_dep),
) -> str:
    if not _claims(token, settings).is_refresh:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Not a refresh token")
    return token


async def get_pds_session(
    token: str = Depends(access_token),
    http: httpx.AsyncClient = Depends(pds_http),
) -> PdsSession:
    try:
        return await SessionClient(http=http).get_session(access_jwt=token)
    except XrpcError as e:
        raise session_http_error(e) from e
    except XrpcClientError as e:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=e.detail) from e


def session_http_error(e: XrpcError) -> HTTPException:
    # The PDS answers bad credentials with 400/401 and an auth-flavoured error name.
    if e.is_auth_error or e.status in (400, 401):
        return HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=e.detail)
    return HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=e.detail)


# --- Module Notes -----------------------------------------------------------
# The resulting `PdsSession.actor()` is the only identity the cleanup core sees.
