"""
post_cleaner.api.routers.session

PDS session endpoints.

Responsibilities:
- Create a session from an identifier and app password (`POST /v1/session`).
- Refresh a session with the bearer refresh token (`POST /v1/session/refresh`).
- Report the actor behind the bearer access token (`GET /v1/session`).
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, SecretStr
from starlette.status import HTTP_502_BAD_GATEWAY

from post_cleaner.api.deps import pds_http
from post_cleaner.auth.deps import get_pds_session, refresh_token, session_http_error
from post_cleaner.auth.models import PdsSession
from post_cleaner.auth.session import SessionClient
from post_cleaner.observability.logging import get_logger
from post_cleaner.xrpc import XrpcClientError, XrpcError

log = get_logger(__name__)

router = APIRouter(prefix="/v1/session", tags=["session"])


class CreateSessionRequest(BaseModel):
    identifier: str = Field(min_length=1, max_length=256)
    password: SecretStr = Field(min_length=1)


class SessionResponse(BaseModel):
    did: str
    handle: str | None = None
    access_jwt: str
    refresh_jwt: str | None = None


class ActorResponse(BaseModel):
    did: str
    handle: str | None = None


def _response(session: PdsSession) -> SessionResponse:
    return SessionResponse(
        did=session.did,
        handle=session.handle,
        access_jwt=session.access_jwt,
        refresh_jwt=session.refresh_jwt,
    )


@router.post("", response_model=SessionResponse)
async def create_session(
    body: CreateSessionRequest,
    http: httpx.AsyncClient = Depends(pds_http),
) -> SessionResponse:
    try:
        session = await SessionClient(http=http).create_session(
            identifier=body.identifier, password=body.password.get_secret_value()
        )
    except XrpcError as e:
        log.info("session_create_failed", error=e.error, status=e.status)
        raise session_http_error(e) from e
    except XrpcClientError as e:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=e.detail) from e
    log.info("session_created", did=session.did)
    return _response(session)


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session(
    token: str = Depends(refresh_token),
    http: httpx.AsyncClient = Depends(pds_http),
) -> SessionResponse:
    try:
        session = await SessionClient(http=http).refresh_session(refresh_jwt=token)
    except XrpcError as e:
        raise session_http_error(e) from e
    except XrpcClientError as e:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=e.detail) from e
    return _response(session)


@router.get("", response_model=ActorResponse)
async def current_actor(session: PdsSession = Depends(get_pds_session)) -> ActorResponse:
    actor = session.actor()
    return ActorResponse(did=actor.current_stable_id, handle=actor.current_handle)


# --- Module Notes -----------------------------------------------------------
# Tokens are returned to the caller and never stored or logged here.
# Auth-flavoured PDS errors become 401; anything else from the PDS is a 502.
