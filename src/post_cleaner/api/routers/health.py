"""
post_cleaner.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide a liveness check (`/healthz`).
- Provide a readiness check (`/readyz`) that confirms the PDS answers XRPC.
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from post_cleaner import xrpc
from post_cleaner.api.deps import pds_http

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(http: httpx.AsyncClient = Depends(pds_http)) -> dict[str, str]:
    # Readiness: the record store is the one dependency every cleanup needs.
    try:
        await xrpc.query(http, "com.atproto.server.describeServer")
    except xrpc.XrpcClientError as e:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=e.detail) from e
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# describeServer is unauthenticated and cheap; no session is needed to call it.
