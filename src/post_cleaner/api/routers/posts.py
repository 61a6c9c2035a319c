"""
post_cleaner.api.routers.posts

Post resolution and cleanup endpoints.

Responsibilities:
- Resolve user input without side effects (`/v1/posts/resolve`).
- Run overwrite-then-delete for the bearer's own post (`/v1/posts/cleanup`).
- Render `MutationOutcome` values as JSON with a matching status code.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.status import (
    HTTP_200_OK,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_502_BAD_GATEWAY,
)

from post_cleaner.api.deps import cleanup_service
from post_cleaner.auth.deps import get_pds_session
from post_cleaner.auth.models import PdsSession
from post_cleaner.cleanup.outcomes import (
    MutationOutcome,
    OwnershipDenied,
    RecordNotFound,
    RemoteError,
    ResolutionFailed,
    Success,
)
from post_cleaner.identifiers.models import ResolutionFailure
from post_cleaner.services.cleanup_service import CleanupInProgress, CleanupService

# Starlette renamed the 422 constant (..._ENTITY -> ..._CONTENT); the number is stable.
UNPROCESSABLE = 422

router = APIRouter(prefix="/v1/posts", tags=["posts"])


class TargetRequest(BaseModel):
    # at:// URI or https://bsky.app/profile/<actor>/post/<rkey>
    target: str = Field(max_length=2048)


class ResolveResponse(BaseModel):
    outcome: str
    authority: str | None = None
    record_key: str | None = None
    uri: str | None = None
    reason: str | None = None
    message: str | None = None


class CleanupResponse(BaseModel):
    outcome: str
    uri: str | None = None
    authority: str | None = None
    reason: str | None = None
    message: str | None = None
    stage: str | None = None
    detail: str | None = None
    record_overwritten: bool | None = None


_STATUS: dict[type, int] = {
    Success: HTTP_200_OK,
    ResolutionFailed: UNPROCESSABLE,
    OwnershipDenied: HTTP_403_FORBIDDEN,
    RecordNotFound: HTTP_404_NOT_FOUND,
    RemoteError: HTTP_502_BAD_GATEWAY,
}


@router.post("/resolve", response_model=ResolveResponse, response_model_exclude_none=True)
async def resolve_post(
    body: TargetRequest,
    svc: CleanupService = Depends(cleanup_service),
) -> Any:
    result = svc.resolve(body.target)
    if isinstance(result, ResolutionFailure):
        return _json(
            UNPROCESSABLE,
            ResolveResponse(
                outcome=ResolutionFailed.kind,
                reason=result.reason.value,
                message=result.message,
            ),
        )
    return ResolveResponse(
        outcome="resolved",
        authority=result.authority,
        record_key=result.record_key,
        uri=result.at_uri(),
    )


@router.post("/cleanup", response_model=CleanupResponse, response_model_exclude_none=True)
async def cleanup_post(
    body: TargetRequest,
    session: PdsSession = Depends(get_pds_session),
    svc: CleanupService = Depends(cleanup_service),
) -> Any:
    try:
        outcome = await svc.cleanup(raw=body.target, session=session)
    except CleanupInProgress as e:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail=str(e)) from e
    return _json(_STATUS[type(outcome)], render_outcome(outcome))


def render_outcome(outcome: MutationOutcome) -> CleanupResponse:
    match outcome:
        case Success(uri=uri) | RecordNotFound(uri=uri):
            return CleanupResponse(outcome=outcome.kind, uri=uri)
        case ResolutionFailed(reason=reason):
            return CleanupResponse(outcome=outcome.kind, reason=reason.value, message=reason.message)
        case OwnershipDenied(authority=authority):
            return CleanupResponse(
                outcome=outcome.kind,
                authority=authority,
                message="only your own posts can be cleaned up",
            )
        case RemoteError(stage=stage, detail=detail):
            return CleanupResponse(
                outcome=outcome.kind,
                stage=stage,
                detail=detail,
                record_overwritten=outcome.record_overwritten,
            )
    raise TypeError(f"unknown outcome {outcome!r}")


def _json(status_code: int, body: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# --- Module Notes -----------------------------------------------------------
# A `RemoteError` with `record_overwritten=true` means the post now shows placeholder
# text; resubmitting the same target retries the delete.
