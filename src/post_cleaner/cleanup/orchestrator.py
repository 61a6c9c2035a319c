"""
post_cleaner.cleanup.orchestrator

Overwrite-then-delete of a single post record.

Responsibilities:
- Refuse identifiers that do not belong to the authenticated actor (no remote call).
- Confirm the record exists before mutating it (a second cleanup is never a silent success).
- Replace the record with placeholder content, then delete it; stop at the first failure.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from post_cleaner.auth.models import ActorContext
from post_cleaner.cleanup.outcomes import (
    MutationOutcome,
    OwnershipDenied,
    RecordNotFound,
    RemoteError,
    Stage,
    Success,
)
from post_cleaner.identifiers.models import POST_COLLECTION, ResourceIdentifier
from post_cleaner.observability.logging import get_logger
from post_cleaner.records.client import RecordPayload, RecordStore
from post_cleaner.settings import Settings
from post_cleaner.xrpc import XrpcClientError

log = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class DeletionOrchestrator:
    def __init__(
        self,
        *,
        store: RecordStore,
        placeholder_text: str,
        origin_marker: str,
        backdate: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._placeholder_text = placeholder_text
        self._origin_marker = origin_marker
        self._backdate = backdate
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        *,
        settings: Settings,
        store: RecordStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> DeletionOrchestrator:
        return cls(
            store=store,
            placeholder_text=settings.placeholder_text,
            origin_marker=settings.origin_marker,
            backdate=timedelta(hours=settings.backdate_hours),
            clock=clock,
        )

    async def delete_post(
        self, identifier: ResourceIdentifier, actor: ActorContext
    ) -> MutationOutcome:
        bound = log.bind(did=actor.current_stable_id, rkey=identifier.record_key)

        if not actor.owns(identifier.authority):
            bound.info("ownership_denied", authority=identifier.authority)
            return OwnershipDenied(authority=identifier.authority)

        # Writes always target the actor's own repo by DID, even when addressed by handle.
        repo = actor.current_stable_id
        rkey = identifier.record_key
        uri = identifier.at_uri(repo=repo)

        # Without this lookup putRecord would recreate an already-deleted post.
        try:
            ref = await self._store.get_record(repo=repo, collection=POST_COLLECTION, rkey=rkey)
        except XrpcClientError as e:
            if e.is_not_found:
                bound.info("record_not_found")
                return RecordNotFound(uri=uri)
            return self._failed(bound, "lookup", e)
        except Exception as e:
            return self._failed(bound, "lookup", e)

        payload = RecordPayload(
            text=self._placeholder_text,
            via=self._origin_marker,
            created_at=self._clock() - self._backdate,
        )
        try:
            await self._store.put_record(
                repo=repo,
                collection=POST_COLLECTION,
                rkey=rkey,
                payload=payload,
                swap_record=ref.cid,
            )
        except Exception as e:
            return self._failed(bound, "overwrite", e)
        bound.info("record_overwritten")

        try:
            await self._store.delete_record(repo=repo, collection=POST_COLLECTION, rkey=rkey)
        except Exception as e:
            return self._failed(bound, "delete", e)
        bound.info("record_deleted")
        return Success(uri=uri)

    @staticmethod
    def _failed(bound, stage: Stage, error: Exception) -> RemoteError:
        # Store implementations may raise outside the XRPC hierarchy (e.g. a closed client).
        if isinstance(error, XrpcClientError):
            detail = error.detail
        else:
            detail = f"{type(error).__name__}: {error}"
        outcome = RemoteError(stage=stage, detail=detail)
        if outcome.record_overwritten:
            # Record now holds placeholder content; the caller must retry the delete.
            bound.warning("remote_call_failed", stage=stage, detail=detail, overwritten=True)
        else:
            bound.info("remote_call_failed", stage=stage, detail=detail)
        return outcome


# --- Module Notes -----------------------------------------------------------
# No retries and no locking here: one identifier per call, strictly sequential calls.
# The in-flight guard lives with the caller (`services.cleanup_service`).
