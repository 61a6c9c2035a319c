"""
post_cleaner.services.cleanup_service

Cleanup lifecycle service (caller of the orchestrator).

Responsibilities:
- Resolve raw input and turn resolution failures into `ResolutionFailed` outcomes.
- Allow at most one mutation sequence in flight per actor.
- Run the sequence to completion even if the requesting client goes away.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import httpx
import structlog

from post_cleaner.auth.models import ActorContext, PdsSession
from post_cleaner.cleanup.orchestrator import DeletionOrchestrator, utcnow
from post_cleaner.cleanup.outcomes import MutationOutcome, ResolutionFailed
from post_cleaner.identifiers.models import Resolution, ResolutionFailure, ResourceIdentifier
from post_cleaner.identifiers.resolver import IdentifierResolver
from post_cleaner.observability.logging import get_logger
from post_cleaner.records.client import RecordStoreClient
from post_cleaner.settings import Settings

log = get_logger(__name__)


class CleanupInProgress(Exception):
    def __init__(self, did: str) -> None:
        super().__init__(f"a cleanup is already running for {did}")
        self.did = did


class InFlightRegistry:
    """
    Busy flag per actor DID. Process-local; single event loop.
    """

    def __init__(self) -> None:
        self._busy: set[str] = set()

    def is_busy(self, did: str) -> bool:
        return did in self._busy

    def acquire(self, did: str) -> None:
        if did in self._busy:
            raise CleanupInProgress(did)
        self._busy.add(did)

    def release(self, did: str) -> None:
        self._busy.discard(did)


class CleanupService:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        registry: InFlightRegistry,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._settings = settings
        self._http = http
        self._registry = registry
        self._clock = clock
        self._resolver = IdentifierResolver(web_host=settings.web_host)

    def resolve(self, raw: str) -> Resolution:
        return self._resolver.resolve(raw)

    async def cleanup(self, *, raw: str, session: PdsSession) -> MutationOutcome:
        resolution = self._resolver.resolve(raw)
        if isinstance(resolution, ResolutionFailure):
            log.info("resolution_failed", reason=resolution.reason.value)
            return ResolutionFailed(reason=resolution.reason)

        actor = session.actor()
        orchestrator = DeletionOrchestrator.from_settings(
            settings=self._settings,
            store=RecordStoreClient(http=self._http, access_jwt=session.access_jwt),
            clock=self._clock,
        )

        self._registry.acquire(actor.current_stable_id)
        # Once started, the sequence is not abandoned mid-mutation on request cancellation.
        task = asyncio.ensure_future(self._run(orchestrator, resolution, actor))
        return await asyncio.shield(task)

    async def _run(
        self,
        orchestrator: DeletionOrchestrator,
        identifier: ResourceIdentifier,
        actor: ActorContext,
    ) -> MutationOutcome:
        try:
            with structlog.contextvars.bound_contextvars(did=actor.current_stable_id):
                outcome = await orchestrator.delete_post(identifier, actor)
                log.info("cleanup_finished", outcome=outcome.kind)
                return outcome
        finally:
            self._registry.release(actor.current_stable_id)


# --- Module Notes -----------------------------------------------------------
# A new orchestrator/client pair is built per call: the access token belongs to the
# request, and nothing session-scoped is shared across calls.
