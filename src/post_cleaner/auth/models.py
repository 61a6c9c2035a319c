"""
post_cleaner.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated actor identity (`ActorContext`) handed to the orchestrator.
- Define the PDS session (`PdsSession`) it is derived from.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Returned by the PDS in place of a handle that no longer resolves to the DID.
INVALID_HANDLE = "handle.invalid"


@dataclass(frozen=True, slots=True)
class ActorContext:
    """
    Authenticated actor. Created after a session is established, discarded with it.
    """

    current_stable_id: str
    current_handle: str | None = None

    def owns(self, authority: str) -> bool:
        if authority == self.current_stable_id:
            return True
        # Handles are case-insensitive; DIDs are compared exactly.
        return self.current_handle is not None and authority.lower() == self.current_handle.lower()


@dataclass(frozen=True, slots=True)
class PdsSession:
    did: str
    handle: str | None
    access_jwt: str = field(repr=False)
    refresh_jwt: str | None = field(default=None, repr=False)

    def actor(self) -> ActorContext:
        handle = self.handle if self.handle and self.handle != INVALID_HANDLE else None
        return ActorContext(current_stable_id=self.did, current_handle=handle)
