"""
post_cleaner.cleanup.outcomes

Typed results of one cleanup attempt.

Responsibilities:
- Enumerate the closed set of outcomes the presentation layer renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from post_cleaner.identifiers.models import FailureReason

Stage = Literal["lookup", "overwrite", "delete"]


@dataclass(frozen=True, slots=True)
class Success:
    uri: str

    kind = "success"


@dataclass(frozen=True, slots=True)
class ResolutionFailed:
    reason: FailureReason

    kind = "resolution_failed"


@dataclass(frozen=True, slots=True)
class OwnershipDenied:
    authority: str

    kind = "ownership_denied"


@dataclass(frozen=True, slots=True)
class RecordNotFound:
    uri: str

    kind = "record_not_found"


@dataclass(frozen=True, slots=True)
class RemoteError:
    """
    A remote call failed at `stage`. When the delete stage fails the record has already
    been overwritten with placeholder content and the delete should be retried.
    """

    stage: Stage
    detail: str

    kind = "remote_error"

    @property
    def record_overwritten(self) -> bool:
        return self.stage == "delete"


MutationOutcome = Success | ResolutionFailed | OwnershipDenied | RecordNotFound | RemoteError


# --- Module Notes -----------------------------------------------------------
# `kind` is a plain class attribute (not a dataclass field) so it never shows up in
# equality or constructor signatures.
