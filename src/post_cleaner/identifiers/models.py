"""
post_cleaner.identifiers.models

Value objects produced by the identifier resolver.

Responsibilities:
- Define `ResourceIdentifier` (authority + record key of a post).
- Define the closed set of resolution failure reasons.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

POST_COLLECTION = "app.bsky.feed.post"


@dataclass(frozen=True, slots=True)
class ResourceIdentifier:
    """
    A post record addressed by its author (handle or DID) and record key.
    """

    authority: str
    record_key: str

    def __post_init__(self) -> None:
        if not self.authority or not self.record_key:
            raise ValueError("authority and record_key must be non-empty")

    @property
    def collection(self) -> str:
        return POST_COLLECTION

    def at_uri(self, repo: str | None = None) -> str:
        # `repo` lets callers render the URI against the owner's DID instead of a handle.
        return f"at://{repo or self.authority}/{POST_COLLECTION}/{self.record_key}"


class FailureReason(enum.StrEnum):
    empty_input = "empty_input"
    not_a_post_identifier = "not_a_post_identifier"
    invalid_url = "invalid_url"
    wrong_domain = "wrong_domain"
    malformed_post_path = "malformed_post_path"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    FailureReason.empty_input: "empty input",
    FailureReason.not_a_post_identifier: "not a post identifier",
    FailureReason.invalid_url: "invalid URL",
    FailureReason.wrong_domain: "wrong domain",
    FailureReason.malformed_post_path: "malformed post path",
}


@dataclass(frozen=True, slots=True)
class ResolutionFailure:
    reason: FailureReason
    raw: str = ""

    @property
    def message(self) -> str:
        return self.reason.message


Resolution = ResourceIdentifier | ResolutionFailure


# --- Module Notes -----------------------------------------------------------
# Identifiers are built fresh per submission and never cached.
