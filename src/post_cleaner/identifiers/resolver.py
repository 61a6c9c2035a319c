"""
post_cleaner.identifiers.resolver

Parse free-form input into a `ResourceIdentifier`.

Responsibilities:
- Try an ordered list of parser strategies with first-success semantics.
- Convert every malformed input into a typed `ResolutionFailure` (never raise).

A strategy returns a `ResourceIdentifier`, a terminal `ResolutionFailure`, or `None`
when the input is not in the form it understands.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from functools import partial
from urllib.parse import unquote, urlsplit

from post_cleaner.identifiers.models import (
    POST_COLLECTION,
    FailureReason,
    Resolution,
    ResolutionFailure,
    ResourceIdentifier,
)

Strategy = Callable[[str], Resolution | None]

DEFAULT_WEB_HOST = "bsky.app"

_AT_URI = re.compile(
    r"^at://"
    r"(?P<authority>did:[a-z0-9]+:[a-z0-9._:%-]+|[a-z0-9][a-z0-9.-]*)"
    r"(?P<path>/[^?#\s]*)?"
    r"(?:\?[^#\s]*)?"
    r"(?:#\S*)?$",
    re.IGNORECASE,
)
_RECORD_KEY = re.compile(r"^[A-Za-z0-9._:~-]{1,512}$")


def _valid_record_key(key: str) -> bool:
    return key not in (".", "..") and _RECORD_KEY.match(key) is not None


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def parse_at_uri(text: str) -> Resolution | None:
    if text[:5].lower() != "at://":
        return None
    m = _AT_URI.match(text)
    if m is None:
        return None

    segments = _segments(m.group("path") or "")
    collection = segments[0] if segments else ""
    record_key = segments[1] if len(segments) > 1 else ""
    if collection != POST_COLLECTION or not _valid_record_key(record_key):
        return ResolutionFailure(FailureReason.not_a_post_identifier, raw=text)
    return ResourceIdentifier(authority=m.group("authority"), record_key=record_key)


def parse_web_url(text: str, *, web_host: str = DEFAULT_WEB_HOST) -> Resolution:
    try:
        parts = urlsplit(text)
        hostname = parts.hostname
    except ValueError:
        return ResolutionFailure(FailureReason.invalid_url, raw=text)
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        return ResolutionFailure(FailureReason.invalid_url, raw=text)
    if hostname != web_host.lower():
        return ResolutionFailure(FailureReason.wrong_domain, raw=text)

    # .../profile/<authority>/.../post/<rkey>; markers need not sit at fixed offsets.
    segments = [unquote(s) for s in _segments(parts.path)]
    authority = _after(segments, "profile")
    if authority is None:
        return ResolutionFailure(FailureReason.malformed_post_path, raw=text)
    record_key = _after(segments, "post", start=segments.index("profile") + 2)
    if record_key is None or not _valid_record_key(record_key):
        return ResolutionFailure(FailureReason.malformed_post_path, raw=text)
    return ResourceIdentifier(authority=authority, record_key=record_key)


def _after(segments: list[str], marker: str, *, start: int = 0) -> str | None:
    try:
        idx = segments.index(marker, start)
    except ValueError:
        return None
    if idx + 1 >= len(segments):
        return None
    return segments[idx + 1]


class IdentifierResolver:
    """
    Ordered strategy chain. Canonical `at://` parsing always runs before URL parsing.
    """

    def __init__(
        self,
        *,
        web_host: str = DEFAULT_WEB_HOST,
        strategies: Sequence[Strategy] | None = None,
    ) -> None:
        self._strategies: tuple[Strategy, ...] = tuple(
            strategies
            if strategies is not None
            else (parse_at_uri, partial(parse_web_url, web_host=web_host))
        )

    def resolve(self, raw: str) -> Resolution:
        text = (raw or "").strip()
        if not text:
            return ResolutionFailure(FailureReason.empty_input, raw=raw or "")

        for strategy in self._strategies:
            result = strategy(text)
            if result is not None:
                return result
        return ResolutionFailure(FailureReason.invalid_url, raw=text)


def resolve(raw: str, *, web_host: str = DEFAULT_WEB_HOST) -> Resolution:
    return IdentifierResolver(web_host=web_host).resolve(raw)


# --- Module Notes -----------------------------------------------------------
# Pure module: no I/O, no logging. Callers log the failure reason they surface.
