"""
post_cleaner.auth.tokens

PDS token inspection helpers.

Responsibilities:
- Read claims (sub/scope/exp) from PDS-issued JWTs without verifying the signature.
- Decide whether a token is usable for repository writes.

Note:
- Only the PDS can verify its own tokens; inspection here is a fast local pre-check,
  the PDS remains the authority on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

ACCESS_SCOPES = frozenset(
    {"com.atproto.access", "com.atproto.appPass", "com.atproto.appPassPrivileged"}
)
REFRESH_SCOPE = "com.atproto.refresh"


class TokenInspectionError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    scope: str | None
    expires_at: datetime | None

    @property
    def is_access(self) -> bool:
        # Tokens without a scope claim are left for the PDS to judge.
        return self.scope is None or self.scope in ACCESS_SCOPES

    @property
    def is_refresh(self) -> bool:
        return self.scope == REFRESH_SCOPE

    def expired(self, *, now: datetime | None = None, leeway: timedelta = timedelta(0)) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(tz=UTC)
        return self.expires_at <= now + leeway


def inspect_token(token: str) -> TokenClaims:
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False, "verify_aud": False},
        )
    except InvalidTokenError as e:
        raise TokenInspectionError(str(e)) from e

    subject = str(payload.get("sub", ""))
    if not subject:
        raise TokenInspectionError("token has no subject")

    exp = payload.get("exp")
    expires_at = None
    if isinstance(exp, int | float):
        expires_at = datetime.fromtimestamp(exp, tz=UTC)

    scope = payload.get("scope")
    return TokenClaims(
        subject=subject,
        scope=str(scope) if scope is not None else None,
        expires_at=expires_at,
    )


# --- Module Notes -----------------------------------------------------------
# Used by `auth.deps` to reject expired or refresh-scoped bearer tokens with a 401
# before any XRPC call is made.
