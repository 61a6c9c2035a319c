"""
post_cleaner.auth

Session collaborator package.

Responsibilities:
- Establish PDS sessions and expose the authenticated `ActorContext`.
- Inspect PDS access tokens before spending a round trip on them.
- FastAPI dependencies that turn a bearer token into a session.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The cleanup core only ever sees `ActorContext`; tokens stay inside this package and
# the record-store client.
