"""
post_cleaner.identifiers

Identifier resolution package.

Responsibilities:
- Turn user input (`at://` URIs or bsky.app post URLs) into post coordinates.
"""

from post_cleaner.identifiers.models import (
    POST_COLLECTION,
    FailureReason,
    ResolutionFailure,
    ResourceIdentifier,
)
from post_cleaner.identifiers.resolver import IdentifierResolver, resolve

__all__ = [
    "POST_COLLECTION",
    "FailureReason",
    "IdentifierResolver",
    "ResolutionFailure",
    "ResourceIdentifier",
    "resolve",
]
