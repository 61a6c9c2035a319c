"""
post_cleaner.api

HTTP presentation layer.

Responsibilities:
- Expose resolve/cleanup/session operations as JSON endpoints.
- Map typed outcomes onto HTTP status codes.
"""

# Package marker.
