"""
post_cleaner.cleanup

Deletion orchestration package.

Responsibilities:
- Verify ownership, then overwrite and delete one post record.
- Report every result as a typed `MutationOutcome`.
"""

# Package marker.
