"""
post_cleaner.records

Record-store client package.

Responsibilities:
- Provide the boundary the cleanup orchestrator uses to read, replace and delete records.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The orchestrator depends on the `RecordStore` protocol, not on httpx or XRPC paths.
