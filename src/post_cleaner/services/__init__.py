"""
post_cleaner.services

Service-layer package.

Responsibilities:
- Compose resolver, session and orchestrator into the operations the API exposes.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake clients.
