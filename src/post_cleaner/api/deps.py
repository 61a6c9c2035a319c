"""
post_cleaner.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, the PDS http client and the in-flight registry.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

import httpx
from fastapi import Depends, Request

from post_cleaner.services.cleanup_service import CleanupService, InFlightRegistry
from post_cleaner.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def pds_http(request: Request) -> httpx.AsyncClient:
    # Created in the lifespan handler of `post_cleaner.api.app.create_app`.
    return request.app.state.http  # type: ignore[attr-defined]


def in_flight_registry(request: Request) -> InFlightRegistry:
    return request.app.state.in_flight  # type: ignore[attr-defined]


def cleanup_service(
    settings: Settings = Depends(settings_dep),
    http: httpx.AsyncClient = Depends(pds_http),
    registry: InFlightRegistry = Depends(in_flight_registry),
) -> CleanupService:
    return CleanupService(settings=settings, http=http, registry=registry)
