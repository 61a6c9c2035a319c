"""
post_cleaner.api.app

FastAPI app factory for the post cleaner service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Open and close the shared httpx client used for every PDS call.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from post_cleaner import __version__
from post_cleaner.api.routers.health import router as health_router
from post_cleaner.api.routers.posts import router as posts_router
from post_cleaner.api.routers.session import router as session_router
from post_cleaner.observability.logging import configure_logging, get_logger
from post_cleaner.observability.middleware import RequestContextMiddleware
from post_cleaner.services.cleanup_service import InFlightRegistry
from post_cleaner.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    pds_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, pds_url=settings.pds_url)
        # One pooled client for the process; routers obtain it via `api.deps.pds_http`.
        async with httpx.AsyncClient(
            base_url=settings.pds_url,
            timeout=settings.http_timeout_seconds,
            headers={"User-Agent": f"{settings.service_name}/{__version__}"},
            transport=pds_transport,
        ) as http:
            app.state.http = http
            yield
        log.info("shutdown")

    app = FastAPI(
        title="Bluesky Post Cleaner",
        version=__version__,
        docs_url="/docs" if settings.env != "prod" else None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.in_flight = InFlightRegistry()

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(session_router)
    app.include_router(posts_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Tests pass `pds_transport=httpx.MockTransport(...)` to stand in for the PDS.
