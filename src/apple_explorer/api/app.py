"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root: settings, the document
    store, middleware and routers are wired here so the rest of the
    codebase never touches ``FastAPI`` directly.

Tags:
    api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apple_explorer import __version__
from apple_explorer.api.middleware.errors import unhandled_exception_handler
from apple_explorer.api.middleware.request_id import RequestIDMiddleware
from apple_explorer.api.routers import apples, health
from apple_explorer.core.protocols import DocumentStore
from apple_explorer.core.settings import AppleExplorerSettings, get_settings
from apple_explorer.logging import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    log = get_logger("apple_explorer.api")
    settings: AppleExplorerSettings = app.state.settings
    log.info("api.starting", version=app.version, store_backend=settings.store_backend)
    yield
    log.info("api.stopping")


def create_app(
    *,
    settings: AppleExplorerSettings | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : AppleExplorerSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    store : DocumentStore | None
        Pre-built document store. When ``None`` the store is created from
        settings on first use.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format)

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.store = store

    # Endpoints see the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    app.include_router(health.router, tags=["health"])
    app.include_router(apples.router, prefix=settings.api_prefix, tags=["apples"])

    return app
