"""
VidShare - Main FastAPI Application

Video sharing backend: videos, comments, likes, tweets, playlists,
subscriptions and channel dashboards.
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from vidshare.core.config import Settings, get_settings
from vidshare.core.database import Database
from vidshare.core.errors import register_exception_handlers
from vidshare.services.media.storage_service import MediaStorage


# ── Logging ──────────────────────────────────────────────────────────────

def configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level.upper())
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


logger = structlog.get_logger()


# ── Lifespan ─────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    settings: Settings = app.state.settings
    logger.info("Starting VidShare", version=settings.app_version)

    database = Database(settings.database_url, echo=settings.database_echo)
    await database.connect(create_tables=settings.auto_create_tables)
    app.state.database = database
    if getattr(app.state, "media_storage", None) is None:
        app.state.media_storage = MediaStorage(settings)
    app.state.started_at = time.monotonic()

    logger.info("VidShare ready", api_prefix=settings.api_prefix)

    yield

    # Shutdown
    await database.dispose()
    logger.info("Shutting down VidShare")


# ── App ──────────────────────────────────────────────────────────────────

def create_app(settings: Optional[Settings] = None, media_storage=None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Video sharing backend with social features and channel dashboards",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.media_storage = media_storage

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus metrics
    app.mount("/metrics", make_asgi_app())

    register_exception_handlers(app)

    # ── Routes ───────────────────────────────────────────────────────────

    from vidshare.api.routes import (
        comments, dashboard, healthcheck, likes, playlists, subscriptions, tweets, users, videos,
    )

    for module in (healthcheck, users, videos, comments, tweets, likes, subscriptions, playlists, dashboard):
        app.include_router(module.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api": settings.api_prefix,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
