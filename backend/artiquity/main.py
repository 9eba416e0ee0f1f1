"""Artiquity API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, no auto-discovery
    - Global error handlers map ArtiquityError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager; the SQLite
      bootstrap creates tables and seeds defaults when auto_create_schema is on
    - Every request is logged once with method, path, status and duration

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
      (ADR: FastAPI 0.128)
    - /rsl/{license_id} lives outside /api/v1: crawlers resolve the URL that
      robots.txt and Link headers advertise
"""

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from artiquity import __version__
from artiquity.api.error_handlers import register_error_handlers
from artiquity.api.routes import (
    auth, campaigns, data_licensing, health, ideation, licenses, metadata,
    payments, webhooks,
)
from artiquity.config import get_settings
from artiquity.db.seed import seed_defaults
from artiquity.infrastructure.database import init_db
from artiquity.infrastructure.observability import setup_logging
from artiquity.infrastructure.rate_limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.auto_create_schema:
        await manager.create_schema()
        async with manager.session() as session:
            await seed_defaults(
                session, settings.default_client_id, settings.default_client_secret,
            )
    logger.info("Artiquity API started")
    yield
    await manager.dispose()
    logger.info("Artiquity API shutting down")


app = FastAPI(
    title="Artiquity API", version=__version__, lifespan=lifespan,
)

# CORS origins from settings
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return response


app.state.limiter = limiter
register_error_handlers(app)

# Routes: explicit registration, no auto-discovery
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(licenses.router)
app.include_router(licenses.public_router)
app.include_router(payments.router)
app.include_router(webhooks.router)
app.include_router(metadata.router)
app.include_router(ideation.router)
app.include_router(campaigns.router)
app.include_router(data_licensing.router)

# Static files: the wizard build in production
# ADR: mounted AFTER API routes so /api/v1/* and /rsl/* take precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
