"""Bloom API — FastAPI application entry point.

Run locally:
    uvicorn bloom.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bloom.config import Settings, get_settings
from bloom.errors import (
    BloomError,
    ExternalServiceError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from bloom.routers import (
    audit,
    billing,
    content,
    cycle,
    goals,
    health,
    integrations,
    journal,
    reports,
    symptoms,
    telehealth,
    users,
)
from bloom.services.container import Services, build_services, create_backend

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("bloom")

_STATUS_CODES: list[tuple[type[BloomError], int]] = [
    (NotFoundError, 404),
    (InvalidInputError, 422),
    (InvalidTransitionError, 409),
    (ExternalServiceError, 503),
]


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings: Settings = app.state.settings
    logging.getLogger("bloom").setLevel(settings.log_level.upper())
    logger.info("Starting Bloom API v%s [%s]", settings.app_version, settings.environment)

    services: Services | None = getattr(app.state, "services", None)
    if services is None:
        services = build_services(settings, await create_backend(settings))
        app.state.services = services
    if settings.seed_demo_profile:
        demo = await services.profiles.ensure_demo_profile(settings.demo_profile_email)
        logger.info("Demo profile available as %s", demo.id)

    yield

    await services.close()
    logger.info("Bloom API shut down")


# ---------- Error mapping ----------

async def bloom_error_handler(request: Request, exc: BloomError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 500
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# ---------- App factory ----------

def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Bloom API",
        description=(
            "Cycle and wellness tracking: personal logs, telehealth booking, "
            "subscriptions and an append-only audit trail."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if services is not None:
        app.state.services = services

    app.add_exception_handler(BloomError, bloom_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside the v1 prefix) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(users.router, prefix=v1_prefix)
    app.include_router(cycle.router, prefix=v1_prefix)
    app.include_router(symptoms.router, prefix=v1_prefix)
    app.include_router(journal.router, prefix=v1_prefix)
    app.include_router(goals.router, prefix=v1_prefix)
    app.include_router(goals.reminders_router, prefix=v1_prefix)
    app.include_router(telehealth.router, prefix=v1_prefix)
    app.include_router(billing.router, prefix=v1_prefix)
    app.include_router(integrations.router, prefix=v1_prefix)
    app.include_router(content.router, prefix=v1_prefix)
    app.include_router(reports.router, prefix=v1_prefix)
    app.include_router(audit.router, prefix=v1_prefix)

    return app


app = create_app()
