"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from bloom.dependencies import AppServices

router = APIRouter(tags=["system"])
logger = logging.getLogger("bloom.health")


@router.get("/health")
async def health_check(services: AppServices) -> dict:
    """Liveness probe.  Also reads one collection to check the storage backend."""
    settings = services.settings
    storage_ok = False
    try:
        await services.store.load(services.audit.key)
        storage_ok = True
    except Exception as exc:
        logger.warning("Health check storage probe failed: %s", exc)

    return {
        "status": "healthy" if storage_ok else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "storage": type(services.store.backend).__name__ if storage_ok else "unreachable",
        "catalog_version": services.catalog.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
