"""Read-only view of the caller's audit trail."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.system import AuditAction, AuditLogEntry

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditLogEntry])
async def list_entries(
    user: CurrentUser,
    services: AppServices,
    action: AuditAction | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
) -> Any:
    entries = await services.audit.list(user_id=user.user_id, action=action)
    return entries[:limit]
