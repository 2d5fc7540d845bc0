"""Generated health reports and on-demand daily insights."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.tracking import HealthReport

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[HealthReport])
async def list_reports(user: CurrentUser, services: AppServices) -> Any:
    return await services.insights.list_reports(user.user_id)


@router.post("/daily-insight", response_model=HealthReport, status_code=201)
async def generate_daily_insight(user: CurrentUser, services: AppServices) -> Any:
    return await services.insights.generate_daily_insight(user.user_id)
