"""Symptom log endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.tracking import SymptomLog, SymptomLogCreate

router = APIRouter(prefix="/symptoms", tags=["symptoms"])


@router.get("", response_model=list[SymptomLog])
async def list_logs(
    user: CurrentUser,
    services: AppServices,
    limit: int | None = Query(default=None, ge=1, le=500),
) -> Any:
    return await services.symptoms.list(user.user_id, limit=limit)


@router.post("", response_model=SymptomLog, status_code=201)
async def create_log(user: CurrentUser, body: SymptomLogCreate, services: AppServices) -> Any:
    return await services.symptoms.create(user.user_id, body)
