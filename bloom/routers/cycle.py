"""Cycle record, current position and the illustrative hormone curve."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.cycle import hormone_curve, snapshot
from bloom.dependencies import AppServices, CurrentUser
from bloom.models.tracking import CycleRecord, CycleSettings

router = APIRouter(prefix="/cycle", tags=["cycle"])


@router.get("", response_model=CycleRecord)
async def get_cycle(user: CurrentUser, services: AppServices) -> Any:
    return await services.cycles.get(user.user_id)


@router.put("", response_model=CycleRecord)
async def save_cycle(user: CurrentUser, body: CycleSettings, services: AppServices) -> Any:
    return await services.cycles.save(user.user_id, body)


@router.get("/snapshot")
async def get_snapshot(user: CurrentUser, services: AppServices) -> dict:
    record = await services.cycles.get(user.user_id)
    current = snapshot(record)
    return {
        "cycle_day": current.cycle_day,
        "phase": current.phase.value,
        "days_remaining": current.days_remaining,
        "next_period_start": current.next_period_start.isoformat(),
    }


@router.get("/hormone-curve")
async def get_hormone_curve(user: CurrentUser, services: AppServices) -> dict:
    """Synthetic curve for charting.  Not clinical data."""
    record = await services.cycles.get(user.user_id)
    points = hormone_curve(record.cycle_length, record.period_length)
    return {
        "illustrative": True,
        "points": [
            {
                "day": p.day,
                "level": p.level,
                "is_period": p.is_period,
                "is_ovulation": p.is_ovulation,
            }
            for p in points
        ],
    }
