"""Goal and reminder endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.tracking import (
    Goal,
    GoalCreate,
    GoalProgressUpdate,
    GoalStatus,
    GoalStatusUpdate,
    Reminder,
    ReminderCreate,
)

router = APIRouter(prefix="/goals", tags=["goals"])
reminders_router = APIRouter(prefix="/reminders", tags=["reminders"])


# ---------- Goals ----------

@router.get("", response_model=list[Goal])
async def list_goals(
    user: CurrentUser,
    services: AppServices,
    status: GoalStatus | None = Query(default=None),
) -> Any:
    return await services.goals.list(user.user_id, status)


@router.post("", response_model=Goal, status_code=201)
async def create_goal(user: CurrentUser, body: GoalCreate, services: AppServices) -> Any:
    return await services.goals.create(user.user_id, body)


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(goal_id: str, user: CurrentUser, services: AppServices) -> Any:
    return await services.goals.get(user.user_id, goal_id)


@router.patch("/{goal_id}/progress", response_model=Goal)
async def update_progress(
    goal_id: str, user: CurrentUser, body: GoalProgressUpdate, services: AppServices
) -> Any:
    return await services.goals.update_progress(user.user_id, goal_id, body.current_value)


@router.patch("/{goal_id}/status", response_model=Goal)
async def update_status(
    goal_id: str, user: CurrentUser, body: GoalStatusUpdate, services: AppServices
) -> Any:
    return await services.goals.set_status(user.user_id, goal_id, body.status)


@router.delete("/{goal_id}", status_code=204)
async def delete_goal(goal_id: str, user: CurrentUser, services: AppServices) -> None:
    await services.goals.delete(user.user_id, goal_id)


# ---------- Reminders ----------

@reminders_router.get("", response_model=list[Reminder])
async def list_reminders(user: CurrentUser, services: AppServices) -> Any:
    return await services.reminders.list(user.user_id)


@reminders_router.post("", response_model=Reminder, status_code=201)
async def create_reminder(user: CurrentUser, body: ReminderCreate, services: AppServices) -> Any:
    return await services.reminders.create(user.user_id, body)


@reminders_router.post("/{reminder_id}/toggle", response_model=Reminder)
async def toggle_reminder(reminder_id: str, user: CurrentUser, services: AppServices) -> Any:
    return await services.reminders.toggle_active(user.user_id, reminder_id)


@reminders_router.delete("/{reminder_id}", status_code=204)
async def delete_reminder(reminder_id: str, user: CurrentUser, services: AppServices) -> None:
    await services.reminders.delete(user.user_id, reminder_id)
