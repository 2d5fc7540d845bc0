"""Goals and reminders."""

from __future__ import annotations

from typing import Any

from bloom.errors import InvalidInputError
from bloom.models.tracking import (
    Goal,
    GoalCreate,
    GoalStatus,
    Reminder,
    ReminderCreate,
)
from bloom.repositories.base import Repository, build


class GoalRepository(Repository[Goal]):
    model = Goal
    resource = "Goal"

    async def create(self, user_id: str, goal: GoalCreate | dict[str, Any]) -> Goal:
        """New goals start active with a current value of 0."""
        if isinstance(goal, dict):
            goal = build(GoalCreate, **goal)
        return await self._insert(Goal(user_id=user_id, **goal.model_dump()))

    async def list(self, user_id: str, status: GoalStatus | None = None) -> list[Goal]:
        goals = await self._for_user(user_id)
        if status is not None:
            goals = [g for g in goals if g.status == status]
        return goals

    async def get(self, user_id: str, goal_id: str) -> Goal:
        return await self._get_owned(user_id, goal_id)

    async def update_progress(self, user_id: str, goal_id: str, value: float) -> Goal:
        """Set the current value directly (the caller computes any delta).

        Negative values clamp to 0.  Values above the target are kept, and the
        status is left alone: completion is an explicit ``set_status`` call.
        """
        clamped = max(0.0, float(value))
        return await self._replace(
            user_id, goal_id, lambda g: g.model_copy(update={"current_value": clamped})
        )

    async def set_status(self, user_id: str, goal_id: str, status: GoalStatus | str) -> Goal:
        try:
            new_status = GoalStatus(status)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown goal status: {status}") from exc
        return await self._replace(
            user_id, goal_id, lambda g: g.model_copy(update={"status": new_status})
        )

    async def delete(self, user_id: str, goal_id: str) -> None:
        await self._remove(user_id, goal_id)


class ReminderRepository(Repository[Reminder]):
    model = Reminder
    resource = "Reminder"

    async def create(self, user_id: str, reminder: ReminderCreate | dict[str, Any]) -> Reminder:
        if isinstance(reminder, dict):
            reminder = build(ReminderCreate, **reminder)
        return await self._insert(Reminder(user_id=user_id, **reminder.model_dump()))

    async def list(self, user_id: str) -> list[Reminder]:
        return sorted(await self._for_user(user_id), key=lambda r: r.time)

    async def toggle_active(self, user_id: str, reminder_id: str) -> Reminder:
        return await self._replace(
            user_id,
            reminder_id,
            lambda r: r.model_copy(update={"is_active": not r.is_active}),
        )

    async def delete(self, user_id: str, reminder_id: str) -> None:
        await self._remove(user_id, reminder_id)
