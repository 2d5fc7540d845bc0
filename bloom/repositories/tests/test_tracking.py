"""Tests for cycle records, symptom logs, goals and reminders."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from bloom.conftest import ALICE, BOB, TEST_DATE
from bloom.errors import InvalidInputError, NotFoundError
from bloom.models.tracking import GoalStatus
from bloom.services.container import Services


class TestCycles:
    @pytest.mark.asyncio
    async def test_default_is_not_persisted(self, services: Services) -> None:
        record = await services.cycles.get(ALICE, TEST_DATE)
        assert (record.cycle_length, record.period_length) == (28, 5)
        assert record.start_date == TEST_DATE
        assert await services.store.load(services.cycles.key) == []

    @pytest.mark.asyncio
    async def test_save_is_an_upsert(self, services: Services) -> None:
        first = await services.cycles.save(ALICE, {"start_date": date(2026, 2, 1)})
        second = await services.cycles.save(
            ALICE, {"start_date": date(2026, 2, 3), "cycle_length": 30}
        )
        assert first.id == second.id
        assert len(await services.store.load(services.cycles.key)) == 1
        assert (await services.cycles.get(ALICE)).cycle_length == 30

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            {"start_date": date(2026, 2, 1), "cycle_length": 10},
            {"start_date": date(2026, 2, 1), "period_length": 0},
            {"start_date": date(2026, 2, 1), "period_length": 15},
        ],
    )
    async def test_invalid_settings_rejected(self, services: Services, data: dict) -> None:
        with pytest.raises(InvalidInputError):
            await services.cycles.save(ALICE, data)


class TestSymptomLogs:
    @pytest.mark.asyncio
    async def test_newest_first_and_limit(self, services: Services) -> None:
        for day in (3, 1, 2):
            await services.symptoms.create(
                ALICE, {"log_date": date(2026, 2, day), "severity": 3, "mood": "happy"}
            )
        logs = await services.symptoms.list(ALICE)
        assert [l.log_date.day for l in logs] == [3, 2, 1]
        assert len(await services.symptoms.list(ALICE, limit=2)) == 2

    @pytest.mark.asyncio
    async def test_several_logs_per_day_latest_wins(self, services: Services) -> None:
        await services.symptoms.create(
            ALICE, {"log_date": TEST_DATE, "severity": 2, "mood": "happy"}
        )
        await asyncio.sleep(0.001)
        later = await services.symptoms.create(
            ALICE, {"log_date": TEST_DATE, "severity": 7, "mood": "tired"}
        )
        assert len(await services.symptoms.list(ALICE)) == 2
        assert (await services.symptoms.latest_by_day(ALICE))[TEST_DATE].id == later.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("severity", [0, 11])
    async def test_severity_bounds(self, services: Services, severity: int) -> None:
        with pytest.raises(InvalidInputError):
            await services.symptoms.create(
                ALICE, {"log_date": TEST_DATE, "severity": severity, "mood": "happy"}
            )

    @pytest.mark.asyncio
    async def test_notes_keep_whitespace(self, services: Services) -> None:
        log = await services.symptoms.create(
            ALICE,
            {"log_date": TEST_DATE, "severity": 4, "mood": "sad", "notes": "\n cramps\n"},
        )
        assert log.notes == "\n cramps\n"
        assert (await services.symptoms.list(ALICE))[0].notes == "\n cramps\n"

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, services: Services) -> None:
        await services.symptoms.create(ALICE, {"log_date": TEST_DATE, "severity": 2, "mood": "sad"})
        assert await services.symptoms.list(BOB) == []


class TestGoals:
    @pytest.mark.asyncio
    async def test_create_defaults(self, services: Services) -> None:
        goal = await services.goals.create(
            ALICE, {"name": "Water", "target_value": 8, "unit": "glasses"}
        )
        assert goal.current_value == 0
        assert goal.status == GoalStatus.active
        assert goal.completion_pct == 0

    @pytest.mark.asyncio
    async def test_progress_clamps_at_zero_but_not_at_target(self, services: Services) -> None:
        goal = await services.goals.create(ALICE, {"name": "Steps", "target_value": 4, "unit": "k"})
        assert (await services.goals.update_progress(ALICE, goal.id, -3)).current_value == 0
        over = await services.goals.update_progress(ALICE, goal.id, 6)
        assert over.current_value == 6
        assert over.completion_pct == 150
        assert over.status == GoalStatus.active

    @pytest.mark.asyncio
    async def test_status_and_filter(self, services: Services) -> None:
        goal = await services.goals.create(ALICE, {"name": "Sleep", "target_value": 8, "unit": "h"})
        await services.goals.create(ALICE, {"name": "Yoga", "target_value": 3, "unit": "x"})
        await services.goals.set_status(ALICE, goal.id, "completed")
        completed = await services.goals.list(ALICE, GoalStatus.completed)
        assert [g.id for g in completed] == [goal.id]
        assert len(await services.goals.list(ALICE, GoalStatus.active)) == 1

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, services: Services) -> None:
        goal = await services.goals.create(ALICE, {"name": "Sleep", "target_value": 8, "unit": "h"})
        with pytest.raises(InvalidInputError):
            await services.goals.set_status(ALICE, goal.id, "paused")

    @pytest.mark.asyncio
    async def test_zero_target_rejected(self, services: Services) -> None:
        with pytest.raises(InvalidInputError):
            await services.goals.create(ALICE, {"name": "X", "target_value": 0, "unit": "x"})

    @pytest.mark.asyncio
    async def test_other_users_goal_is_not_found(self, services: Services) -> None:
        goal = await services.goals.create(ALICE, {"name": "Sleep", "target_value": 8, "unit": "h"})
        with pytest.raises(NotFoundError):
            await services.goals.update_progress(BOB, goal.id, 1)
        with pytest.raises(NotFoundError):
            await services.goals.delete(BOB, goal.id)
        assert (await services.goals.get(ALICE, goal.id)).current_value == 0

    @pytest.mark.asyncio
    async def test_delete(self, services: Services) -> None:
        goal = await services.goals.create(ALICE, {"name": "Sleep", "target_value": 8, "unit": "h"})
        await services.goals.delete(ALICE, goal.id)
        assert await services.goals.list(ALICE) == []
        with pytest.raises(NotFoundError):
            await services.goals.delete(ALICE, goal.id)


class TestReminders:
    @pytest.mark.asyncio
    async def test_sorted_by_time_and_toggle(self, services: Services) -> None:
        late = await services.reminders.create(ALICE, {"name": "Magnesium", "time": "21:00"})
        await services.reminders.create(ALICE, {"name": "Iron", "time": "08:30"})
        assert [r.name for r in await services.reminders.list(ALICE)] == ["Iron", "Magnesium"]

        toggled = await services.reminders.toggle_active(ALICE, late.id)
        assert toggled.is_active is False
        assert (await services.reminders.toggle_active(ALICE, late.id)).is_active is True

    @pytest.mark.asyncio
    async def test_bad_time_rejected(self, services: Services) -> None:
        with pytest.raises(InvalidInputError):
            await services.reminders.create(ALICE, {"name": "Iron", "time": "25:00"})

    @pytest.mark.asyncio
    async def test_toggle_other_users_reminder(self, services: Services) -> None:
        reminder = await services.reminders.create(ALICE, {"name": "Iron", "time": "08:30"})
        with pytest.raises(NotFoundError):
            await services.reminders.toggle_active(BOB, reminder.id)
