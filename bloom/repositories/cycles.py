"""Cycle records and symptom logs."""

from __future__ import annotations

from datetime import date
from typing import Any

from bloom.models.tracking import CycleRecord, CycleSettings, SymptomLog, SymptomLogCreate
from bloom.repositories.base import Repository, build


class CycleRepository(Repository[CycleRecord]):
    """At most one cycle record per user, overwritten on resubmission."""

    model = CycleRecord
    resource = "Cycle record"

    async def get(self, user_id: str, today: date | None = None) -> CycleRecord:
        """The user's record, or a 28/5-day default starting ``today``.

        The default is not persisted.
        """
        for record in await self._for_user(user_id):
            return record
        return CycleRecord(user_id=user_id, start_date=today or date.today())

    async def save(self, user_id: str, settings: CycleSettings | dict[str, Any]) -> CycleRecord:
        """Upsert by user id, keeping the existing record id."""
        if isinstance(settings, dict):
            settings = build(CycleSettings, **settings)
        saved: list[CycleRecord] = []

        def _apply(records: list[CycleRecord]) -> list[CycleRecord]:
            existing = next((r for r in records if r.user_id == user_id), None)
            record = CycleRecord(
                user_id=user_id,
                **settings.model_dump(),
                **({"id": existing.id} if existing else {}),
            )
            saved.append(record)
            return [r for r in records if r.user_id != user_id] + [record]

        await self._mutate(_apply)
        return saved[0]


class SymptomLogRepository(Repository[SymptomLog]):
    """Append-only symptom logs.  Several logs per day are allowed."""

    model = SymptomLog
    resource = "Symptom log"

    async def create(self, user_id: str, log: SymptomLogCreate | dict[str, Any]) -> SymptomLog:
        if isinstance(log, dict):
            log = build(SymptomLogCreate, **log)
        return await self._insert(SymptomLog(user_id=user_id, **log.model_dump()))

    async def list(self, user_id: str, limit: int | None = None) -> list[SymptomLog]:
        """Newest first by log date, then by save time."""
        logs = sorted(
            await self._for_user(user_id),
            key=lambda l: (l.log_date, l.created_at),
            reverse=True,
        )
        return logs[:limit] if limit is not None else logs

    async def latest_by_day(self, user_id: str) -> dict[date, SymptomLog]:
        """The most recently saved log for each day, newest day first."""
        latest: dict[date, SymptomLog] = {}
        for log in await self.list(user_id):
            latest.setdefault(log.log_date, log)
        return latest
