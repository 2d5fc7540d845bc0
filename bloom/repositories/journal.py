"""Journal entries and generated health reports.

Both families hold sensitive free text.  Content is passed through the
cipher before it reaches the Entity Store and decrypted on every read, so
callers only ever handle plaintext (or a cipher sentinel string).
"""

from __future__ import annotations

from typing import Any

from bloom.models.tracking import HealthReport, JournalEntry, JournalEntryCreate, ReportType
from bloom.repositories.base import Repository, build
from bloom.services.cipher import Cipher
from bloom.storage import EntityStore


class JournalRepository(Repository[JournalEntry]):
    model = JournalEntry
    resource = "Journal entry"

    def __init__(self, store: EntityStore, key: str, cipher: Cipher) -> None:
        super().__init__(store, key)
        self._cipher = cipher

    async def create(self, user_id: str, entry: JournalEntryCreate | dict[str, Any]) -> JournalEntry:
        """Store the entry encrypted; return it with plaintext content."""
        if isinstance(entry, dict):
            entry = build(JournalEntryCreate, **entry)
        stored = JournalEntry(
            user_id=user_id,
            **entry.model_dump(exclude={"content"}),
            content=self._cipher.encrypt(entry.content, user_id),
        )
        await self._insert(stored)
        return stored.model_copy(update={"content": entry.content})

    async def list(self, user_id: str) -> list[JournalEntry]:
        """Decrypted entries, newest entry date first."""
        entries = [
            e.model_copy(update={"content": self._cipher.decrypt(e.content, user_id)})
            for e in await self._for_user(user_id)
        ]
        return sorted(entries, key=lambda e: e.entry_date, reverse=True)

    async def delete(self, user_id: str, entry_id: str) -> None:
        await self._remove(user_id, entry_id)


class ReportRepository(Repository[HealthReport]):
    model = HealthReport
    resource = "Health report"

    def __init__(self, store: EntityStore, key: str, cipher: Cipher) -> None:
        super().__init__(store, key)
        self._cipher = cipher

    async def save(
        self,
        user_id: str,
        content: str,
        report_type: ReportType = ReportType.daily_insight,
    ) -> HealthReport:
        stored = HealthReport(
            user_id=user_id,
            content=self._cipher.encrypt(content, user_id),
            report_type=report_type,
        )
        await self._insert(stored)
        return stored.model_copy(update={"content": content})

    async def list(self, user_id: str) -> list[HealthReport]:
        reports = [
            r.model_copy(update={"content": self._cipher.decrypt(r.content, user_id)})
            for r in await self._for_user(user_id)
        ]
        return sorted(reports, key=lambda r: r.generated_at, reverse=True)
