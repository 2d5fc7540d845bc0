"""Tests for encrypted journal entries and health reports."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from bloom.conftest import ALICE, BOB
from bloom.errors import NotFoundError
from bloom.models.tracking import JournalEntry, ReportType
from bloom.services.cipher import DECRYPTION_ERROR, KEY_MISMATCH
from bloom.services.container import Services
from bloom.storage import MemoryBackend


class TestJournal:
    @pytest.mark.asyncio
    async def test_content_encrypted_at_rest(self, services: Services, backend: MemoryBackend) -> None:
        entry = await services.journal.create(
            ALICE, {"title": "Monday", "content": "felt anxious before the meeting"}
        )
        assert entry.content == "felt anxious before the meeting"
        raw = backend.raw(services.journal.key)
        assert "felt anxious" not in raw
        assert "Monday" in raw

    @pytest.mark.asyncio
    async def test_surrounding_whitespace_is_kept(self, services: Services) -> None:
        content = "  line one\n  indented\n"
        entry = await services.journal.create(ALICE, {"title": " Notes ", "content": content})
        assert entry.content == content
        assert entry.title == "Notes"
        [listed] = await services.journal.list(ALICE)
        assert listed.content == content

    @pytest.mark.asyncio
    async def test_list_decrypts_newest_first(self, services: Services) -> None:
        await services.journal.create(
            ALICE,
            {"title": "old", "content": "a", "entry_date": datetime(2026, 1, 1, tzinfo=timezone.utc)},
        )
        await services.journal.create(
            ALICE,
            {"title": "new", "content": "b", "entry_date": datetime(2026, 2, 1, tzinfo=timezone.utc)},
        )
        entries = await services.journal.list(ALICE)
        assert [(e.title, e.content) for e in entries] == [("new", "b"), ("old", "a")]

    @pytest.mark.asyncio
    async def test_foreign_ciphertext_reads_as_key_mismatch(
        self, services: Services, backend: MemoryBackend
    ) -> None:
        # A record owned by Bob but holding Alice's ciphertext
        stolen = JournalEntry(
            user_id=BOB,
            title="moved",
            content=services.cipher.encrypt("alice only", ALICE),
        )
        await services.store.save(services.journal.key, [stolen.model_dump(mode="json")])
        assert (await services.journal.list(BOB))[0].content == KEY_MISMATCH

    @pytest.mark.asyncio
    async def test_malformed_ciphertext_reads_as_error(self, services: Services) -> None:
        broken = JournalEntry(user_id=ALICE, title="x", content="***")
        await services.store.save(services.journal.key, [broken.model_dump(mode="json")])
        assert (await services.journal.list(ALICE))[0].content == DECRYPTION_ERROR

    @pytest.mark.asyncio
    async def test_delete_scoped_to_owner(self, services: Services) -> None:
        entry = await services.journal.create(ALICE, {"title": "t", "content": "c"})
        with pytest.raises(NotFoundError):
            await services.journal.delete(BOB, entry.id)
        await services.journal.delete(ALICE, entry.id)
        assert await services.journal.list(ALICE) == []

    @pytest.mark.asyncio
    async def test_invalid_record_in_collection_reads_empty(
        self, services: Services, backend: MemoryBackend
    ) -> None:
        await backend.write_many({services.journal.key: json.dumps([{"id": "x"}])})
        assert await services.journal.list(ALICE) == []

    @pytest.mark.asyncio
    async def test_invalid_row_does_not_erase_valid_rows(
        self, services: Services, backend: MemoryBackend
    ) -> None:
        kept = await services.journal.create(ALICE, {"title": "kept", "content": "still here"})
        rows = json.loads(backend.raw(services.journal.key))
        await backend.write_many({services.journal.key: json.dumps(rows + [{"id": "broken"}])})

        assert [e.id for e in await services.journal.list(ALICE)] == [kept.id]

        await services.journal.create(ALICE, {"title": "next", "content": "after"})
        assert {e.title for e in await services.journal.list(ALICE)} == {"kept", "next"}


class TestReports:
    @pytest.mark.asyncio
    async def test_save_and_list(self, services: Services, backend: MemoryBackend) -> None:
        saved = await services.reports.save(ALICE, "Weekly summary text", ReportType.weekly_summary)
        assert saved.content == "Weekly summary text"
        assert "Weekly summary text" not in backend.raw(services.reports.key)

        reports = await services.reports.list(ALICE)
        assert [(r.content, r.report_type) for r in reports] == [
            ("Weekly summary text", ReportType.weekly_summary)
        ]
        assert await services.reports.list(BOB) == []
