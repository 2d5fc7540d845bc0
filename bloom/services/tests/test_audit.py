"""Tests for the append-only audit trail."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from bloom.models.system import AuditAction, AuditStatus
from bloom.services.audit import AuditTrail
from bloom.storage import Collection, EntityStore, MemoryBackend

KEY = Collection.audit_log.key("v1")


@pytest.fixture
def audit(store: EntityStore) -> AuditTrail:
    return AuditTrail(store, KEY)


class TestAppend:
    @pytest.mark.asyncio
    async def test_entry_fields(self, audit: AuditTrail) -> None:
        entry = await audit.append(
            AuditAction.UPDATE_PRIVACY, "Privacy Preferences", details="changed", user_id="u1"
        )
        assert entry.actor == "User"
        assert entry.status == AuditStatus.ALLOWED
        assert entry.audit_id
        assert entry.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_entries_are_immutable(self, audit: AuditTrail) -> None:
        entry = await audit.append(AuditAction.UPLOAD_GENOMICS, "Vault", user_id="u1")
        with pytest.raises(ValidationError):
            entry.details = "rewritten"

    @pytest.mark.asyncio
    async def test_append_never_drops_earlier_entries(self, audit: AuditTrail) -> None:
        for _ in range(3):
            await audit.append(AuditAction.CONNECT_INTEGRATION, "Integrations", user_id="u1")
        assert len(await audit.list()) == 3


class TestList:
    @pytest.mark.asyncio
    async def test_newest_first(self, audit: AuditTrail) -> None:
        first = await audit.append(AuditAction.BOOK_APPOINTMENT, "Telehealth", user_id="u1")
        second = await audit.append(AuditAction.CANCEL_APPOINTMENT, "Telehealth", user_id="u1")
        assert [e.audit_id for e in await audit.list()] == [second.audit_id, first.audit_id]

    @pytest.mark.asyncio
    async def test_equal_timestamps_keep_reverse_insertion_order(self) -> None:
        stamp = "2026-03-01T00:00:00+00:00"
        rows = [
            {"audit_id": "a", "timestamp": stamp, "action": "BOOK_APPOINTMENT", "resource": "Telehealth"},
            {"audit_id": "b", "timestamp": stamp, "action": "BOOK_APPOINTMENT", "resource": "Telehealth"},
        ]
        audit = AuditTrail(EntityStore(MemoryBackend({KEY: json.dumps(rows)})), KEY)
        assert [e.audit_id for e in await audit.list()] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_filters(self, audit: AuditTrail) -> None:
        await audit.append(AuditAction.BOOK_APPOINTMENT, "Telehealth", user_id="u1")
        await audit.append(AuditAction.UPDATE_PRIVACY, "Privacy", user_id="u1")
        await audit.append(AuditAction.BOOK_APPOINTMENT, "Telehealth", user_id="u2")

        assert len(await audit.list(user_id="u1")) == 2
        booked = await audit.list(user_id="u1", action=AuditAction.BOOK_APPOINTMENT)
        assert [e.action for e in booked] == [AuditAction.BOOK_APPOINTMENT]

    @pytest.mark.asyncio
    async def test_corrupt_collection_lists_empty(self) -> None:
        bad = json.dumps([{"audit_id": "x", "action": "NOT_AN_ACTION"}])
        audit = AuditTrail(EntityStore(MemoryBackend({KEY: bad})), KEY)
        assert await audit.list() == []
