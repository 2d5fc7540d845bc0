"""Tests for integration connections and genomic uploads."""

from __future__ import annotations

import pytest

from bloom.conftest import ALICE, BOB
from bloom.errors import InvalidInputError, NotFoundError
from bloom.models.content import ConnectionStatus, SourceType, UploadStatus
from bloom.models.system import AuditAction
from bloom.services.container import Services


class TestConnections:
    @pytest.mark.asyncio
    async def test_connect_is_idempotent_per_source(self, services: Services) -> None:
        first = await services.integrations.connect(ALICE, "oura")
        second = await services.integrations.connect(ALICE, SourceType.oura)
        assert first.id == second.id
        assert len(await services.integrations.list(ALICE)) == 1

        entries = await services.audit.list(user_id=ALICE, action=AuditAction.CONNECT_INTEGRATION)
        assert len(entries) == 2

    @pytest.mark.asyncio
    async def test_disconnect_keeps_record(self, services: Services) -> None:
        conn = await services.integrations.connect(ALICE, "fitbit")
        disconnected = await services.integrations.disconnect(ALICE, conn.id)
        assert disconnected.status == ConnectionStatus.disconnected
        assert len(await services.integrations.list(ALICE)) == 1
        assert await services.audit.list(user_id=ALICE, action=AuditAction.DISCONNECT_INTEGRATION)

    @pytest.mark.asyncio
    async def test_reconnect_after_disconnect(self, services: Services) -> None:
        conn = await services.integrations.connect(ALICE, "apple_health")
        await services.integrations.disconnect(ALICE, conn.id)
        again = await services.integrations.connect(ALICE, "apple_health")
        assert again.id == conn.id
        assert again.status == ConnectionStatus.connected

    @pytest.mark.asyncio
    async def test_cannot_disconnect_another_users_connection(self, services: Services) -> None:
        conn = await services.integrations.connect(ALICE, "oura")
        with pytest.raises(NotFoundError):
            await services.integrations.disconnect(BOB, conn.id)
        assert await services.audit.list(user_id=BOB) == []

    @pytest.mark.asyncio
    async def test_mark_error(self, services: Services) -> None:
        conn = await services.integrations.connect(ALICE, "google_fit")
        assert (await services.integrations.mark_error(ALICE, conn.id)).status == ConnectionStatus.error

    @pytest.mark.asyncio
    async def test_unknown_source(self, services: Services) -> None:
        with pytest.raises(InvalidInputError):
            await services.integrations.connect(ALICE, "myspace")


class TestGenomicUploads:
    @pytest.mark.asyncio
    async def test_upload_completes_and_audits(self, services: Services) -> None:
        upload = await services.integrations.upload_genomic_data(ALICE, "23andme", "raw.txt")
        assert upload.status == UploadStatus.completed
        assert [u.id for u in await services.integrations.list_genomic_uploads(ALICE)] == [upload.id]
        entries = await services.audit.list(user_id=ALICE, action=AuditAction.UPLOAD_GENOMICS)
        assert "raw.txt" in entries[0].details

    @pytest.mark.asyncio
    async def test_empty_file_name_rejected(self, services: Services) -> None:
        with pytest.raises(InvalidInputError):
            await services.integrations.upload_genomic_data(ALICE, "23andme", "")
        assert await services.integrations.list_genomic_uploads(ALICE) == []
