"""Wearable/lab integration connections and genomic uploads.

Connecting, disconnecting and uploading genomic data are privacy-relevant and
each write commits together with its audit entry.
"""

from __future__ import annotations

import logging
import uuid

from bloom.errors import InvalidInputError
from bloom.models.base import utc_now
from bloom.models.content import (
    ConnectionStatus,
    GenomicProvider,
    GenomicUpload,
    IntegrationConnection,
    SourceType,
    UploadStatus,
)
from bloom.models.system import AuditAction
from bloom.repositories.base import Repository, build
from bloom.services.audit import AuditTrail
from bloom.services.resilience import simulate_latency
from bloom.storage import EntityStore

logger = logging.getLogger("bloom.repositories.integrations")


def _source(value: SourceType | str) -> SourceType:
    try:
        return SourceType(value)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown integration source: {value}") from exc


class IntegrationRepository(Repository[IntegrationConnection]):
    model = IntegrationConnection
    resource = "Integration"

    def __init__(
        self,
        store: EntityStore,
        key: str,
        uploads_key: str,
        audit: AuditTrail,
        latency_ms: int = 0,
    ) -> None:
        super().__init__(store, key)
        self._uploads = _GenomicUploads(store, uploads_key)
        self._audit = audit
        self._latency_ms = latency_ms

    async def list(self, user_id: str) -> list[IntegrationConnection]:
        return await self._for_user(user_id)

    async def connect(self, user_id: str, source_type: SourceType | str) -> IntegrationConnection:
        """Connect a source, reusing the existing (user, source) record if any.

        Emits one CONNECT_INTEGRATION audit entry per successful call.
        """
        source = _source(source_type)
        await simulate_latency(self._latency_ms)  # OAuth round trip
        result: list[IntegrationConnection] = []

        def _apply(rows: list[IntegrationConnection]) -> list[IntegrationConnection]:
            out = []
            for row in rows:
                if row.user_id == user_id and row.source_type == source and not result:
                    row = row.model_copy(
                        update={"status": ConnectionStatus.connected, "last_sync": utc_now()}
                    )
                    result.append(row)
                out.append(row)
            if not result:
                row = IntegrationConnection(
                    user_id=user_id,
                    source_type=source,
                    last_sync=utc_now(),
                    external_user_id=f"ext_user_{uuid.uuid4().hex[:8]}",
                )
                result.append(row)
                out.append(row)
            return out

        async with self._store.transaction(self._key, self._audit.key) as tx:
            await self._mutate(_apply, tx)
            await self._audit.append(
                AuditAction.CONNECT_INTEGRATION,
                "Integrations",
                details=f"Connected {source.value}",
                user_id=user_id,
                tx=tx,
            )
        return result[0]

    async def disconnect(self, user_id: str, connection_id: str) -> IntegrationConnection:
        async with self._store.transaction(self._key, self._audit.key) as tx:
            conn = await self._replace(
                user_id,
                connection_id,
                lambda c: c.model_copy(update={"status": ConnectionStatus.disconnected}),
                tx,
            )
            await self._audit.append(
                AuditAction.DISCONNECT_INTEGRATION,
                "Integrations",
                details=f"Disconnected {conn.source_type.value}",
                user_id=user_id,
                tx=tx,
            )
        return conn

    async def mark_error(self, user_id: str, connection_id: str) -> IntegrationConnection:
        """Flag a connection whose last sync failed."""
        return await self._replace(
            user_id,
            connection_id,
            lambda c: c.model_copy(update={"status": ConnectionStatus.error}),
        )

    async def upload_genomic_data(
        self, user_id: str, provider: GenomicProvider | str, file_name: str
    ) -> GenomicUpload:
        upload = build(GenomicUpload, user_id=user_id, provider=provider, file_name=file_name)
        await simulate_latency(self._latency_ms)
        upload = upload.model_copy(update={"status": UploadStatus.completed})
        async with self._store.transaction(self._uploads.key, self._audit.key) as tx:
            await self._uploads._insert(upload, tx)
            await self._audit.append(
                AuditAction.UPLOAD_GENOMICS,
                "Privacy Vault",
                details=f"Uploaded {upload.file_name} from {upload.provider.value}",
                user_id=user_id,
                tx=tx,
            )
        logger.info("Genomic upload %s stored for user %s", upload.id, user_id)
        return upload

    async def list_genomic_uploads(self, user_id: str) -> list[GenomicUpload]:
        uploads = await self._uploads._for_user(user_id)
        return sorted(uploads, key=lambda u: u.uploaded_at, reverse=True)


class _GenomicUploads(Repository[GenomicUpload]):
    model = GenomicUpload
    resource = "Genomic upload"
