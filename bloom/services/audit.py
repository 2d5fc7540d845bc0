"""Append-only audit trail of privacy- and money-relevant actions.

Entries are immutable once written: ``append`` only ever adds to the end of
the collection and nothing in the codebase rewrites or removes entries.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError

from bloom.models.system import AuditAction, AuditLogEntry, AuditStatus
from bloom.storage import EntityStore, StoreTransaction

logger = logging.getLogger("bloom.services.audit")

_entries = TypeAdapter(list[AuditLogEntry])


class AuditTrail:
    def __init__(self, store: EntityStore, key: str) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def append(
        self,
        action: AuditAction,
        resource: str,
        *,
        details: str | None = None,
        status: AuditStatus = AuditStatus.ALLOWED,
        actor: str = "User",
        user_id: str | None = None,
        tx: StoreTransaction | None = None,
    ) -> AuditLogEntry:
        """Record an action.  Pass ``tx`` to commit with the caller's other writes."""
        entry = AuditLogEntry(
            actor=actor,
            action=action,
            resource=resource,
            status=status,
            details=details,
            user_id=user_id,
        )
        row = entry.model_dump(mode="json")

        def _append(rows: list[dict]) -> list[dict]:
            return rows + [row]

        if tx is not None:
            await tx.update(self._key, _append)
        else:
            await self._store.update(self._key, _append)

        logger.info("Audit %s %s on %s", entry.status.value, entry.action.value, resource)
        return entry

    async def list(
        self, user_id: str | None = None, action: AuditAction | None = None
    ) -> list[AuditLogEntry]:
        """Entries newest first.  Equal timestamps keep insertion order reversed."""
        try:
            entries = _entries.validate_python(await self._store.load(self._key))
        except ValidationError as exc:
            logger.warning("Audit collection failed validation, treating as empty: %s", exc)
            return []
        if user_id is not None:
            entries = [e for e in entries if e.user_id == user_id]
        if action is not None:
            entries = [e for e in entries if e.action == action]
        indexed = list(enumerate(entries))
        indexed.sort(key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
        return [e for _, e in indexed]
