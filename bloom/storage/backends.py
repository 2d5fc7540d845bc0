"""Storage backends for the Entity Store.

A backend only moves opaque JSON payloads keyed by collection name.  Parsing,
locking and corruption handling live in ``EntityStore``.

Backends:
    MemoryBackend   — process-local dict, used by tests and the demo
    FileBackend     — one JSON file per collection, atomic replace
    PostgresBackend — ``entity_collections`` table over an asyncpg pool
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import asyncpg

logger = logging.getLogger("bloom.storage.backends")


class StorageBackend(ABC):
    """Keyed payload storage.

    ``write_many`` must apply every payload or none of them, so that a
    multi-collection commit from ``EntityStore.transaction`` is all-or-nothing
    as far as the backend can guarantee.
    """

    @abstractmethod
    async def read(self, key: str) -> str | None:
        """Return the raw payload stored under ``key`` or None."""

    @abstractmethod
    async def write_many(self, payloads: dict[str, str]) -> None:
        """Replace the payload of every key in ``payloads``."""

    async def close(self) -> None:
        """Release backend resources.  No-op by default."""


class MemoryBackend(StorageBackend):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self._data.get(key)

    async def write_many(self, payloads: dict[str, str]) -> None:
        self._data.update(payloads)

    def raw(self, key: str) -> str | None:
        """Peek at a stored payload (test helper)."""
        return self._data.get(key)


class FileBackend(StorageBackend):
    """One ``<key>.json`` file per collection under ``root``.

    Each file is written to a temporary sibling and moved into place with
    ``os.replace`` so readers never observe a half-written collection.
    Multi-key writes are applied key by key; a crash between two replaces
    can leave one collection committed and the next not.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._root / f"{key}.json"

    async def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    async def write_many(self, payloads: dict[str, str]) -> None:
        for key, payload in payloads.items():
            target = self._path(key)
            fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise


_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS entity_collections (
    collection_key TEXT PRIMARY KEY,
    payload        TEXT NOT NULL,
    updated_at     TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

_UPSERT = """
INSERT INTO entity_collections (collection_key, payload, updated_at)
VALUES ($1, $2, NOW())
ON CONFLICT (collection_key) DO UPDATE SET
    payload = EXCLUDED.payload,
    updated_at = NOW()
"""


class PostgresBackend(StorageBackend):
    """Collections stored as rows of ``entity_collections``.

    Usage::

        backend = await PostgresBackend.connect(settings.database_url)
        store = EntityStore(backend)

    Every ``write_many`` runs inside a single database transaction.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @classmethod
    async def connect(
        cls, dsn: str, min_size: int = 2, max_size: int = 10
    ) -> "PostgresBackend":
        pool = await asyncpg.create_pool(
            dsn, min_size=min_size, max_size=max_size, command_timeout=30
        )
        async with pool.acquire() as conn:
            await conn.execute(_CREATE_TABLE)
        logger.info("Postgres backend ready (min=%d, max=%d)", min_size, max_size)
        return cls(pool)

    async def read(self, key: str) -> str | None:
        async with self._pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT payload FROM entity_collections WHERE collection_key = $1", key
            )

    async def write_many(self, payloads: dict[str, str]) -> None:
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                for key, payload in payloads.items():
                    await conn.execute(_UPSERT, key, payload)

    async def close(self) -> None:
        await self._pool.close()
        logger.info("Postgres backend pool closed")
