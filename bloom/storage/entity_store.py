"""Entity Store — keyed collections of JSON records over a StorageBackend.

Contract:
    - ``load`` never raises.  A missing collection, an undecodable payload or
      a payload that is not a list of objects reads as ``[]`` (logged).  Data
      in a corrupt collection is therefore lost on the next write; this keeps
      the application usable and is an accepted tradeoff.
    - ``save`` replaces a whole collection.
    - Writes are serialized per collection key.  ``update`` performs a
      read-modify-write under the key's lock so concurrent appends never
      overwrite one another.
    - ``transaction`` locks several keys (in sorted order, to avoid lock
      ordering deadlocks), stages writes and commits them with a single
      backend ``write_many`` call on clean exit.  Nothing is written if the
      block raises.

Locks are ``asyncio.Lock`` objects and only serialize callers sharing one
event loop and one ``EntityStore`` instance.  Multi-process deployments must
rely on the backend (Postgres transactions) for isolation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable

from bloom.storage.backends import StorageBackend

logger = logging.getLogger("bloom.storage")

Records = list[dict[str, Any]]


def _decode(key: str, payload: str | None) -> Records:
    if payload is None:
        return []
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as exc:
        logger.warning("Collection %s is corrupt, treating as empty: %s", key, exc)
        return []
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        logger.warning("Collection %s is not a list of records, treating as empty", key)
        return []
    return data


def _encode(records: Records) -> str:
    return json.dumps(records, default=str)


class StoreTransaction:
    """Staged view over a fixed set of locked collections."""

    def __init__(self, store: "EntityStore", keys: tuple[str, ...]) -> None:
        self._store = store
        self._keys = set(keys)
        self._staged: dict[str, Records] = {}

    def _check(self, key: str) -> None:
        if key not in self._keys:
            raise KeyError(f"Collection {key!r} is not part of this transaction")

    async def load(self, key: str) -> Records:
        self._check(key)
        if key in self._staged:
            return [dict(r) for r in self._staged[key]]
        return await self._store._read(key)

    def save(self, key: str, records: Records) -> None:
        self._check(key)
        self._staged[key] = list(records)

    async def update(self, key: str, fn: Callable[[Records], Records]) -> Records:
        records = fn(await self.load(key))
        self.save(key, records)
        return records

    @property
    def staged(self) -> dict[str, Records]:
        return self._staged


class EntityStore:
    """Generic persistence for named record collections.

    Usage::

        store = EntityStore(MemoryBackend())
        await store.update("bloom_goals_v1", lambda rows: rows + [goal])

        async with store.transaction(subs_key, payments_key) as tx:
            subs = await tx.load(subs_key)
            ...
            tx.save(subs_key, subs)
    """

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    def _lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def _read(self, key: str) -> Records:
        try:
            payload = await self._backend.read(key)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Collection %s unreadable, treating as empty: %s", key, exc)
            return []
        return _decode(key, payload)

    async def load(self, key: str) -> Records:
        """Return every record in the collection (``[]`` if absent or corrupt)."""
        return await self._read(key)

    async def save(self, key: str, records: Records) -> None:
        """Atomically replace the whole collection."""
        async with self._lock(key):
            await self._backend.write_many({key: _encode(records)})

    async def update(self, key: str, fn: Callable[[Records], Records]) -> Records:
        """Read-modify-write one collection under its lock.  Returns the new records."""
        async with self._lock(key):
            records = fn(await self._read(key))
            await self._backend.write_many({key: _encode(records)})
            return records

    @asynccontextmanager
    async def transaction(self, *keys: str) -> AsyncGenerator[StoreTransaction, None]:
        """Lock ``keys`` and commit staged writes together on clean exit."""
        ordered = tuple(sorted(set(keys)))
        held: list[asyncio.Lock] = []
        try:
            for key in ordered:
                lock = self._lock(key)
                await lock.acquire()
                held.append(lock)
            tx = StoreTransaction(self, ordered)
            yield tx
            if tx.staged:
                await self._backend.write_many(
                    {k: _encode(v) for k, v in tx.staged.items()}
                )
        finally:
            for lock in reversed(held):
                lock.release()

    async def close(self) -> None:
        await self._backend.close()
