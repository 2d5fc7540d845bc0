"""Shared plumbing for per-family repositories.

A repository owns exactly one collection in the Entity Store.  Reads load the
whole collection and filter by user id; there is no secondary index, which
is fine for per-user data volumes but should become one for larger datasets.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from bloom.errors import InvalidInputError, NotFoundError
from bloom.storage import EntityStore, StoreTransaction

logger = logging.getLogger("bloom.repositories")

M = TypeVar("M", bound=BaseModel)
Rows = list[dict[str, Any]]


def dump(record: BaseModel) -> dict[str, Any]:
    return record.model_dump(mode="json")


def build(model: type[M], **data: Any) -> M:
    """Construct a record, turning schema violations into ``InvalidInputError``."""
    try:
        return model(**data)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first["loc"]) or model.__name__
        raise InvalidInputError(f"{loc}: {first['msg']}") from exc


class Repository(Generic[M]):
    """Typed access to one collection of ``model`` records."""

    model: type[M]
    resource: str = "Record"

    def __init__(self, store: EntityStore, key: str) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def _parse(self, rows: Rows) -> list[M]:
        """Validate each row; rows that fail are dropped, the rest survive."""
        records: list[M] = []
        dropped = 0
        for row in rows:
            try:
                records.append(self.model.model_validate(row))
            except ValidationError:
                dropped += 1
        if dropped:
            logger.warning(
                "Collection %s: dropped %d invalid record(s) of %d", self._key, dropped, len(rows)
            )
        return records

    async def _all(self, tx: StoreTransaction | None = None) -> list[M]:
        rows = await (tx.load(self._key) if tx else self._store.load(self._key))
        return self._parse(rows)

    async def _for_user(self, user_id: str) -> list[M]:
        return [r for r in await self._all() if r.user_id == user_id]

    async def _get_owned(self, user_id: str, record_id: str) -> M:
        for record in await self._for_user(user_id):
            if record.id == record_id:
                return record
        raise NotFoundError(self.resource, record_id)

    async def _mutate(
        self,
        fn: Callable[[list[M]], list[M]],
        tx: StoreTransaction | None = None,
    ) -> list[M]:
        """Apply ``fn`` to the parsed collection under the collection lock."""

        def _apply(rows: Rows) -> Rows:
            return [dump(r) for r in fn(self._parse(rows))]

        if tx is not None:
            rows = await tx.update(self._key, _apply)
        else:
            rows = await self._store.update(self._key, _apply)
        return self._parse(rows)

    async def _insert(self, record: M, tx: StoreTransaction | None = None) -> M:
        await self._mutate(lambda records: records + [record], tx)
        return record

    async def _replace(
        self,
        user_id: str,
        record_id: str,
        change: Callable[[M], M],
        tx: StoreTransaction | None = None,
    ) -> M:
        """Replace one owned record with ``change(record)``.  Raises NotFoundError."""
        updated: list[M] = []

        def _apply(records: list[M]) -> list[M]:
            out = []
            for r in records:
                if r.id == record_id and r.user_id == user_id:
                    r = change(r)
                    updated.append(r)
                out.append(r)
            return out

        if not await self._exists(user_id, record_id, tx):
            raise NotFoundError(self.resource, record_id)
        await self._mutate(_apply, tx)
        if not updated:
            raise NotFoundError(self.resource, record_id)
        return updated[0]

    async def _remove(self, user_id: str, record_id: str) -> None:
        if not await self._exists(user_id, record_id):
            raise NotFoundError(self.resource, record_id)
        await self._mutate(
            lambda records: [
                r for r in records if not (r.id == record_id and r.user_id == user_id)
            ]
        )

    async def _exists(
        self, user_id: str, record_id: str, tx: StoreTransaction | None = None
    ) -> bool:
        return any(
            r.id == record_id and r.user_id == user_id for r in await self._all(tx)
        )
