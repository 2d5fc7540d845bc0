"""Journal endpoints.  Content is encrypted at rest and returned decrypted."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.tracking import JournalEntry, JournalEntryCreate

router = APIRouter(prefix="/journal", tags=["journal"])


@router.get("", response_model=list[JournalEntry])
async def list_entries(user: CurrentUser, services: AppServices) -> Any:
    return await services.journal.list(user.user_id)


@router.post("", response_model=JournalEntry, status_code=201)
async def create_entry(user: CurrentUser, body: JournalEntryCreate, services: AppServices) -> Any:
    return await services.journal.create(user.user_id, body)


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(entry_id: str, user: CurrentUser, services: AppServices) -> None:
    await services.journal.delete(user.user_id, entry_id)
