"""Shared Pydantic base models and utilities."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# Sensitive free text is stored exactly as written
FreeText = Annotated[str, StringConstraints(strip_whitespace=False)]


class BloomBase(BaseModel):
    """Base model with shared config for all Bloom schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class Record(BloomBase):
    """A persisted entity with a generated string identifier."""

    id: str = Field(default_factory=new_id)


class UserScoped(Record):
    user_id: str


class TimestampMixin(BaseModel):
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
