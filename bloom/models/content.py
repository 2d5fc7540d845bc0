"""Pydantic models for the article library and device/lab integrations."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from bloom.models.base import BloomBase, UserScoped, utc_now


# ---------- Content ----------

class ProgressStatus(str, Enum):
    not_started = "not_started"
    started = "started"
    completed = "completed"


class Article(BloomBase):
    id: str
    title: str
    description: str = ""
    content: str = ""
    author: str = ""
    category_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    thumbnail_url: str | None = None
    published_at: datetime | None = None
    read_time_minutes: int = Field(default=5, ge=0)


class UserContentProgress(UserScoped):
    content_id: str
    status: ProgressStatus = ProgressStatus.not_started
    progress_percentage: int = Field(default=0, ge=0, le=100)
    last_accessed: datetime = Field(default_factory=utc_now)


# ---------- Integrations ----------

class SourceType(str, Enum):
    apple_health = "apple_health"
    google_fit = "google_fit"
    oura = "oura"
    fitbit = "fitbit"
    twentythree_and_me = "23andme"


class ConnectionStatus(str, Enum):
    connected = "connected"
    disconnected = "disconnected"
    error = "error"


class GenomicProvider(str, Enum):
    twentythree_and_me = "23andme"
    ancestry = "ancestry"
    direct = "direct"


class UploadStatus(str, Enum):
    processing = "processing"
    completed = "completed"
    failed = "failed"


class IntegrationConnection(UserScoped):
    source_type: SourceType
    status: ConnectionStatus = ConnectionStatus.connected
    last_sync: datetime | None = None
    external_user_id: str | None = None


class GenomicUpload(UserScoped):
    file_name: str = Field(min_length=1)
    provider: GenomicProvider
    status: UploadStatus = UploadStatus.processing
    uploaded_at: datetime = Field(default_factory=utc_now)


# ---------- Request bodies ----------

class ProgressUpdate(BloomBase):
    status: ProgressStatus


class ConnectRequest(BloomBase):
    source_type: SourceType


class GenomicUploadRequest(BloomBase):
    provider: GenomicProvider
    file_name: str = Field(min_length=1)
