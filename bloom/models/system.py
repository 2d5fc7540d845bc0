"""Pydantic models for system records: the audit trail."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from bloom.models.base import BloomBase, new_id, utc_now


class AuditAction(str, Enum):
    UPDATE_PRIVACY = "UPDATE_PRIVACY"
    BOOK_APPOINTMENT = "BOOK_APPOINTMENT"
    CANCEL_APPOINTMENT = "CANCEL_APPOINTMENT"
    CONNECT_INTEGRATION = "CONNECT_INTEGRATION"
    DISCONNECT_INTEGRATION = "DISCONNECT_INTEGRATION"
    UPLOAD_GENOMICS = "UPLOAD_GENOMICS"
    CHANGE_SUBSCRIPTION = "CHANGE_SUBSCRIPTION"


class AuditStatus(str, Enum):
    ALLOWED = "ALLOWED"
    DENIED = "DENIED"


class AuditLogEntry(BloomBase):
    model_config = BloomBase.model_config | {"frozen": True, "validate_assignment": False}

    audit_id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(default_factory=utc_now)
    actor: str = "User"
    action: AuditAction
    resource: str
    status: AuditStatus = AuditStatus.ALLOWED
    details: str | None = None
    user_id: str | None = None
