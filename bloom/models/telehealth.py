"""Pydantic models for the provider directory and appointments."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from bloom.models.base import BloomBase, UserScoped


class AppointmentStatus(str, Enum):
    booked = "booked"
    completed = "completed"
    cancelled = "cancelled"


class Provider(BloomBase):
    id: str
    name: str
    specialty: str
    bio: str = ""
    rate: int = Field(ge=0)  # minor currency units per session
    currency: str = "USD"
    image_url: str | None = None
    available_slots: list[datetime] = Field(default_factory=list)


class BookingRequest(BloomBase):
    provider_id: str
    slot: datetime
    notes: str | None = None


class Appointment(UserScoped):
    provider_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.booked
    fee: int  # provider rate captured at booking time
    currency: str = "USD"
    user_notes: str | None = None
    video_room_id: str
    payment_reference: str | None = None


class JoinCredential(BloomBase):
    appointment_id: str
    room_id: str
    token: str
