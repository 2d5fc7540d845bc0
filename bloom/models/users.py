"""Pydantic models for identity: profiles, privacy preferences, auth sessions."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import EmailStr, Field

from bloom.models.base import BloomBase, Record, TimestampMixin


# ---------- Enums ----------

class SharingChoice(str, Enum):
    opt_in = "opt_in"
    opt_out = "opt_out"


class Toggle(str, Enum):
    enabled = "enabled"
    disabled = "disabled"


# ---------- Profiles ----------

class UserProfile(Record, TimestampMixin):
    email: EmailStr
    first_name: str = Field(min_length=1)
    last_name: str = ""
    date_of_birth: date | None = None
    gender: str | None = None
    location: str | None = None
    is_email_verified: bool = False
    is_onboarding_complete: bool = False


class ProfileUpdate(BloomBase):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    location: str | None = None
    is_email_verified: bool | None = None
    is_onboarding_complete: bool | None = None


class RegistrationRequest(BloomBase):
    email: EmailStr
    first_name: str = Field(min_length=1)
    last_name: str = ""


# ---------- Privacy ----------

class PrivacyPreferences(BloomBase):
    data_sharing: SharingChoice = SharingChoice.opt_out
    marketing_emails: SharingChoice = SharingChoice.opt_out
    location_tracking: Toggle = Toggle.disabled
    anonymized_analytics: Toggle = Toggle.enabled


class StoredPrivacyPreferences(PrivacyPreferences):
    user_id: str


# ---------- Auth ----------

class AuthSession(BloomBase):
    user: UserProfile
    access_token: str
    refresh_token: str


class LoginRequest(BloomBase):
    email: EmailStr
