"""Registration, login, profile and privacy preference endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.users import (
    AuthSession,
    LoginRequest,
    PrivacyPreferences,
    ProfileUpdate,
    RegistrationRequest,
    UserProfile,
)

router = APIRouter(prefix="/users", tags=["users"])


# ---------- Auth ----------

@router.post("/register", response_model=AuthSession, status_code=201)
async def register(body: RegistrationRequest, services: AppServices) -> Any:
    return await services.auth.register(body.email, body.first_name, body.last_name)


@router.post("/login", response_model=AuthSession)
async def login(body: LoginRequest, services: AppServices) -> Any:
    return await services.auth.login(body.email)


# ---------- Current User (me) ----------

@router.get("/me", response_model=UserProfile)
async def get_profile(user: CurrentUser, services: AppServices) -> Any:
    return await services.profiles.get(user.user_id)


@router.patch("/me", response_model=UserProfile)
async def update_profile(user: CurrentUser, body: ProfileUpdate, services: AppServices) -> Any:
    return await services.profiles.update(user.user_id, body)


# ---------- Privacy ----------

@router.get("/me/privacy", response_model=PrivacyPreferences)
async def get_privacy(user: CurrentUser, services: AppServices) -> Any:
    return await services.privacy.get(user.user_id)


@router.put("/me/privacy", response_model=PrivacyPreferences)
async def update_privacy(
    user: CurrentUser, body: PrivacyPreferences, services: AppServices
) -> Any:
    """Replace privacy preferences.  Every update is written to the audit trail."""
    return await services.privacy.update(user.user_id, body)
