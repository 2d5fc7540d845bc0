"""Profiles and privacy preferences."""

from __future__ import annotations

import logging
from typing import Any

from bloom.errors import InvalidInputError, NotFoundError
from bloom.models.base import utc_now
from bloom.models.system import AuditAction
from bloom.models.users import (
    PrivacyPreferences,
    ProfileUpdate,
    RegistrationRequest,
    StoredPrivacyPreferences,
    UserProfile,
)
from bloom.repositories.base import Repository, build
from bloom.services.audit import AuditTrail
from bloom.storage import EntityStore

logger = logging.getLogger("bloom.repositories.profiles")


class ProfileRepository(Repository[UserProfile]):
    model = UserProfile
    resource = "Profile"

    async def register(self, email: str, first_name: str, last_name: str = "") -> UserProfile:
        """Create a profile.  Emails are unique, compared case-insensitively."""
        request = build(RegistrationRequest, email=email, first_name=first_name, last_name=last_name)
        profile = UserProfile(
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
        )

        def _apply(profiles: list[UserProfile]) -> list[UserProfile]:
            if any(p.email.lower() == profile.email.lower() for p in profiles):
                raise InvalidInputError("Email already registered")
            return profiles + [profile]

        await self._mutate(_apply)
        logger.info("Registered profile %s", profile.id)
        return profile

    async def get(self, user_id: str) -> UserProfile:
        for profile in await self._all():
            if profile.id == user_id:
                return profile
        raise NotFoundError(self.resource, user_id)

    async def get_by_email(self, email: str) -> UserProfile:
        wanted = email.strip().lower()
        for profile in await self._all():
            if profile.email.lower() == wanted:
                return profile
        raise NotFoundError(self.resource, email)

    async def update(self, user_id: str, changes: ProfileUpdate | dict[str, Any]) -> UserProfile:
        if isinstance(changes, dict):
            changes = build(ProfileUpdate, **changes)
        updates = changes.model_dump(exclude_unset=True)
        if not updates:
            raise InvalidInputError("No fields to update")

        updated: list[UserProfile] = []

        def _apply(profiles: list[UserProfile]) -> list[UserProfile]:
            out = []
            for p in profiles:
                if p.id == user_id:
                    p = p.model_copy(update={**updates, "updated_at": utc_now()})
                    updated.append(p)
                out.append(p)
            if not updated:
                raise NotFoundError(self.resource, user_id)
            return out

        await self._mutate(_apply)
        return updated[0]

    async def ensure_demo_profile(self, email: str) -> UserProfile:
        """Return the demo profile, creating it on first use."""
        try:
            return await self.get_by_email(email)
        except NotFoundError:
            pass
        try:
            profile = await self.register(email, "Demo", "User")
        except InvalidInputError:
            # another caller created it between the lookup and the insert
            return await self.get_by_email(email)
        return await self.update(profile.id, {"is_email_verified": True})


class PrivacyRepository(Repository[StoredPrivacyPreferences]):
    model = StoredPrivacyPreferences
    resource = "Privacy preferences"

    def __init__(self, store: EntityStore, key: str, audit: AuditTrail) -> None:
        super().__init__(store, key)
        self._audit = audit

    async def get(self, user_id: str) -> PrivacyPreferences:
        """Stored preferences, or the privacy-protective defaults."""
        for prefs in await self._for_user(user_id):
            return PrivacyPreferences.model_validate(prefs.model_dump(exclude={"user_id"}))
        return PrivacyPreferences()

    async def update(self, user_id: str, prefs: PrivacyPreferences) -> PrivacyPreferences:
        stored = StoredPrivacyPreferences(user_id=user_id, **prefs.model_dump())

        def _apply(rows: list[StoredPrivacyPreferences]) -> list[StoredPrivacyPreferences]:
            return [r for r in rows if r.user_id != user_id] + [stored]

        async with self._store.transaction(self._key, self._audit.key) as tx:
            await self._mutate(_apply, tx)
            await self._audit.append(
                AuditAction.UPDATE_PRIVACY,
                "Privacy Preferences",
                details="User updated data sharing settings.",
                user_id=user_id,
                tx=tx,
            )
        return prefs
