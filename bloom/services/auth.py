"""Registration and login.

Credential checks and token validation belong to the upstream identity
provider.  This service only binds an email to a profile and hands back an
``AuthSession`` whose tokens come from a pluggable ``TokenIssuer``.
"""

from __future__ import annotations

import logging
import secrets
from typing import Protocol

from bloom.models.users import AuthSession, UserProfile
from bloom.repositories.profiles import ProfileRepository

logger = logging.getLogger("bloom.services.auth")


class TokenIssuer(Protocol):
    def issue(self, user: UserProfile) -> tuple[str, str]:
        """Return ``(access_token, refresh_token)`` for ``user``."""
        ...


class OpaqueTokenIssuer:
    """Random, unsigned tokens.  Suitable only behind a trusted gateway."""

    def __init__(self, nbytes: int = 32) -> None:
        self._nbytes = nbytes

    def issue(self, user: UserProfile) -> tuple[str, str]:
        return secrets.token_urlsafe(self._nbytes), secrets.token_urlsafe(self._nbytes)


class AuthService:
    def __init__(self, profiles: ProfileRepository, issuer: TokenIssuer) -> None:
        self._profiles = profiles
        self._issuer = issuer

    def _session(self, user: UserProfile) -> AuthSession:
        access, refresh = self._issuer.issue(user)
        return AuthSession(user=user, access_token=access, refresh_token=refresh)

    async def register(self, email: str, first_name: str, last_name: str = "") -> AuthSession:
        """Create a profile and open a session.

        Raises:
            InvalidInputError: Malformed input or the email is already registered.
        """
        user = await self._profiles.register(email, first_name, last_name)
        logger.info("Registered user %s", user.id)
        return self._session(user)

    async def login(self, email: str) -> AuthSession:
        """Open a session for an existing profile.  Unknown email → NotFoundError."""
        user = await self._profiles.get_by_email(email)
        return self._session(user)
