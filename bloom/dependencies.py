"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from bloom.services.container import Services


@dataclass(frozen=True)
class AuthContext:
    """Caller identity asserted by the upstream authentication gateway."""

    user_id: str


async def get_current_user(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> AuthContext:
    """Read the caller's user id from the ``X-User-Id`` header.

    The gateway in front of this service validates tokens; requests that
    reach us without the header are rejected.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return AuthContext(user_id=x_user_id.strip())


def get_services(request: Request) -> Services:
    services: Services | None = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return services


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppServices = Annotated[Services, Depends(get_services)]
