"""
Auth dependencies for operator-only (admin) routes.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from core.dependencies import get_service_client
from core.supabase import ServiceRoleClient

from . import service


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing access token",
        )

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format.",
        )

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
        )
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_operator(
    access_token: str = Depends(get_bearer_token),
    client: ServiceRoleClient = Depends(get_service_client),
) -> service.Operator:
    return await service.resolve_operator(client, access_token)
