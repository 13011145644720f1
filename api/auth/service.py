"""
Operator resolution: access token -> auth user -> profile role.

The token is checked against Supabase auth with the service-role client, then
the operator's role is read from `profiles` (also service-role, so RLS cannot
hide the row).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from fastapi import HTTPException, status

from core.supabase import ServiceRoleClient, SupabaseError, eq

OPERATOR_ROLES = ("super_admin", "admin", "moderator")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operator:
    id: str
    email: str
    role: str


async def resolve_operator(client: ServiceRoleClient, access_token: str) -> Operator:
    try:
        user = await client.get_user(access_token)
    except SupabaseError as exc:
        logger.warning("auth_get_user_failed error=%s", exc)
        user = None

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
        )

    user_id = str(user["id"])
    try:
        profile = await client.select_one(
            "profiles",
            columns="id, role, is_admin, email",
            filters=[eq("id", user_id)],
        )
    except SupabaseError as exc:
        logger.warning("operator_profile_lookup_failed user_id=%s error=%s", user_id, exc)
        profile = None

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operator profile not found",
        )

    return Operator(
        id=user_id,
        email=str(profile.get("email") or user.get("email") or "").lower(),
        role=str(profile.get("role") or "").strip().lower(),
    )


def require_role(operator: Operator, allowed: Iterable[str], *, detail: str) -> None:
    if operator.role not in set(allowed):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
