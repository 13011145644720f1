"""
Admin persistence (Supabase, service-role only).
"""

from __future__ import annotations

from typing import Any

from core.supabase import Filter, SelectResult, ServiceRoleClient, eq, ilike

PROFILE_LIST_COLUMNS = "id, username, display_name, email, role, is_admin, is_blocked, created_at"


async def list_profiles(
    client: ServiceRoleClient,
    *,
    role: str | None,
    search_filter: Filter | None,
    offset: int,
    limit: int,
) -> SelectResult:
    filters: list[Filter] = []
    if role:
        filters.append(eq("role", role))
    if search_filter is not None:
        filters.append(search_filter)
    return await client.select(
        "profiles",
        columns=PROFILE_LIST_COLUMNS,
        filters=filters,
        order="created_at.desc",
        limit=limit,
        offset=offset,
        count=True,
    )


async def find_auth_users_by_email(
    client: ServiceRoleClient,
    pattern: str,
    *,
    offset: int,
    limit: int,
) -> list[dict[str, Any]]:
    result = await client.select(
        "users",
        schema="auth",
        columns="id, email, created_at",
        filters=[ilike("email", pattern)],
        limit=limit,
        offset=offset,
    )
    return result.rows


async def get_profile(
    client: ServiceRoleClient,
    profile_id: str,
    *,
    columns: str = PROFILE_LIST_COLUMNS,
) -> dict[str, Any] | None:
    return await client.select_one("profiles", columns=columns, filters=[eq("id", profile_id)])


async def get_auth_user(client: ServiceRoleClient, user_id: str) -> dict[str, Any] | None:
    result = await client.select(
        "users",
        schema="auth",
        columns="id, email",
        filters=[eq("id", user_id)],
        limit=1,
    )
    return result.rows[0] if result.rows else None


async def upsert_profile_role(
    client: ServiceRoleClient,
    *,
    profile_id: str,
    role: str,
    is_admin: bool,
) -> dict[str, Any] | None:
    rows = await client.upsert(
        "profiles",
        {"id": profile_id, "role": role, "is_admin": is_admin},
        on_conflict="id",
    )
    return rows[0] if rows else None


async def set_profile_blocked(client: ServiceRoleClient, user_id: str, *, blocked: bool) -> None:
    await client.update("profiles", {"is_blocked": blocked}, filters=[eq("id", user_id)])


async def delete_auth_user(client: ServiceRoleClient, user_id: str) -> None:
    await client.delete_auth_user(user_id)


async def delete_profile(client: ServiceRoleClient, user_id: str) -> None:
    await client.delete("profiles", filters=[eq("id", user_id)])
