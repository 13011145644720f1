"""
Admin business logic: user listing, role changes, blocking, deletion.

All queries go through the service-role client (bypasses RLS), so every
operation first checks the operator's role.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from auth.service import OPERATOR_ROLES, Operator, require_role
from core.supabase import Filter, ServiceRoleClient, SupabaseError, any_of, condition

from . import repository

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200

ALL_ROLES = ("super_admin", "admin", "moderator", "premium", "user")
MODERATOR_ASSIGNABLE_ROLES = ("premium", "user")
ADMIN_ROLES = ("super_admin", "admin")

SEARCH_COLUMNS = ("username", "display_name", "email")

logger = logging.getLogger(__name__)


def parse_positive_int(raw: Any, default: int) -> int:
    text = str(raw).strip() if raw is not None else ""
    if not text:
        return max(1, default)
    try:
        value = int(text)
    except ValueError:
        return max(1, default)
    return max(1, value)


def escape_search(search: str) -> str:
    """
    Make free text safe inside an OR filter: `%` is matched literally and
    commas (the condition separator) become spaces.
    """
    return search.replace("%", "\\%").replace(",", " ")


def build_search_filter(search: str) -> Filter:
    pattern = f"%{escape_search(search)}%"
    return any_of(*(condition(column, "ilike", pattern) for column in SEARCH_COLUMNS))


def _placeholder_profile(auth_row: dict[str, Any]) -> dict[str, Any]:
    email = auth_row.get("email") or None
    return {
        "id": auth_row.get("id"),
        "username": (email or "").split("@")[0],
        "display_name": None,
        "email": email,
        "role": "user",
        "is_admin": False,
        "is_blocked": False,
        "created_at": auth_row.get("created_at"),
    }


async def _auth_user_fallback(
    client: ServiceRoleClient,
    search: str,
    *,
    offset: int,
    limit: int,
) -> list[dict[str, Any]]:
    """
    Profiles may lag behind sign-ups; surface matching auth users so the
    admin can still act on them. Errors here never fail the request.
    """
    try:
        auth_rows = await repository.find_auth_users_by_email(
            client,
            f"%{search}%",
            offset=offset,
            limit=limit,
        )
        results: list[dict[str, Any]] = []
        for auth_row in auth_rows:
            profile = await repository.get_profile(client, str(auth_row.get("id")))
            results.append(profile if profile is not None else _placeholder_profile(auth_row))
        return results
    except SupabaseError as exc:
        logger.warning("auth_user_fallback_failed error=%s", exc)
        return []


async def list_users(
    client: ServiceRoleClient,
    operator: Operator,
    *,
    page: Any = None,
    page_size: Any = None,
    search: str | None = None,
    role: str | None = None,
) -> dict[str, Any]:
    require_role(operator, OPERATOR_ROLES, detail="Not authorized to list users")

    page_num = parse_positive_int(page, DEFAULT_PAGE)
    size = min(MAX_PAGE_SIZE, parse_positive_int(page_size, DEFAULT_PAGE_SIZE))
    offset = (page_num - 1) * size
    search_text = (search or "").strip()
    role_filter = (role or "").strip()

    try:
        result = await repository.list_profiles(
            client,
            role=role_filter if role_filter and role_filter != "all" else None,
            search_filter=build_search_filter(search_text) if search_text else None,
            offset=offset,
            limit=size,
        )
    except SupabaseError as exc:
        logger.exception("list_users_failed page=%s page_size=%s", page_num, size)
        raise HTTPException(status_code=500, detail=exc.message or "Unexpected server error") from exc

    if result.rows:
        return {"ok": True, "data": result.rows, "count": int(result.count or len(result.rows))}

    if "@" in search_text:
        placeholders = await _auth_user_fallback(client, search_text, offset=offset, limit=size)
        if placeholders:
            return {"ok": True, "data": placeholders, "count": len(placeholders)}

    return {"ok": True, "data": [], "count": 0}


def _is_owner(email: Any, owner_email: str) -> bool:
    return bool(owner_email) and str(email or "").strip().lower() == owner_email


async def _target_email(client: ServiceRoleClient, profile_id: str) -> str | None:
    try:
        target = await repository.get_profile(client, profile_id, columns="id, email, role, is_admin")
        if target is not None:
            return target.get("email")
        auth_row = await repository.get_auth_user(client, profile_id)
    except SupabaseError as exc:
        logger.warning("set_role_target_lookup_failed profile_id=%s error=%s", profile_id, exc)
        return None
    return auth_row.get("email") if auth_row else None


async def set_role(
    client: ServiceRoleClient,
    operator: Operator,
    *,
    profile_id: str,
    role: str,
    owner_email: str = "",
) -> dict[str, Any]:
    require_role(operator, OPERATOR_ROLES, detail="Not authorized to set roles")

    if operator.id == profile_id and operator.role != "super_admin":
        raise HTTPException(status_code=400, detail="You cannot change your own role")

    if _is_owner(await _target_email(client, profile_id), owner_email):
        raise HTTPException(status_code=400, detail="Cannot change owner role")

    desired = (role or "").strip().lower()
    if desired not in ALL_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")

    if operator.role == "moderator" and desired not in MODERATOR_ASSIGNABLE_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Moderator cannot set that role")

    try:
        row = await repository.upsert_profile_role(
            client,
            profile_id=profile_id,
            role=desired,
            is_admin=desired in ADMIN_ROLES,
        )
    except SupabaseError as exc:
        logger.exception("set_role_failed profile_id=%s role=%s", profile_id, desired)
        raise HTTPException(status_code=500, detail=exc.message or "Failed to upsert profile") from exc

    logger.info("role_changed operator_id=%s profile_id=%s role=%s", operator.id, profile_id, desired)
    return {"ok": True, "data": row}


async def block_user(
    client: ServiceRoleClient,
    operator: Operator,
    *,
    user_id: str,
    block: bool,
    owner_email: str = "",
) -> dict[str, Any]:
    require_role(operator, ("super_admin",), detail="Not authorized to block/unblock users")

    if operator.id == user_id:
        raise HTTPException(status_code=400, detail="You cannot block your own account")

    try:
        target = await repository.get_profile(client, user_id, columns="id, email")
    except SupabaseError as exc:
        logger.warning("block_user_target_lookup_failed user_id=%s error=%s", user_id, exc)
        target = None
    if target is None:
        raise HTTPException(status_code=404, detail="Target user not found")

    if _is_owner(target.get("email"), owner_email):
        raise HTTPException(status_code=400, detail="Cannot block the owner account")

    try:
        await repository.set_profile_blocked(client, user_id, blocked=block)
    except SupabaseError as exc:
        logger.exception("block_user_failed user_id=%s block=%s", user_id, block)
        raise HTTPException(status_code=500, detail=exc.message or "Failed to update block status") from exc

    logger.info("block_status_changed operator_id=%s user_id=%s blocked=%s", operator.id, user_id, block)
    return {"ok": True, "blocked": block}


async def delete_user(
    client: ServiceRoleClient,
    operator: Operator,
    *,
    user_id: str,
    owner_email: str = "",
) -> dict[str, Any]:
    """
    Permanently remove a user: the auth account first, then the profile row.

    A profile row left behind after the auth account is gone is reported in
    `note` but does not fail the request.
    """
    require_role(operator, ("super_admin",), detail="Only super_admin can permanently delete users")

    try:
        target = await repository.get_profile(client, user_id, columns="id, email, role")
    except SupabaseError as exc:
        logger.warning("delete_user_target_lookup_failed user_id=%s error=%s", user_id, exc)
        target = None
    if target is None:
        raise HTTPException(status_code=404, detail="Target user not found")

    if _is_owner(target.get("email"), owner_email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete owner account")

    try:
        await repository.delete_auth_user(client, user_id)
    except SupabaseError as exc:
        logger.exception("delete_auth_user_failed user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to delete auth user") from exc

    try:
        await repository.delete_profile(client, user_id)
    except SupabaseError as exc:
        logger.warning("delete_profile_failed user_id=%s error=%s", user_id, exc)
        return {"ok": True, "note": "Auth user deleted, profile row could not be removed"}

    logger.info("user_deleted operator_id=%s user_id=%s", operator.id, user_id)
    return {"ok": True, "message": "User permanently removed from Auth and database"}
