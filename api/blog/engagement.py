"""
Likes and read tracking.

Counters (`blog_posts.likes`, `blog_posts.reads`) are owned by the database:
inserting into `blog_likes` / `blog_reads` fires a trigger, and anonymous
reads use the `increment_post_reads_direct` RPC. This module only decides
which call to make and reads the counters back.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from core.supabase import ServiceRoleClient, SupabaseError, eq

INCREMENT_READS_RPC = "increment_post_reads_direct"

logger = logging.getLogger(__name__)


async def _current_likes(client: ServiceRoleClient, post_id: Any) -> Any:
    try:
        row = await client.select_one("blog_posts", columns="likes", filters=[eq("id", post_id)])
    except SupabaseError as exc:
        logger.warning("like_count_read_failed post_id=%s error=%s", post_id, exc)
        return None
    if row is None:
        return None
    return row.get("likes")


async def like_post(client: ServiceRoleClient, *, post_id: Any, user_id: Any) -> dict[str, Any]:
    """
    Record a like once per (post, user). A repeated like is a no-op that
    reports `liked: false`.
    """
    if not post_id or not user_id:
        raise HTTPException(status_code=400, detail="Missing post_id or user_id")

    try:
        existing = await client.select_one(
            "blog_likes",
            columns="post_id",
            filters=[eq("post_id", post_id), eq("user_id", user_id)],
        )
    except SupabaseError as exc:
        logger.error("like_check_failed post_id=%s error=%s", post_id, exc)
        raise HTTPException(status_code=500, detail="Like check failed") from exc

    if existing is not None:
        return {"liked": False, "likes": await _current_likes(client, post_id)}

    try:
        await client.insert("blog_likes", {"post_id": post_id, "user_id": user_id})
    except SupabaseError as exc:
        # Lost a race with a concurrent like, or the unique constraint fired.
        logger.warning("like_insert_rejected post_id=%s code=%s error=%s", post_id, exc.code, exc)
        return {"liked": False, "likes": await _current_likes(client, post_id)}

    return {"liked": True, "likes": await _current_likes(client, post_id)}


def _reads_from_rpc(data: Any) -> Any:
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        return data.get("reads")
    if isinstance(data, (int, float)) and not isinstance(data, bool):
        return data
    return None


async def _increment_reads(client: ServiceRoleClient, post_id: Any) -> dict[str, Any]:
    try:
        data = await client.rpc(INCREMENT_READS_RPC, {"p_id": post_id})
    except SupabaseError as exc:
        logger.error("read_increment_failed post_id=%s error=%s", post_id, exc)
        raise HTTPException(status_code=500, detail="unable_to_record_read") from exc
    return {"ok": True, "inserted": 1, "reads": _reads_from_rpc(data)}


async def record_read(client: ServiceRoleClient, *, post_id: Any, user_id: Any = None) -> dict[str, Any]:
    """
    Count a read.

    Signed-in readers are deduplicated through `blog_reads` (unique on
    post_id, user_id). A duplicate means "already counted". Any other insert
    failure falls back to the increment RPC, which is also the only path for
    anonymous readers.
    """
    if not post_id:
        raise HTTPException(status_code=400, detail="Missing post_id")

    if user_id:
        try:
            await client.insert("blog_reads", [{"post_id": post_id, "user_id": user_id}])
            return {"ok": True, "inserted": 1, "message": "recorded"}
        except SupabaseError as exc:
            if exc.is_unique_violation:
                return {"ok": True, "inserted": 0, "message": "already_recorded"}
            logger.warning("read_insert_failed post_id=%s code=%s error=%s, using rpc", post_id, exc.code, exc)

    return await _increment_reads(client, post_id)
