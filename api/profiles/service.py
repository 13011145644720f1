"""
Bulk profile lookup.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from core.supabase import ServiceRoleClient, SupabaseError, in_

MAX_BULK_IDS = 2000
PUBLIC_PROFILE_COLUMNS = "id, display_name, username, full_name, institution, country"

logger = logging.getLogger(__name__)


def unique_ids(ids: list[Any], *, limit: int = MAX_BULK_IDS) -> list[Any]:
    """
    Drop duplicates (first occurrence wins) and cap the batch. Excess ids are
    silently ignored. Values of different JSON types never collapse, so `1`
    and `"1"` both stay.
    """
    seen: set[tuple[str, str]] = set()
    unique: list[Any] = []
    for raw in ids:
        if raw is None:
            continue
        key = (type(raw).__name__, str(raw))
        if key in seen:
            continue
        seen.add(key)
        unique.append(raw)
        if len(unique) >= limit:
            break
    return unique


async def profiles_bulk(client: ServiceRoleClient, ids: Any) -> dict[str, Any]:
    if not isinstance(ids, list):
        raise HTTPException(status_code=400, detail="ids must be an array")

    wanted = unique_ids(ids)
    if not wanted:
        return {"profiles": []}

    try:
        result = await client.select(
            "profiles",
            columns=PUBLIC_PROFILE_COLUMNS,
            filters=[in_("id", wanted)],
        )
    except SupabaseError as exc:
        logger.error("profiles_bulk_failed count=%s error=%s", len(wanted), exc)
        raise HTTPException(status_code=500, detail=exc.message or str(exc)) from exc

    return {"profiles": result.rows}
