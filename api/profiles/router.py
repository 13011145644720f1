"""
Profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.dependencies import get_service_client
from core.supabase import ServiceRoleClient

from . import schemas, service

router = APIRouter()


@router.post("/api/profiles-bulk")
async def profiles_bulk(
    request: schemas.BulkProfilesRequest,
    client: ServiceRoleClient = Depends(get_service_client),
) -> dict:
    return await service.profiles_bulk(client, request.ids)
