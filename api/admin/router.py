"""
Admin API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from auth.service import Operator
from core.dependencies import get_service_client
from core.settings import Settings, get_settings
from core.supabase import ServiceRoleClient

from . import schemas, service

router = APIRouter(prefix="/api/admin")


@router.get("/list-users")
async def list_users(
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    search: str | None = Query(default=None, max_length=500),
    role: str | None = Query(default=None, max_length=50),
    operator: Operator = Depends(auth_dependencies.get_current_operator),
    client: ServiceRoleClient = Depends(get_service_client),
) -> dict:
    return await service.list_users(
        client,
        operator,
        page=page,
        page_size=page_size,
        search=search,
        role=role,
    )


@router.post("/list-users")
async def list_users_post(
    request: schemas.ListUsersRequest | None = None,
    operator: Operator = Depends(auth_dependencies.get_current_operator),
    client: ServiceRoleClient = Depends(get_service_client),
) -> dict:
    request = request or schemas.ListUsersRequest()
    return await service.list_users(
        client,
        operator,
        page=request.page,
        page_size=request.page_size,
        search=request.search,
        role=request.role,
    )


@router.post("/set-role")
async def set_role(
    request: schemas.SetRoleRequest,
    operator: Operator = Depends(auth_dependencies.get_current_operator),
    client: ServiceRoleClient = Depends(get_service_client),
    settings: Settings = Depends(get_settings),
) -> dict:
    return await service.set_role(
        client,
        operator,
        profile_id=request.profile_id,
        role=request.role,
        owner_email=settings.owner_email,
    )


@router.post("/block-user")
async def block_user(
    request: schemas.BlockUserRequest,
    operator: Operator = Depends(auth_dependencies.get_current_operator),
    client: ServiceRoleClient = Depends(get_service_client),
    settings: Settings = Depends(get_settings),
) -> dict:
    return await service.block_user(
        client,
        operator,
        user_id=request.user_id,
        block=request.block,
        owner_email=settings.owner_email,
    )


@router.post("/delete-user")
async def delete_user(
    request: schemas.DeleteUserRequest,
    operator: Operator = Depends(auth_dependencies.get_current_operator),
    client: ServiceRoleClient = Depends(get_service_client),
    settings: Settings = Depends(get_settings),
) -> dict:
    return await service.delete_user(
        client,
        operator,
        user_id=request.user_id,
        owner_email=settings.owner_email,
    )
