"""
Blog API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from core.dependencies import get_service_client
from core.supabase import ServiceRoleClient

from . import engagement, schemas, service

router = APIRouter(prefix="/api/blog")


@router.post("/like")
async def like(
    request: schemas.LikeRequest,
    client: ServiceRoleClient = Depends(get_service_client),
) -> dict:
    return await engagement.like_post(client, post_id=request.post_id, user_id=request.user_id)


@router.post("/read")
async def read(
    request: schemas.ReadRequest,
    client: ServiceRoleClient = Depends(get_service_client),
) -> dict:
    return await engagement.record_read(client, post_id=request.post_id, user_id=request.user_id)


@router.get("/posts")
async def list_posts(
    category: str | None = Query(default=None, max_length=100),
    author: str | None = Query(default=None, max_length=100),
) -> list[dict]:
    return await service.list_posts(category=category, author=author)


@router.post("/posts")
async def create_post(payload: Any = Body(default=None)) -> dict:
    """
    Create a post. Only callers reporting role "super_admin" are accepted.
    """
    return await service.create_post(payload)


@router.get("/comments")
async def list_comments(post_id: str = Query(..., min_length=1)) -> list[dict]:
    return await service.list_comments(post_id)


@router.post("/comments")
async def add_comment(request: schemas.CommentCreate) -> dict:
    return await service.add_comment(request)
