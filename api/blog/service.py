"""
Blog post and comment logic (raw SQL path).
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from . import repository, schemas

POST_CREATOR_ROLE = "super_admin"

# Server-side errors plus client-side argument encoding errors (asyncpg.DataError).
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError)

logger = logging.getLogger(__name__)


async def list_posts(*, category: str | None = None, author: str | None = None) -> list[dict[str, Any]]:
    try:
        return await repository.list_posts(category=category, author=author)
    except DB_ERRORS as exc:
        logger.exception("list_posts_failed category=%s author=%s", category, author)
        raise HTTPException(status_code=500, detail="Database error") from exc


async def create_post(payload: Any) -> dict[str, Any]:
    # The role is self-reported by the caller; it is checked before anything else.
    if not isinstance(payload, dict) or payload.get("role") != POST_CREATOR_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")

    try:
        post = schemas.PostCreate.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc

    try:
        row = await repository.insert_post(
            title=post.title,
            excerpt=post.excerpt,
            content=post.content,
            category=post.category,
            tags=post.tags,
            thumbnail=post.thumbnail,
            author_id=post.author_id,
        )
    except DB_ERRORS as exc:
        logger.exception("create_post_failed author_id=%s", post.author_id)
        raise HTTPException(status_code=500, detail="Database error") from exc

    if row is None:
        logger.error("create_post_no_row author_id=%s", post.author_id)
        raise HTTPException(status_code=500, detail="Database error")

    logger.info("post_created id=%s author_id=%s", row.get("id"), post.author_id)
    return row


async def list_comments(post_id: str) -> list[dict[str, Any]]:
    try:
        return await repository.list_comments(post_id)
    except DB_ERRORS as exc:
        logger.exception("list_comments_failed post_id=%s", post_id)
        raise HTTPException(status_code=500, detail="Database error") from exc


async def add_comment(comment: schemas.CommentCreate) -> dict[str, Any]:
    try:
        row = await repository.insert_comment(
            post_id=comment.post_id,
            author_name=comment.author_name,
            text=comment.text,
        )
    except DB_ERRORS as exc:
        logger.exception("add_comment_failed post_id=%s", comment.post_id)
        raise HTTPException(status_code=500, detail="Database error") from exc

    if row is None:
        logger.error("add_comment_no_row post_id=%s", comment.post_id)
        raise HTTPException(status_code=500, detail="Database error")
    return row
