"""
Blog API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Ids are uuids or integers depending on the table; keep them as given.
PostId = str | int


class LikeRequest(BaseModel):
    post_id: PostId | None = None
    user_id: str | None = None


class ReadRequest(BaseModel):
    post_id: PostId | None = None
    user_id: str | None = None


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    excerpt: str | None = None
    content: str | None = None
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = None
    thumbnail: str | None = None
    author_id: PostId | None = None
    role: str | None = None


class CommentCreate(BaseModel):
    post_id: PostId
    author_name: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1, max_length=5000)
