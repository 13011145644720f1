"""
Blog persistence (raw SQL).

Posts and comments live behind the asyncpg pool. Likes and reads go through
Supabase instead (see `engagement.py`) because their counters are maintained
by database triggers/RPCs exposed there.
"""

from __future__ import annotations

from typing import Any

from core import db

ALL_CATEGORIES = "All"


def build_post_filters(*, category: str | None = None, author: str | None = None) -> tuple[str, list[Any]]:
    """
    Build a WHERE clause with positional placeholders for the optional
    equality filters. Returns ("", []) when nothing is filtered.
    """
    values: list[Any] = []
    clauses: list[str] = []

    if category and category != ALL_CATEGORIES:
        values.append(category)
        clauses.append(f"p.category = ${len(values)}")
    if author:
        values.append(str(author))
        clauses.append(f"p.author_id::text = ${len(values)}")

    if not clauses:
        return "", values
    return "WHERE " + " AND ".join(clauses), values


async def list_posts(*, category: str | None = None, author: str | None = None) -> list[dict[str, Any]]:
    where, values = build_post_filters(category=category, author=author)
    return await db.fetch_all(
        f"""
        SELECT p.*, u.name AS author
        FROM blog_posts p
        JOIN users u ON u.id = p.author_id
        {where}
        ORDER BY p.created_at DESC
        """,
        *values,
    )


async def insert_post(
    *,
    title: str,
    excerpt: str | None,
    content: str | None,
    category: str | None,
    tags: list[str] | None,
    thumbnail: str | None,
    author_id: Any,
) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        INSERT INTO blog_posts (title, excerpt, content, category, tags, thumbnail, author_id)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING *
        """,
        title,
        excerpt,
        content,
        category,
        tags,
        thumbnail,
        author_id,
    )


async def list_comments(post_id: Any) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT *
        FROM blog_comments
        WHERE post_id::text = $1
        ORDER BY created_at DESC
        """,
        str(post_id),
    )


async def insert_comment(*, post_id: Any, author_name: str, text: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        INSERT INTO blog_comments (post_id, author_name, text)
        VALUES ($1, $2, $3)
        RETURNING *
        """,
        post_id,
        author_name,
        text,
    )
