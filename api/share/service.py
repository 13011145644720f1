"""
Share-link metadata.

Crawlers read the Open Graph tags from the rendered page; browsers are sent
on to the post inside the blog listing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

from core.supabase import AnonClient, SupabaseError, eq

DESCRIPTION_MAX_CHARS = 180
DEFAULT_TITLE = "Blog Post"
DEFAULT_IMAGE_PATH = "/avatar.jpg"

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareMeta:
    title: str
    description: str
    image: str
    url: str


def strip_html(html: Any) -> str:
    text = _TAG_RE.sub(" ", str(html or ""))
    return _SPACE_RE.sub(" ", text).strip()


def truncate(text: str, limit: int = DESCRIPTION_MAX_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def request_origin(headers: Mapping[str, str]) -> str:
    proto = (headers.get("x-forwarded-proto") or "https").split(",")[0].strip() or "https"
    host = (headers.get("x-forwarded-host") or headers.get("host") or "").split(",")[0].strip()
    return f"{proto}://{host}" if host else ""


def build_meta(post: Mapping[str, Any], *, origin: str, site_name: str) -> tuple[ShareMeta, str]:
    """
    Derive (meta, redirect target) for a post row.
    """
    post_id = quote(str(post.get("id")), safe="")
    title = str(post.get("title") or DEFAULT_TITLE)

    raw_description = str(post.get("excerpt") or strip_html(post.get("content"))).strip()
    if raw_description:
        description = truncate(raw_description)
    else:
        description = f'Read "{title}" on {site_name}.'

    thumbnail = str(post.get("thumbnail") or "")
    if not thumbnail:
        image = f"{origin}{DEFAULT_IMAGE_PATH}"
    elif thumbnail.startswith("http"):
        image = thumbnail
    else:
        image = f"{origin}{thumbnail}"

    url = f"{origin}/blog/share/{post_id}" if origin else ""
    target = f"{origin}/blog?post={post_id}"
    return ShareMeta(title=title, description=description, image=image, url=url), target


async def load_post(client: AnonClient, post_id: str) -> dict[str, Any] | None:
    try:
        return await client.select_one(
            "blog_posts",
            columns="id, title, excerpt, content, thumbnail",
            filters=[eq("id", post_id)],
        )
    except SupabaseError as exc:
        logger.warning("share_post_fetch_failed post_id=%s error=%s", post_id, exc)
        return None
