"""
Social-share redirect page.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from core.dependencies import get_optional_anon_client
from core.settings import Settings, get_settings
from core.supabase import AnonClient

from . import service

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@router.get("/blog/share/{post_id}", response_class=HTMLResponse)
async def share_post(
    post_id: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    client: AnonClient | None = Depends(get_optional_anon_client),
) -> HTMLResponse:
    post = await service.load_post(client, post_id) if client is not None else None
    if post is None:
        return templates.TemplateResponse(request, "not_found.html", {}, status_code=404)

    meta, target = service.build_meta(
        post,
        origin=service.request_origin(request.headers),
        site_name=settings.site_name,
    )
    return templates.TemplateResponse(
        request,
        "share.html",
        {"meta": meta, "target": target, "site_name": settings.site_name},
    )
