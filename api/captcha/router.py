"""
Captcha API endpoint.
"""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.dependencies import get_http_transport
from core.settings import Settings, get_settings

from . import service

router = APIRouter()


class VerifyCaptchaRequest(BaseModel):
    token: Any = None


@router.post("/api/verify-captcha")
async def verify_captcha(
    request: VerifyCaptchaRequest,
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> dict:
    return await service.verify_token(
        request.token,
        secret=settings.hcaptcha_secret,
        verify_url=settings.hcaptcha_verify_url,
        transport=transport,
    )
