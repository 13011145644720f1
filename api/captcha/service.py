"""
hCaptcha token verification.

One outbound call per request: POST form-encoded `secret` + `response` to the
provider's siteverify endpoint. No retries.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import HTTPException

logger = logging.getLogger(__name__)


async def verify_token(
    token: Any,
    *,
    secret: str,
    verify_url: str,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    if not token or not isinstance(token, str):
        raise HTTPException(status_code=400, detail="Missing captcha token")

    if not (secret or "").strip():
        raise HTTPException(status_code=500, detail="Captcha is not configured")

    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            resp = await client.post(
                verify_url,
                data={"secret": secret, "response": token},
            )
    except httpx.HTTPError as exc:
        logger.error("captcha_verify_request_failed error=%s", exc)
        raise HTTPException(status_code=500, detail="Captcha verification failed") from exc

    try:
        payload = resp.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    if not payload.get("success"):
        codes = payload.get("error-codes") or None
        logger.info("captcha_rejected status=%s codes=%s", resp.status_code, codes)
        raise HTTPException(
            status_code=400,
            detail={"error": "Captcha verification failed", "codes": codes},
        )

    return {"ok": True}
