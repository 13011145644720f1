"""
Shared FastAPI dependencies: settings, outbound transport and the two
Supabase capabilities.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import Depends, HTTPException

from .settings import Settings, get_settings
from .supabase import AnonClient, ServiceRoleClient, SupabaseError

logger = logging.getLogger(__name__)


def get_http_transport() -> httpx.AsyncBaseTransport | None:
    """
    Transport for outbound HTTP calls. None means httpx's default network
    transport; tests override this with `httpx.MockTransport`.
    """
    return None


def get_optional_anon_client(
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> AnonClient | None:
    """
    Anonymous client, or None when Supabase is not configured. Public pages
    degrade to "not found" instead of a server error.
    """
    try:
        return AnonClient(
            url=settings.supabase_url,
            key=settings.supabase_anon_key,
            timeout_s=settings.supabase_timeout_s,
            transport=transport,
        )
    except SupabaseError as exc:
        logger.warning("supabase_anon_client_unavailable error=%s", exc)
        return None


def get_service_client(
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> ServiceRoleClient:
    try:
        return ServiceRoleClient(
            url=settings.supabase_url,
            key=settings.supabase_service_role_key,
            timeout_s=settings.supabase_timeout_s,
            transport=transport,
        )
    except SupabaseError as exc:
        logger.error("supabase_service_client_unavailable error=%s", exc)
        raise HTTPException(status_code=500, detail="Server misconfiguration") from exc
