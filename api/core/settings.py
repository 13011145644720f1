"""
Runtime configuration.

Settings are read from the environment once per process (see `api/main.py`)
and handed to routes through `Depends(get_settings)`. Missing values never
fail startup; the route that needs them answers with a 500 instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from fastapi import Request

DEFAULT_HCAPTCHA_VERIFY_URL = "https://hcaptcha.com/siteverify"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _env(*names: str, default: str = "") -> str:
    # First non-empty variable wins.
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_timeout_s: float = 10.0
    database_url: str = ""
    hcaptcha_secret: str = ""
    hcaptcha_verify_url: str = DEFAULT_HCAPTCHA_VERIFY_URL
    owner_email: str = ""
    site_name: str = "Blog"
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS


def load_settings() -> Settings:
    return Settings(
        supabase_url=_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        supabase_anon_key=_env("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
        supabase_service_role_key=_env("SUPABASE_SERVICE_ROLE_KEY"),
        supabase_timeout_s=_env_float("SUPABASE_TIMEOUT_S", 10.0),
        database_url=_env("DATABASE_URL"),
        hcaptcha_secret=_env("HCAPTCHA_SECRET_KEY"),
        hcaptcha_verify_url=_env("HCAPTCHA_VERIFY_URL", default=DEFAULT_HCAPTCHA_VERIFY_URL),
        owner_email=_env("OWNER_EMAIL").lower(),
        site_name=_env("SITE_NAME", default="Blog"),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
    )


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        # Lifespan has not run (e.g. a bare TestClient); fall back to env.
        settings = load_settings()
        request.app.state.settings = settings
    return settings
