"""
JSON error envelope: every error leaves the API as {"ok": false, "error": ...}.

Routes raise `HTTPException`. A dict `detail` is merged into the envelope, so
extra fields (e.g. captcha error codes) can travel with the message.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import db

logger = logging.getLogger(__name__)


def error_body(detail: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"ok": False}
    if isinstance(detail, dict):
        body.update(detail)
        body.setdefault("error", "Request failed")
    else:
        body["error"] = str(detail)
    return body


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = str(first.get("msg") or "invalid value")
    return f"{location}: {message}" if location else message


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_body(_first_validation_message(exc)))

    @app.exception_handler(db.DatabaseNotConfigured)
    async def database_not_configured_handler(request: Request, exc: db.DatabaseNotConfigured) -> JSONResponse:
        logger.error("database_not_configured path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=500, content=error_body("Server misconfiguration"))
