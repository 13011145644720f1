from __future__ import annotations

import json
import re
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from core.dependencies import get_http_transport
from core.settings import Settings, get_settings
from main import app

SUPABASE_URL = "https://project.supabase.test"
CAPTCHA_URL = "https://captcha.test/siteverify"

_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"')


def _unquote(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _value(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return _unquote(raw[1:-1])
    return raw


def _split_conditions(expr: str) -> list[str]:
    # Commas inside double-quoted values do not separate conditions.
    parts: list[str] = []
    current: list[str] = []
    quoted = escaped = False
    for ch in expr:
        if escaped:
            escaped = False
        elif ch == "\\" and quoted:
            escaped = True
        elif ch == '"':
            quoted = not quoted
        elif ch == "," and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _like_regex(pattern: str) -> re.Pattern[str]:
    # ILIKE semantics: % and _ are wildcards, a backslash escapes them.
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out), re.IGNORECASE | re.DOTALL)


class FakeSupabase:
    """
    In-memory stand-in for the PostgREST/auth endpoints the API talks to.

    Supports eq/in/ilike/or filters, limit/offset, exact counts, inserts with unique
    keys, upserts, updates, deletes, RPCs, auth-user deletion and insert
    triggers. Every request is recorded in `requests` for assertions.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.unique: dict[str, tuple[str, ...]] = {}
        self.triggers: dict[str, Callable[[dict[str, Any]], None]] = {}
        self.rpcs: dict[str, Callable[[dict[str, Any]], Any]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.deleted_auth_users: list[str] = []
        self.failures: dict[tuple[str, str], list[Any]] = {}
        self.captcha_response: httpx.Response | None = None
        self.requests: list[httpx.Request] = []

    # -- helpers for tests --

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def fail(self, method: str, table: str, status: int = 500, *, skip: int = 0, **error: Any) -> None:
        """
        Make `method` on `table` fail with a PostgREST error body, after
        letting `skip` matching requests through. Use method "RPC" for RPCs.
        """
        self.failures[(method, table)] = [status, error or {"message": "boom"}, skip]

    def _failure(self, method: str, table: str) -> httpx.Response | None:
        failure = self.failures.get((method, table))
        if failure is None:
            return None
        status, body, skip = failure
        if skip > 0:
            failure[2] = skip - 1
            return None
        return httpx.Response(status, json=body)

    # -- transport --

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = request.url

        if url.host == "captcha.test":
            return self.captcha_response or httpx.Response(200, json={"success": True})

        path = url.path
        if path.startswith("/auth/v1/admin/users/"):
            return self._delete_auth_user(path.rsplit("/", 1)[1])
        if path == "/auth/v1/user":
            return self._auth_user(request)
        if path.startswith("/rest/v1/rpc/"):
            return self._rpc(request, path.rsplit("/", 1)[1])
        if path.startswith("/rest/v1/"):
            table = path[len("/rest/v1/"):]
            schema = request.headers.get("accept-profile")
            if schema:
                table = f"{schema}.{table}"
            failure = self._failure(request.method, table)
            if failure is not None:
                return failure
            if request.method == "GET":
                return self._select(request, table)
            if request.method == "POST":
                return self._insert(request, table)
            if request.method == "PATCH":
                return self._update(request, table)
            if request.method == "DELETE":
                return self._delete(request, table)
        return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})

    def _auth_user(self, request: httpx.Request) -> httpx.Response:
        token = request.headers.get("authorization", "").removeprefix("Bearer ").strip()
        user = self.users.get(token)
        if user is None:
            return httpx.Response(401, json={"msg": "invalid JWT"})
        return httpx.Response(200, json=user)

    def _delete_auth_user(self, user_id: str) -> httpx.Response:
        failure = self._failure("DELETE", "auth.admin.users")
        if failure is not None:
            return failure
        self.deleted_auth_users.append(user_id)
        return httpx.Response(200, json={})

    def _rpc(self, request: httpx.Request, name: str) -> httpx.Response:
        failure = self._failure("RPC", name)
        if failure is not None:
            return failure
        handler = self.rpcs.get(name)
        if handler is None:
            return httpx.Response(404, json={"message": f"function {name} not found"})
        args = json.loads(request.content or b"{}")
        return httpx.Response(200, json=handler(args))

    @staticmethod
    def _condition(row: dict[str, Any], column: str, expr: str) -> bool:
        op, _, value = expr.partition(".")
        actual = row.get(column)
        if op == "eq":
            return str(actual) == _value(value)
        if op == "in":
            return str(actual) in {_unquote(v) for v in _QUOTED.findall(value)}
        if op == "ilike":
            return actual is not None and _like_regex(_value(value)).fullmatch(str(actual)) is not None
        return True

    @classmethod
    def _matches(cls, row: dict[str, Any], params: list[tuple[str, str]]) -> bool:
        for column, expr in params:
            if column in ("select", "order", "limit", "offset", "on_conflict"):
                continue
            if column == "or":
                conditions = _split_conditions(expr[1:-1] if expr.startswith("(") else expr)
                if not any(cls._condition(row, *c.split(".", 1)) for c in conditions):
                    return False
                continue
            if not cls._condition(row, column, expr):
                return False
        return True

    def _select(self, request: httpx.Request, table: str) -> httpx.Response:
        params = list(request.url.params.multi_items())
        rows = [r for r in self.tables.get(table, []) if self._matches(r, params)]
        total = len(rows)
        query = dict(params)
        offset = int(query.get("offset", 0))
        if "limit" in query:
            rows = rows[offset: offset + int(query["limit"])]
        else:
            rows = rows[offset:]
        headers = {}
        if "count=exact" in request.headers.get("prefer", ""):
            end = offset + len(rows) - 1
            headers["content-range"] = f"{offset}-{end}/{total}" if rows else f"*/{total}"
        return httpx.Response(200, json=rows, headers=headers)

    def _insert(self, request: httpx.Request, table: str) -> httpx.Response:
        payload = json.loads(request.content)
        rows = payload if isinstance(payload, list) else [payload]
        stored = self.tables.setdefault(table, [])
        upsert_key = request.url.params.get("on_conflict")
        written: list[dict[str, Any]] = []
        for row in rows:
            if upsert_key:
                existing = next((r for r in stored if r.get(upsert_key) == row.get(upsert_key)), None)
                if existing is not None:
                    existing.update(row)
                    written.append(existing)
                    continue
            key = self.unique.get(table)
            if key and any(all(r.get(c) == row.get(c) for c in key) for r in stored):
                return httpx.Response(
                    409,
                    json={
                        "code": "23505",
                        "message": f'duplicate key value violates unique constraint "{table}_pkey"',
                        "details": "Key already exists.",
                        "hint": None,
                    },
                )
            stored.append(dict(row))
            written.append(stored[-1])
            trigger = self.triggers.get(table)
            if trigger is not None:
                trigger(row)
        if "return=representation" in request.headers.get("prefer", ""):
            return httpx.Response(201, json=written)
        return httpx.Response(201)

    def _update(self, request: httpx.Request, table: str) -> httpx.Response:
        values = json.loads(request.content)
        params = list(request.url.params.multi_items())
        for row in self.tables.get(table, []):
            if self._matches(row, params):
                row.update(values)
        return httpx.Response(204)

    def _delete(self, request: httpx.Request, table: str) -> httpx.Response:
        params = list(request.url.params.multi_items())
        rows = self.tables.get(table, [])
        self.tables[table] = [r for r in rows if not self._matches(r, params)]
        return httpx.Response(204)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url=SUPABASE_URL,
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-key",
        hcaptcha_secret="captcha-secret",
        hcaptcha_verify_url=CAPTCHA_URL,
        owner_email="owner@example.com",
        site_name="Test Blog",
    )


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def transport(supabase: FakeSupabase) -> httpx.MockTransport:
    return httpx.MockTransport(supabase)


@pytest.fixture
def client(settings: Settings, transport: httpx.MockTransport):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_transport] = lambda: transport
    try:
        # No context manager: the lifespan (DB pool) is not started in tests.
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
