"""
Supabase HTTP client helpers.

Used endpoints:
- /rest/v1/<table>      PostgREST table access (select/insert/update/upsert/delete)
- /rest/v1/rpc/<fn>     stored procedures
- /auth/v1/user         resolve an access token to a user
- /auth/v1/admin/users  delete an auth user (service role only)

Two capabilities are exposed as separate types so call sites cannot mix them
up: `AnonClient` (anonymous key, row-level security applies) and
`ServiceRoleClient` (service-role key, bypasses row-level security; server
side only).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable
from urllib.parse import quote

import httpx

UNIQUE_VIOLATION = "23505"

Filter = tuple[str, str]


# Supabase failures are explicit and separable from other runtime errors.
class SupabaseError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        self.hint = hint

    @property
    def is_unique_violation(self) -> bool:
        if (self.code or "") == UNIQUE_VIOLATION:
            return True
        text = f"{self.details or ''} {self.message or ''}".lower()
        return "duplicate" in text


@dataclass(frozen=True)
class SelectResult:
    rows: list[dict[str, Any]]
    count: int | None = None


def eq(column: str, value: Any) -> Filter:
    return column, f"eq.{value}"


def ilike(column: str, pattern: str) -> Filter:
    return column, f"ilike.{pattern}"


def _quote(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def in_(column: str, values: Iterable[Any]) -> Filter:
    return column, "in.(" + ",".join(_quote(v) for v in values) + ")"


def condition(column: str, op: str, value: Any) -> str:
    """
    One condition for `any_of`, e.g. `email.ilike."%x%"`. The value is
    double-quoted so commas and parentheses stay inside it.
    """
    return f"{column}.{op}.{_quote(value)}"


def any_of(*conditions: str) -> Filter:
    """
    OR-combine PostgREST conditions built with `condition`.
    """
    return "or", "(" + ",".join(conditions) + ")"


def _parse_content_range(value: str | None) -> int | None:
    # "0-19/57" or "*/0"
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        return None
    return int(total)


def _error_from_response(resp: httpx.Response) -> SupabaseError:
    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        message = str(data.get("message") or data.get("msg") or data.get("error") or "")
        return SupabaseError(
            message or f"Supabase request failed with status {resp.status_code}",
            status_code=resp.status_code,
            code=str(data["code"]) if data.get("code") is not None else None,
            details=str(data["details"]) if data.get("details") is not None else None,
            hint=str(data["hint"]) if data.get("hint") is not None else None,
        )

    return SupabaseError(
        f"Supabase request failed: {resp.status_code} {resp.text[:300]}",
        status_code=resp.status_code,
    )


class _SupabaseClient:
    def __init__(
        self,
        *,
        url: str,
        key: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        url = (url or "").strip()
        key = (key or "").strip()
        if not url:
            raise SupabaseError("SUPABASE_URL is empty.")
        if not key:
            raise SupabaseError(f"{type(self).__name__} key is empty.")
        self._base_url = url.rstrip("/")
        self._key = key
        self._timeout_s = timeout_s
        self._transport = transport

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[Filter] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_s,
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=headers if headers is not None else self._headers(),
                )
        except httpx.HTTPError as exc:
            raise SupabaseError(f"Supabase request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise _error_from_response(resp)
        return resp

    @staticmethod
    def _rows(resp: httpx.Response) -> list[dict[str, Any]]:
        if not resp.content:
            return []
        data = resp.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Iterable[Filter] = (),
        order: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        count: bool = False,
        schema: str | None = None,
    ) -> SelectResult:
        """
        SELECT rows. `order` uses PostgREST syntax, e.g. "created_at.desc".
        """
        params: list[Filter] = [("select", columns), *filters]
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset:
            params.append(("offset", str(offset)))

        extra: dict[str, str] = {}
        if count:
            extra["Prefer"] = "count=exact"
        if schema:
            extra["Accept-Profile"] = schema

        resp = await self._request("GET", f"/rest/v1/{table}", params=params, headers=self._headers(extra))
        total = _parse_content_range(resp.headers.get("content-range")) if count else None
        return SelectResult(rows=self._rows(resp), count=total)

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Iterable[Filter] = (),
    ) -> dict[str, Any] | None:
        result = await self.select(table, columns=columns, filters=filters, limit=1)
        return result.rows[0] if result.rows else None

    async def insert(
        self,
        table: str,
        rows: dict[str, Any] | list[dict[str, Any]],
        *,
        returning: bool = False,
    ) -> list[dict[str, Any]]:
        prefer = "return=representation" if returning else "return=minimal"
        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=rows,
            headers=self._headers({"Prefer": prefer}),
        )
        return self._rows(resp) if returning else []

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: Iterable[Filter],
        returning: bool = False,
    ) -> list[dict[str, Any]]:
        prefer = "return=representation" if returning else "return=minimal"
        resp = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=list(filters),
            json=values,
            headers=self._headers({"Prefer": prefer}),
        )
        return self._rows(resp) if returning else []

    async def upsert(
        self,
        table: str,
        row: dict[str, Any],
        *,
        on_conflict: str,
    ) -> list[dict[str, Any]]:
        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            params=[("on_conflict", on_conflict)],
            json=row,
            headers=self._headers({"Prefer": "resolution=merge-duplicates,return=representation"}),
        )
        return self._rows(resp)

    async def delete(self, table: str, *, filters: Iterable[Filter]) -> None:
        await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=list(filters),
            headers=self._headers({"Prefer": "return=minimal"}),
        )

    async def rpc(self, function: str, args: dict[str, Any] | None = None) -> Any:
        resp = await self._request("POST", f"/rest/v1/rpc/{function}", json=args or {})
        if not resp.content:
            return None
        return resp.json()

    async def get_user(self, access_token: str) -> dict[str, Any] | None:
        """
        Resolve an end-user access token. Returns None when the token is rejected.
        """
        token = (access_token or "").strip()
        if not token:
            return None
        headers = {"apikey": self._key, "Authorization": f"Bearer {token}"}
        try:
            resp = await self._request("GET", "/auth/v1/user", headers=headers)
        except SupabaseError as exc:
            if exc.status_code in (401, 403):
                return None
            raise
        data = resp.json()
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return data


class AnonClient(_SupabaseClient):
    """
    Anonymous-key client. Row-level security policies apply.
    """


class ServiceRoleClient(_SupabaseClient):
    """
    Service-role client. Bypasses row-level security; never expose to browsers.
    """

    async def delete_auth_user(self, user_id: str) -> None:
        # Auth admin API; only the service-role key is accepted here.
        await self._request("DELETE", f"/auth/v1/admin/users/{quote(str(user_id), safe='')}")
