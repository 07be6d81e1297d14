"""Hosted platform HTTP client: lowest level, sends request only. No validation.

Covers the three gateways this backend needs beyond plain SQL:
  - /auth/v1/admin/*  identity provider admin (create/list/update users)
  - /rest/v1/*        table reads through RLS (anon vs service role checks)
  - /realtime/v1/api/broadcast  server-side broadcast to realtime channels
Every call returns a dict; failures are {"error": ..., "status": ...} instead of raising.
"""
from typing import Any

import httpx

from sad.services.supabase.config import SupabaseConfig


class SupabaseClient:
    """Thin wrapper over the platform's REST gateways."""

    def __init__(self, config: SupabaseConfig | None = None, *, transport: httpx.BaseTransport | None = None) -> None:
        self._config = config or SupabaseConfig()
        self._transport = transport

    @property
    def config(self) -> SupabaseConfig:
        return self._config

    def _credentials_error(self) -> dict[str, Any]:
        return {"error": "Platform credentials not configured. Add SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to .env."}

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        service_role: bool = True,
        timeout: float = 15.0,
    ) -> dict[str, Any]:
        if not self._config.is_configured():
            return self._credentials_error()
        url = f"{self._config.url}{path}"
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as c:
                r = c.request(method, url, json=json_body, params=params, headers=self._config.headers(service_role=service_role))
        except httpx.HTTPError as e:
            return {"error": str(e)}
        if not r.is_success:
            message = r.text[:500] if r.text else ""
            try:
                body = r.json()
                message = body.get("msg") or body.get("message") or body.get("error_description") or body.get("error") or message
            except ValueError:
                pass
            return {"error": message or f"HTTP {r.status_code}", "status": r.status_code}
        if not r.content:
            return {}
        try:
            data = r.json()
        except ValueError:
            return {"_raw_body": r.text[:2000]}
        return data if isinstance(data, dict) else {"data": data}

    # --- identity provider admin ---

    def create_user(self, email: str, password: str, *, email_confirm: bool = True, user_metadata: dict[str, Any] | None = None) -> dict[str, Any]:
        body = {"email": email, "password": password, "email_confirm": email_confirm, "user_metadata": user_metadata or {}}
        return self._request("POST", "/auth/v1/admin/users", json_body=body)

    def list_users(self, *, page: int = 1, per_page: int = 200) -> dict[str, Any]:
        return self._request("GET", "/auth/v1/admin/users", params={"page": page, "per_page": per_page})

    def update_user_by_id(self, user_id: str, attributes: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/auth/v1/admin/users/{user_id}", json_body=attributes)

    def find_user_by_email(self, email: str) -> tuple[dict[str, Any] | None, str | None]:
        """Scan admin user pages for email (case-insensitive). Returns (user, error)."""
        target = email.strip().lower()
        page = 1
        while True:
            resp = self.list_users(page=page)
            if "error" in resp:
                return None, resp["error"]
            users = resp.get("users") or []
            for u in users:
                if (u.get("email") or "").lower() == target:
                    return u, None
            if len(users) < 200:
                return None, None
            page += 1

    # --- table REST (PostgREST) ---

    def select(self, table: str, columns: str = "*", *, limit: int = 10, service_role: bool = True) -> dict[str, Any]:
        """GET /rest/v1/<table>; returns {"data": [...]} or {"error": ...}."""
        if not service_role and not self._config.anon_key:
            return {"error": "SUPABASE_ANON_KEY not configured"}
        return self._request("GET", f"/rest/v1/{table}", params={"select": columns, "limit": limit}, service_role=service_role)

    # --- realtime ---

    def broadcast(self, channel: str, event: str, payload: dict[str, Any]) -> dict[str, Any]:
        body = {"messages": [{"topic": channel, "event": event, "payload": payload}]}
        return self._request("POST", "/realtime/v1/api/broadcast", json_body=body, timeout=5.0)
