"""
Analyze password-recovery links copied from the platform's emails.

Links come in two shapes: a redirect carrying the session in the fragment or query
(access_token, refresh_token, type=recovery) or the platform's verify link
(https://<project>.supabase.co/auth/v1/verify?token=...&type=recovery&redirect_to=...).
Parse methods are tried in order: fragment, query string, direct regex, verify link.
"""
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qs, urlparse

import jwt

_PROJECT_RE = re.compile(r"https://([^.]+)\.supabase\.co")


def _param(pattern: str, text: str) -> str | None:
    match = re.search(rf"(?:^|[?&#]){pattern}=([^&#\s]+)", text)
    return match.group(1) if match else None


def _first(qs: dict[str, list[str]], key: str) -> str | None:
    values = qs.get(key)
    return values[0] if values else None


def decode_access_token(token: str, *, now: datetime | None = None) -> dict[str, Any]:
    """Unverified claims of a session JWT plus expiry status. Errors are reported, not raised."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        return {"valid_format": False, "error": str(e)}
    out: dict[str, Any] = {
        "valid_format": True,
        "sub": claims.get("sub"),
        "email": claims.get("email"),
        "role": claims.get("role"),
    }
    exp = claims.get("exp")
    if isinstance(exp, (int, float)):
        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        now = now or datetime.now(timezone.utc)
        out["expires_at"] = expires_at.isoformat()
        out["expired"] = expires_at <= now
    return out


def analyze_recovery_link(raw: str, *, now: datetime | None = None) -> dict[str, Any]:
    text = (raw or "").strip()
    result: dict[str, Any] = {
        "length": len(text),
        "characteristics": {
            "has_hash": "#" in text,
            "has_query": "?" in text,
            "has_access_token": "access_token" in text,
            "has_refresh_token": "refresh_token" in text,
            "has_type": "type" in text,
        },
        "method": None,
        "access_token": None,
        "refresh_token": None,
        "token_type": None,
        "verify_token": None,
        "project_id": None,
        "redirect_to": None,
        "is_verify_link": False,
        "warnings": [],
    }
    access = refresh = token_type = None

    if "#" in text:
        fragment = parse_qs(text.split("#", 1)[1])
        access, refresh, token_type = _first(fragment, "access_token"), _first(fragment, "refresh_token"), _first(fragment, "type")
        if access or refresh:
            result["method"] = "fragment"

    if not (access and refresh):
        query = parse_qs(urlparse(text).query)
        q_access, q_refresh = _first(query, "access_token"), _first(query, "refresh_token")
        if q_access or q_refresh:
            access, refresh, token_type = q_access, q_refresh, _first(query, "type")
            result["method"] = "query"

    if not (access and refresh):
        d_access, d_refresh = _param("access_token", text), _param("refresh_token", text)
        if d_access or d_refresh:
            access = d_access or access
            refresh = d_refresh or refresh
            token_type = _param("type", text) or token_type
            result["method"] = "direct"

    if not access and not refresh:
        verify_token, verify_type = _param("token", text), _param("type", text)
        if verify_token and verify_type:
            project = _PROJECT_RE.search(text)
            query = parse_qs(urlparse(text).query)
            result.update(
                method="verify_link",
                is_verify_link=True,
                verify_token=verify_token,
                token_type=verify_type,
                project_id=project.group(1) if project else "unknown",
                redirect_to=_first(query, "redirect_to"),
            )
            if verify_type != "recovery":
                result["warnings"].append(f'El tipo de token no es "recovery" ({verify_type})')
            return result

    result["access_token"] = access
    result["refresh_token"] = refresh
    result["token_type"] = token_type
    if access and refresh:
        if token_type and token_type != "recovery":
            result["warnings"].append(f'El tipo de token no es "recovery" ({token_type})')
    else:
        result["warnings"].append('La URL debe contener "access_token=" y "refresh_token="')
    if access:
        result["access_claims"] = decode_access_token(access, now=now)
        if result["access_claims"].get("expired"):
            result["warnings"].append("El access token ha caducado; solicita un nuevo email de recuperación")
    return result
