"""
Send push notifications to worker devices via Apple Push Notification service (APNs).

Credentials come from settings: APNS_KEY_ID, APNS_TEAM_ID, APNS_BUNDLE_ID and the .p8 signing key
(APNS_KEY_P8_PATH or APNS_KEY_P8_BASE64). Without them send_apns and send_to_devices log and return.
Only 'ios' devices are delivered; other platforms are logged and skipped.
"""
import base64
import binascii
import logging
import time
from pathlib import Path
from typing import Any

import httpx
import jwt

from sad.config import settings

logger = logging.getLogger(__name__)

APNS_SANDBOX = "https://api.sandbox.push.apple.com"
APNS_PRODUCTION = "https://api.push.apple.com"

# APNs rejects provider tokens older than one hour
_TOKEN_TTL_SECONDS = 50 * 60
_token_cache: dict[str, tuple[str, float]] = {}


class ApnsConfig:
    """APNs provider credentials. Explicit arguments override settings."""

    __slots__ = ("key_id", "team_id", "bundle_id", "key_path", "key_base64", "use_sandbox")

    def __init__(
        self,
        *,
        key_id: str | None = None,
        team_id: str | None = None,
        bundle_id: str | None = None,
        key_path: str | None = None,
        key_base64: str | None = None,
        use_sandbox: bool | None = None,
    ) -> None:
        self.key_id = key_id if key_id is not None else settings.apns_key_id
        self.team_id = team_id if team_id is not None else settings.apns_team_id
        self.bundle_id = bundle_id if bundle_id is not None else settings.apns_bundle_id
        self.key_path = key_path if key_path is not None else settings.apns_key_p8_path
        self.key_base64 = key_base64 if key_base64 is not None else settings.apns_key_p8_base64
        self.use_sandbox = settings.apns_use_sandbox if use_sandbox is None else use_sandbox

    def is_configured(self) -> bool:
        return bool(self.bundle_id and self.key_id and self.team_id and (self.key_path or self.key_base64))

    @property
    def base_url(self) -> str:
        return APNS_SANDBOX if self.use_sandbox else APNS_PRODUCTION

    def signing_key(self) -> str | None:
        """PEM text of the .p8 key, or None when it cannot be read."""
        if self.key_base64:
            try:
                return base64.b64decode(self.key_base64).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                logger.warning("APNS_KEY_P8_BASE64 decode failed: %s", e)
                return None
        if self.key_path:
            try:
                return Path(self.key_path).read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("APNS_KEY_P8_PATH read failed: %s", e)
        return None


def is_configured() -> bool:
    return ApnsConfig().is_configured()


def _provider_token(config: ApnsConfig) -> str | None:
    """ES256 provider token for config.team_id, reused until shortly before APNs would reject it."""
    now = time.time()
    cached = _token_cache.get(config.key_id)
    if cached and cached[1] > now:
        return cached[0]
    key = config.signing_key()
    if not key:
        return None
    try:
        token = jwt.encode({"iss": config.team_id, "iat": int(now)}, key, algorithm="ES256", headers={"kid": config.key_id})
    except (jwt.PyJWTError, ValueError) as e:
        logger.warning("APNs provider token failed: %s", e)
        return None
    _token_cache[config.key_id] = (token, now + _TOKEN_TTL_SECONDS)
    return token


def _aps_body(payload: dict[str, Any]) -> dict[str, Any]:
    """APNs body from a worker push payload (see notification_service.build_push_payload)."""
    aps: dict[str, Any] = {
        "alert": {"title": payload.get("title", ""), "body": payload.get("body", "")},
        "badge": payload.get("badge", 1),
    }
    if payload.get("sound"):
        aps["sound"] = payload["sound"]
    actions = payload.get("actions") or []
    if actions:
        aps["category"] = (payload.get("data") or {}).get("type", "system_message")
    return {"aps": aps, "data": payload.get("data") or {}}


def send_apns(device_token: str, payload: dict[str, Any], *, priority: str = "normal", config: ApnsConfig | None = None) -> bool:
    """
    Send one push notification to an iOS device via APNs.
    Returns True if APNs accepted it, False otherwise (config missing, token rejected or network error).
    """
    config = config or ApnsConfig()
    if not config.bundle_id:
        logger.debug("APNS_BUNDLE_ID not set; skipping push")
        return False
    provider_token = _provider_token(config) if config.is_configured() else None
    if not provider_token:
        logger.debug("APNs not configured (key/team); skipping push")
        return False
    headers = {
        "authorization": f"bearer {provider_token}",
        "apns-topic": config.bundle_id,
        "apns-push-type": "alert",
        # APNs only knows 10 (immediate) and 5 (power-considerate)
        "apns-priority": "5" if priority == "low" else "10",
    }
    try:
        with httpx.Client(http2=True, timeout=10.0) as client:
            resp = client.post(f"{config.base_url}/3/device/{device_token}", json=_aps_body(payload), headers=headers)
    except httpx.HTTPError as e:
        logger.warning("APNs request failed: %s", e)
        return False
    if resp.status_code == 200:
        return True
    if resp.status_code == 410:
        logger.info("APNs token %s... is no longer registered", device_token[:12])
    else:
        logger.warning("APNs returned %s for token %s...: %s", resp.status_code, device_token[:12], resp.text)
    return False


def send_to_devices(devices: list[tuple[str, str]], payload: dict[str, Any], *, priority: str = "normal") -> int:
    """
    Send payload to (push_token, platform) pairs.
    Returns count of successful sends.
    """
    sent = 0
    for token, platform in devices:
        if not token:
            continue
        if platform != "ios":
            logger.info("Push to platform=%s not supported; skipping token %s...", platform, token[:12])
            continue
        if send_apns(token, payload, priority=priority):
            sent += 1
    return sent
