"""Broadcast a notification row to the worker's realtime channel so an open dashboard updates without polling."""
import logging
from typing import Any

from sad.core.constants import REALTIME_CHANNEL_TEMPLATE, REALTIME_EVENT
from sad.services.supabase import SupabaseClient

logger = logging.getLogger(__name__)


def channel_for_worker(worker_id: str) -> str:
    return REALTIME_CHANNEL_TEMPLATE.format(worker_id=worker_id)


def broadcast_notification(worker_id: str, notification: dict[str, Any], client: SupabaseClient | None = None) -> bool:
    """Returns True when the platform accepted the broadcast; False if unconfigured or failed."""
    client = client or SupabaseClient()
    if not client.config.is_configured():
        logger.debug("Realtime not configured; skipping broadcast for worker %s", worker_id)
        return False
    resp = client.broadcast(channel_for_worker(worker_id), REALTIME_EVENT, notification)
    if "error" in resp:
        logger.warning("Realtime broadcast failed for worker %s: %s", worker_id, resp["error"])
        return False
    return True
