"""
Worker notifications: create, deliver (push + realtime), list and housekeeping.

Storage always happens; delivery is best effort and filtered by the worker's settings
(push switch, per-category switch, quiet hours). A failed push or broadcast never fails the create.
"""
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.config import settings
from sad.core.constants import (
    DEFAULT_NOTIFICATION_SOUND,
    NOTIFICATION_CATEGORY_SETTING,
    NOTIFICATION_ICON,
    NOTIFICATION_SOUNDS,
    VIBRATION_PATTERNS,
)
from sad.models.worker_device import WorkerDevice
from sad.models.worker_notification import WorkerNotification
from sad.models.worker_notification_settings import WorkerNotificationSettings
from sad.services import push, realtime

logger = logging.getLogger(__name__)

_BASE_ACTIONS = [
    {"action": "view", "title": "Ver", "icon": "/icons/view.png"},
    {"action": "dismiss", "title": "Descartar", "icon": "/icons/dismiss.png"},
]

_TYPE_ACTIONS: dict[str, list[dict[str, str]]] = {
    "new_user": [
        {"action": "view_user", "title": "Ver Usuario", "icon": "/icons/user.png"},
        {"action": "view_schedule", "title": "Ver Horario", "icon": "/icons/schedule.png"},
    ],
    "schedule_change": [
        {"action": "view_schedule", "title": "Ver Horario", "icon": "/icons/schedule.png"},
        {"action": "acknowledge", "title": "Confirmar", "icon": "/icons/check.png"},
    ],
    "assignment_change": [
        {"action": "view_assignment", "title": "Ver Asignación", "icon": "/icons/assignment.png"},
    ],
    "route_update": [
        {"action": "view_route", "title": "Ver Ruta", "icon": "/icons/route.png"},
    ],
    "urgent": [
        {"action": "call", "title": "Llamar", "icon": "/icons/phone.png"},
        {"action": "respond", "title": "Responder", "icon": "/icons/message.png"},
    ],
    "service_start": [
        {"action": "view_service", "title": "Ver Servicio", "icon": "/icons/service.png"},
        {"action": "start_navigation", "title": "Iniciar Ruta", "icon": "/icons/navigation.png"},
    ],
    "service_end": [
        {"action": "view_service", "title": "Ver Servicio", "icon": "/icons/service.png"},
        {"action": "complete_service", "title": "Marcar Completado", "icon": "/icons/check.png"},
        {"action": "next_service", "title": "Siguiente Servicio", "icon": "/icons/next.png"},
    ],
}


def get_notification_sound(notification_type: str) -> str:
    return NOTIFICATION_SOUNDS.get(notification_type, DEFAULT_NOTIFICATION_SOUND)


def get_vibration_pattern(priority: str) -> list[int]:
    return list(VIBRATION_PATTERNS.get(priority, VIBRATION_PATTERNS["normal"]))


def get_notification_actions(notification_type: str) -> list[dict[str, str]]:
    """Type-specific actions first, then view/dismiss."""
    return [*_TYPE_ACTIONS.get(notification_type, []), *_BASE_ACTIONS]


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_notification(row: WorkerNotification) -> dict[str, Any]:
    return {
        "id": row.id,
        "worker_id": row.worker_id,
        "title": row.title,
        "body": row.body,
        "type": row.type,
        "priority": row.priority,
        "data": row.data or {},
        "read": row.read_at is not None,
        "read_at": _iso(row.read_at),
        "sent_at": _iso(row.sent_at),
        "expires_at": _iso(row.expires_at),
        "created_at": _iso(row.created_at),
    }


# --- Settings ---


def get_or_create_settings(db: Session, worker_id: str) -> WorkerNotificationSettings:
    """Settings row for the worker; a default row (everything on) is created on first access."""
    row = db.query(WorkerNotificationSettings).filter(WorkerNotificationSettings.worker_id == worker_id).first()
    if row:
        return row
    row = WorkerNotificationSettings(worker_id=worker_id)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _parse_hhmm(value: str | None) -> time | None:
    if not value:
        return None
    try:
        hh, mm = value.strip().split(":")[:2]
        return time(int(hh), int(mm))
    except (ValueError, TypeError):
        return None


def in_quiet_hours(prefs: WorkerNotificationSettings | None, now_local: time) -> bool:
    """True when now_local falls in [start, end). Windows crossing midnight (22:00-07:00) wrap."""
    if prefs is None:
        return False
    start = _parse_hhmm(prefs.quiet_hours_start)
    end = _parse_hhmm(prefs.quiet_hours_end)
    if start is None or end is None or start == end:
        return False
    if start < end:
        return start <= now_local < end
    return now_local >= start or now_local < end


def should_push(
    prefs: WorkerNotificationSettings | None,
    notification_type: str,
    priority: str,
    now: datetime | None = None,
) -> bool:
    """Delivery gate: push switch, per-category switch, quiet hours (urgent priority ignores quiet hours)."""
    if prefs is None:
        return True
    if not prefs.push_enabled:
        return False
    column = NOTIFICATION_CATEGORY_SETTING.get(notification_type)
    if column and not getattr(prefs, column, True):
        return False
    if priority == "urgent":
        return True
    now = now or datetime.now(timezone.utc)
    now_local = now.astimezone(ZoneInfo(settings.local_timezone)).time()
    return not in_quiet_hours(prefs, now_local)


def build_push_payload(row: WorkerNotification, prefs: WorkerNotificationSettings | None = None) -> dict[str, Any]:
    sound_on = prefs is None or prefs.sound_enabled
    vibrate_on = prefs is None or prefs.vibration_enabled
    return {
        "title": row.title,
        "body": row.body,
        "icon": NOTIFICATION_ICON,
        "badge": 1,
        "sound": get_notification_sound(row.type) if sound_on else None,
        "vibrate": get_vibration_pattern(row.priority) if vibrate_on else [],
        "data": {
            "notificationId": row.id,
            "type": row.type,
            "workerId": row.worker_id,
            **(row.data or {}),
        },
        "actions": get_notification_actions(row.type),
    }


# --- Create and deliver ---


def _send_push(db: Session, row: WorkerNotification, now: datetime | None = None) -> int:
    devices = (
        db.query(WorkerDevice.push_token, WorkerDevice.platform)
        .filter(
            WorkerDevice.worker_id == row.worker_id,
            WorkerDevice.authorized.is_(True),
            WorkerDevice.push_token.isnot(None),
        )
        .all()
    )
    if not devices:
        logger.info("No push tokens found for worker %s", row.worker_id)
        return 0
    prefs = db.query(WorkerNotificationSettings).filter(WorkerNotificationSettings.worker_id == row.worker_id).first()
    if not should_push(prefs, row.type, row.priority, now):
        logger.info("Push suppressed by settings for worker %s (type=%s)", row.worker_id, row.type)
        return 0
    payload = build_push_payload(row, prefs)
    return push.send_to_devices([(d.push_token, d.platform) for d in devices], payload, priority=row.priority)


def create_and_send_notification(
    db: Session,
    worker_id: str,
    *,
    title: str,
    body: str,
    type: str = "system_message",
    priority: str = "normal",
    data: dict[str, Any] | None = None,
    expires_at: datetime | None = None,
) -> WorkerNotification | None:
    """
    Insert a notification for the worker, then push to authorized devices and broadcast on realtime.
    Returns the stored row, or None if the insert failed.
    """
    try:
        row = WorkerNotification(
            worker_id=worker_id,
            title=title,
            body=body,
            type=type,
            priority=priority,
            data=data or {},
            expires_at=expires_at,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error creating notification for worker %s: %s", worker_id, e)
        return None

    try:
        sent = _send_push(db, row)
        if sent:
            logger.info("Pushed notification %s to %s devices", row.id, sent)
    except SQLAlchemyError as e:
        logger.warning("Error sending push notification %s: %s", row.id, e, exc_info=True)
    realtime.broadcast_notification(worker_id, serialize_notification(row))
    return row


# --- System notifications (assignment and service events) ---


def notify_new_user(db: Session, worker_id: str, user_name: str, user_address: str) -> WorkerNotification | None:
    return create_and_send_notification(
        db,
        worker_id,
        title="👤 Nuevo usuario asignado",
        body=f"Se te ha asignado un nuevo usuario: {user_name} en {user_address}",
        type="new_user",
        priority="high",
        data={"userName": user_name, "userAddress": user_address},
    )


def notify_user_removed(db: Session, worker_id: str, user_name: str) -> WorkerNotification | None:
    return create_and_send_notification(
        db,
        worker_id,
        title="❌ Usuario eliminado",
        body=f"El usuario {user_name} ha sido eliminado de tus asignaciones",
        type="user_removed",
        priority="normal",
        data={"userName": user_name},
    )


def notify_schedule_change(
    db: Session, worker_id: str, user_name: str, old_time: str, new_time: str
) -> WorkerNotification | None:
    return create_and_send_notification(
        db,
        worker_id,
        title="⏰ Cambio de horario",
        body=f"Horario de {user_name} cambiado de {old_time} a {new_time}",
        type="schedule_change",
        priority="high",
        data={"userName": user_name, "oldTime": old_time, "newTime": new_time},
    )


def notify_service_start(
    db: Session, worker_id: str, user_name: str, service_time: str, service_address: str
) -> WorkerNotification | None:
    return create_and_send_notification(
        db,
        worker_id,
        title="▶️ Servicio iniciado",
        body=f"Servicio con {user_name} a las {service_time} en {service_address} ha comenzado",
        type="service_start",
        priority="high",
        data={"userName": user_name, "serviceTime": service_time, "serviceAddress": service_address},
    )


def notify_service_end(
    db: Session, worker_id: str, user_name: str, service_time: str, next_service_info: str | None = None
) -> WorkerNotification | None:
    suffix = f". {next_service_info}" if next_service_info else ""
    return create_and_send_notification(
        db,
        worker_id,
        title="⏹️ Servicio finalizado",
        body=f"Servicio con {user_name} a las {service_time} ha terminado{suffix}",
        type="service_end",
        priority="normal",
        data={"userName": user_name, "serviceTime": service_time, "nextServiceInfo": next_service_info},
    )


# --- Feed ---


def list_notifications(
    db: Session,
    worker_id: str,
    *,
    limit: int = 50,
    unread_only: bool = False,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Newest first; expired rows are hidden. unread_count ignores limit and unread_only."""
    now = now or datetime.now(timezone.utc)
    not_expired = or_(WorkerNotification.expires_at.is_(None), WorkerNotification.expires_at > now)
    base = db.query(WorkerNotification).filter(WorkerNotification.worker_id == worker_id, not_expired)
    q = base.filter(WorkerNotification.read_at.is_(None)) if unread_only else base
    rows = q.order_by(WorkerNotification.sent_at.desc()).limit(limit).all()
    unread_count = base.filter(WorkerNotification.read_at.is_(None)).count()
    return {
        "notifications": [serialize_notification(r) for r in rows],
        "unread_count": unread_count,
    }


def mark_read(db: Session, notification_id: str) -> WorkerNotification | None:
    """Set read_at once; returns None when the notification does not exist."""
    row = db.query(WorkerNotification).filter(WorkerNotification.id == notification_id).first()
    if not row:
        return None
    if row.read_at is None:
        row.read_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(row)
    return row


def mark_all_read(db: Session, worker_id: str) -> int:
    now = datetime.now(timezone.utc)
    updated = (
        db.query(WorkerNotification)
        .filter(WorkerNotification.worker_id == worker_id, WorkerNotification.read_at.is_(None))
        .update({WorkerNotification.read_at: now}, synchronize_session=False)
    )
    db.commit()
    return updated


def prune_notifications(db: Session, *, now: datetime | None = None, retention_days: int | None = None) -> dict[str, int]:
    """Delete expired notifications and read ones older than the retention window."""
    now = now or datetime.now(timezone.utc)
    retention_days = settings.notification_retention_days if retention_days is None else retention_days
    expired = (
        db.query(WorkerNotification)
        .filter(WorkerNotification.expires_at.isnot(None), WorkerNotification.expires_at <= now)
        .delete(synchronize_session=False)
    )
    cutoff = now - timedelta(days=retention_days)
    old_read = (
        db.query(WorkerNotification)
        .filter(WorkerNotification.read_at.isnot(None), WorkerNotification.sent_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    return {"expired": expired, "old_read": old_read}
