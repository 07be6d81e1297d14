"""Per-worker notification preferences. The default row is created on first read."""
import re
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.errors import MSG_WORKER_NOT_FOUND, db_error_to_http
from sad.db.session import get_db
from sad.models.worker import Worker
from sad.models.worker_notification_settings import WorkerNotificationSettings
from sad.services.notification_service import get_or_create_settings

router = APIRouter()

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

SETTINGS_FIELDS = (
    "push_enabled",
    "sound_enabled",
    "vibration_enabled",
    "new_user_notifications",
    "schedule_change_notifications",
    "assignment_change_notifications",
    "route_update_notifications",
    "reminder_notifications",
    "urgent_notifications",
    "holiday_update_notifications",
    "system_notifications",
    "quiet_hours_start",
    "quiet_hours_end",
)


class UpdateSettingsRequest(BaseModel):
    push_enabled: bool | None = None
    sound_enabled: bool | None = None
    vibration_enabled: bool | None = None
    new_user_notifications: bool | None = None
    schedule_change_notifications: bool | None = None
    assignment_change_notifications: bool | None = None
    route_update_notifications: bool | None = None
    reminder_notifications: bool | None = None
    urgent_notifications: bool | None = None
    holiday_update_notifications: bool | None = None
    system_notifications: bool | None = None
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None

    @field_validator("quiet_hours_start", "quiet_hours_end")
    @classmethod
    def hhmm(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        v = v.strip()
        if not _HHMM.match(v):
            raise ValueError("Formato de hora no válido (HH:MM)")
        return v


def settings_dict(row: WorkerNotificationSettings) -> dict[str, Any]:
    return {"worker_id": row.worker_id, **{f: getattr(row, f) for f in SETTINGS_FIELDS}}


def _require_worker(db: Session, worker_id: str) -> None:
    if not db.query(Worker.id).filter(Worker.id == worker_id).first():
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)


@router.get("/workers/{worker_id}/notification-settings")
def get_notification_settings(worker_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    _require_worker(db, worker_id)
    return settings_dict(get_or_create_settings(db, worker_id))


@router.put("/workers/{worker_id}/notification-settings")
def update_notification_settings(
    worker_id: str, body: UpdateSettingsRequest, db: Session = Depends(get_db)
) -> dict[str, Any]:
    """Only fields present in the body change. Send quiet_hours_* as null to clear them."""
    _require_worker(db, worker_id)
    row = get_or_create_settings(db, worker_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and not key.startswith("quiet_hours_"):
            continue
        setattr(row, key, value)
    try:
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    return settings_dict(row)
