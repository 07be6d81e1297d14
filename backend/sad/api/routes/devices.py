"""Device registration for push: one row per (worker, device), token refreshed on every app launch."""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.errors import MSG_DEVICE_NOT_FOUND, MSG_WORKER_NOT_FOUND, db_error_to_http
from sad.db.session import get_db
from sad.models.worker import Worker
from sad.models.worker_device import WorkerDevice

router = APIRouter()
logger = logging.getLogger(__name__)

PLATFORMS = ("ios", "android", "web")


class RegisterDeviceRequest(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=128)
    platform: str = Field(..., description="ios | android | web")
    push_token: str | None = Field(None, max_length=512, description="APNs hex token (or FCM/web token)")
    device_name: str | None = Field(None, max_length=128)
    app_version: str | None = Field(None, max_length=32)
    os_version: str | None = Field(None, max_length=32)


def _device_dict(d: WorkerDevice) -> dict[str, Any]:
    return {
        "id": d.id,
        "worker_id": d.worker_id,
        "device_id": d.device_id,
        "device_name": d.device_name,
        "platform": d.platform,
        "authorized": d.authorized,
        "has_push_token": bool(d.push_token),
        "last_used": d.last_used.isoformat() if d.last_used else None,
    }


@router.post("/workers/{worker_id}/devices")
def register_device(worker_id: str, body: RegisterDeviceRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Upsert by (worker_id, device_id). A null push_token keeps the stored one."""
    platform = body.platform.strip().lower()
    if platform not in PLATFORMS:
        raise HTTPException(status_code=400, detail=f"Plataforma no válida: {body.platform}")
    if not db.query(Worker.id).filter(Worker.id == worker_id).first():
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)
    token = body.push_token.strip() if body.push_token else None
    device = (
        db.query(WorkerDevice)
        .filter(WorkerDevice.worker_id == worker_id, WorkerDevice.device_id == body.device_id)
        .first()
    )
    now = datetime.now(timezone.utc)
    try:
        if device:
            device.platform = platform
            device.last_used = now
            device.authorized = True
            if token:
                device.push_token = token
            for key in ("device_name", "app_version", "os_version"):
                value = getattr(body, key)
                if value is not None:
                    setattr(device, key, value)
            created = False
        else:
            device = WorkerDevice(
                worker_id=worker_id,
                device_id=body.device_id,
                platform=platform,
                push_token=token,
                device_name=body.device_name,
                app_version=body.app_version,
                os_version=body.os_version,
                last_used=now,
            )
            db.add(device)
            created = True
        db.commit()
        db.refresh(device)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    logger.info("Device %s %s for worker %s (%s)", body.device_id, "registered" if created else "refreshed", worker_id, platform)
    return {"ok": True, "created": created, "device": _device_dict(device)}


@router.delete("/workers/{worker_id}/devices/{device_id}")
def unregister_device(worker_id: str, device_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    deleted = (
        db.query(WorkerDevice)
        .filter(WorkerDevice.worker_id == worker_id, WorkerDevice.device_id == device_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail=MSG_DEVICE_NOT_FOUND)
    return {"ok": True}
