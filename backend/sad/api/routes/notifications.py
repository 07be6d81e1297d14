"""
Worker notifications API: feed, read state, delete, admin create and test notification.

Creation always stores the row; push and realtime delivery are best effort (see notification_service).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.constants import NOTIFICATION_PRIORITIES, NOTIFICATION_TYPES
from sad.core.errors import MSG_NOTIFICATION_NOT_FOUND, MSG_WORKER_NOT_FOUND, db_error_to_http
from sad.db.session import get_db
from sad.models.worker import Worker
from sad.models.worker_notification import WorkerNotification
from sad.services import notification_service
from sad.services.notification_service import serialize_notification

router = APIRouter()
logger = logging.getLogger(__name__)

TEST_NOTIFICATION_TITLE = "🧪 Notificación de Prueba"
TEST_NOTIFICATION_BODY = "Esta es una notificación de prueba"


def _check_vocabulary(type_: str, priority: str) -> None:
    if type_ not in NOTIFICATION_TYPES:
        raise HTTPException(status_code=400, detail=f"Tipo de notificación no válido: {type_}")
    if priority not in NOTIFICATION_PRIORITIES:
        raise HTTPException(status_code=400, detail=f"Prioridad no válida: {priority}")


# --- Feed ---


@router.get("/workers/{worker_id}/notifications")
def list_worker_notifications(
    worker_id: str,
    db: Session = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = Query(False),
) -> dict[str, Any]:
    """Newest first; expired notifications are not returned. unread_count is for the badge."""
    return notification_service.list_notifications(db, worker_id, limit=limit, unread_only=unread_only)


@router.patch("/notifications/{notification_id}/read")
def mark_notification_read(notification_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    row = notification_service.mark_read(db, notification_id)
    if row is None:
        raise HTTPException(status_code=404, detail=MSG_NOTIFICATION_NOT_FOUND)
    return {"ok": True, "id": row.id, "read_at": row.read_at.isoformat() if row.read_at else None}


@router.post("/workers/{worker_id}/notifications/mark-all-read")
def mark_all_notifications_read(worker_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    updated = notification_service.mark_all_read(db, worker_id)
    return {"ok": True, "updated": updated}


@router.delete("/notifications/{notification_id}")
def delete_notification(notification_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    row = db.query(WorkerNotification).filter(WorkerNotification.id == notification_id).first()
    if not row:
        raise HTTPException(status_code=404, detail=MSG_NOTIFICATION_NOT_FOUND)
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    return {"ok": True, "deleted": notification_id}


# --- Create ---


class CreateNotificationRequest(BaseModel):
    worker_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=2000)
    type: str = Field("system_message", description="One of NOTIFICATION_TYPES")
    priority: str = Field("normal", description="low | normal | high | urgent")
    data: dict[str, Any] = Field(default_factory=dict)
    expires_in_hours: float | None = Field(None, gt=0, description="Hide and prune the notification after this many hours")


@router.post("/notifications", status_code=201)
def create_notification(body: CreateNotificationRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    _check_vocabulary(body.type, body.priority)
    if not db.query(Worker.id).filter(Worker.id == body.worker_id).first():
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)
    expires_at = None
    if body.expires_in_hours:
        expires_at = datetime.now(timezone.utc) + timedelta(hours=body.expires_in_hours)
    row = notification_service.create_and_send_notification(
        db,
        body.worker_id,
        title=body.title,
        body=body.body,
        type=body.type,
        priority=body.priority,
        data=body.data,
        expires_at=expires_at,
    )
    if row is None:
        raise HTTPException(status_code=500, detail="Error al crear la notificación")
    return {"success": True, "notification": serialize_notification(row)}


class TestNotificationRequest(BaseModel):
    workerId: str | None = None
    title: str | None = None
    body: str | None = None
    type: str | None = None


@router.post("/test-notifications", status_code=201)
def send_test_notification(body: TestNotificationRequest, db: Session = Depends(get_db)):
    """Send a test notification to a worker; used from the admin panel to check delivery end to end."""
    if not body.workerId:
        return JSONResponse(status_code=400, content={"error": "workerId es requerido"})
    worker = db.query(Worker).filter(Worker.id == body.workerId).first()
    if not worker:
        return JSONResponse(status_code=404, content={"error": MSG_WORKER_NOT_FOUND})
    type_ = body.type or "system_message"
    if type_ not in NOTIFICATION_TYPES:
        return JSONResponse(status_code=400, content={"error": f"Tipo de notificación no válido: {type_}"})
    row = notification_service.create_and_send_notification(
        db,
        worker.id,
        title=body.title or TEST_NOTIFICATION_TITLE,
        body=body.body or TEST_NOTIFICATION_BODY,
        type=type_,
        data={"test": True},
    )
    if row is None:
        return JSONResponse(status_code=500, content={"error": "Error al crear la notificación de prueba"})
    logger.info("Test notification %s sent to worker %s", row.id, worker.id)
    return {
        "success": True,
        "notification": serialize_notification(row),
        "message": f"Notificación de prueba enviada a {worker.name} {worker.surname}".strip(),
    }
