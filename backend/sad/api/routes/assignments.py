"""
Assignments API: which worker serves which user, with what schedule.

Changes notify the worker: new assignment -> new_user, schedule edit -> schedule_change,
cancelled/inactive -> user_removed. Notification failures never fail the request.
"""
import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.constants import REMOVED_ASSIGNMENT_STATUSES
from sad.core.errors import MSG_ASSIGNMENT_NOT_FOUND, MSG_USER_NOT_FOUND, MSG_WORKER_NOT_FOUND, db_error_to_http
from sad.db.session import get_db
from sad.models.assignment import Assignment
from sad.models.service_user import ServiceUser
from sad.models.worker import Worker
from sad.services import notification_service
from sad.services.balances import ASSIGNMENT_TYPES

router = APIRouter()
logger = logging.getLogger(__name__)

ASSIGNMENT_STATUSES = ("active", "inactive", "completed", "cancelled")


def assignment_dict(a: Assignment) -> dict[str, Any]:
    return {
        "id": a.id,
        "user_id": a.user_id,
        "worker_id": a.worker_id,
        "assignment_type": a.assignment_type,
        "start_date": a.start_date.isoformat() if a.start_date else None,
        "end_date": a.end_date.isoformat() if a.end_date else None,
        "status": a.status,
        "weekly_hours": a.weekly_hours,
        "monthly_hours": a.monthly_hours,
        "priority": a.priority,
        "schedule": a.schedule or {},
        "notes": a.notes,
        "user": {"id": a.user.id, "name": a.user.name, "surname": a.user.surname} if a.user else None,
    }


def _user_label(user: ServiceUser | None) -> str:
    if user is None:
        return ""
    return f"{user.name} {user.surname}".strip()


def schedule_summary(schedule: dict[str, Any] | None) -> str:
    """Short text for notifications, e.g. "monday 09:00-11:00, friday 10:00-12:00"."""
    parts = []
    for day, cfg in (schedule or {}).items():
        if not isinstance(cfg, dict) or not cfg.get("enabled"):
            continue
        slots = cfg.get("timeSlots") or []
        ranges = ", ".join(f"{s.get('start')}-{s.get('end')}" for s in slots if isinstance(s, dict))
        parts.append(f"{day} {ranges}".strip())
    return "; ".join(parts) or "sin horario"


class AssignmentFields(BaseModel):
    end_date: date | None = None
    weekly_hours: float | None = Field(None, ge=0)
    monthly_hours: float | None = Field(None, ge=0)
    priority: int | None = Field(None, ge=1, le=3)
    schedule: dict[str, Any] | None = None
    notes: str | None = None


class CreateAssignmentRequest(AssignmentFields):
    user_id: str
    worker_id: str
    assignment_type: str
    start_date: date
    status: str = "active"

    @model_validator(mode="after")
    def check_values(self):
        if self.assignment_type not in ASSIGNMENT_TYPES:
            raise ValueError(f"Tipo de asignación no válido: {self.assignment_type}")
        if self.status not in ASSIGNMENT_STATUSES:
            raise ValueError(f"Estado no válido: {self.status}")
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("La fecha de fin no puede ser anterior a la de inicio")
        return self


class UpdateAssignmentRequest(AssignmentFields):
    worker_id: str | None = None
    assignment_type: str | None = None
    start_date: date | None = None
    status: str | None = None

    @model_validator(mode="after")
    def check_values(self):
        if self.assignment_type is not None and self.assignment_type not in ASSIGNMENT_TYPES:
            raise ValueError(f"Tipo de asignación no válido: {self.assignment_type}")
        if self.status is not None and self.status not in ASSIGNMENT_STATUSES:
            raise ValueError(f"Estado no válido: {self.status}")
        return self


@router.get("/assignments")
def list_assignments(
    db: Session = Depends(get_db),
    worker_id: str | None = Query(None),
    user_id: str | None = Query(None),
    status: str | None = Query(None),
) -> dict[str, Any]:
    q = db.query(Assignment)
    if worker_id:
        q = q.filter(Assignment.worker_id == worker_id)
    if user_id:
        q = q.filter(Assignment.user_id == user_id)
    if status:
        q = q.filter(Assignment.status == status)
    rows = q.order_by(Assignment.start_date.desc()).all()
    return {"assignments": [assignment_dict(a) for a in rows], "count": len(rows)}


@router.post("/assignments", status_code=201)
def create_assignment(body: CreateAssignmentRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    user = db.query(ServiceUser).filter(ServiceUser.id == body.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=MSG_USER_NOT_FOUND)
    if not db.query(Worker.id).filter(Worker.id == body.worker_id).first():
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)
    fields = body.model_dump(exclude_none=True)
    fields.setdefault("schedule", {})
    row = Assignment(**fields)
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    logger.info("Assignment %s created: worker=%s user=%s", row.id, row.worker_id, row.user_id)
    if row.status == "active":
        notification_service.notify_new_user(db, row.worker_id, _user_label(user), user.address or "")
    return assignment_dict(row)


@router.patch("/assignments/{assignment_id}")
def update_assignment(assignment_id: str, body: UpdateAssignmentRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    row = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not row:
        raise HTTPException(status_code=404, detail=MSG_ASSIGNMENT_NOT_FOUND)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("worker_id") and not db.query(Worker.id).filter(Worker.id == changes["worker_id"]).first():
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)
    old_schedule = dict(row.schedule or {})
    old_status = row.status
    old_worker_id = row.worker_id
    for key, value in changes.items():
        if value is None and key not in ("end_date", "monthly_hours", "notes"):
            continue
        setattr(row, key, value)
    if row.end_date and row.end_date < row.start_date:
        db.rollback()
        raise HTTPException(status_code=422, detail="La fecha de fin no puede ser anterior a la de inicio")
    try:
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)

    user_name = _user_label(row.user)
    if row.status in REMOVED_ASSIGNMENT_STATUSES and old_status not in REMOVED_ASSIGNMENT_STATUSES:
        notification_service.notify_user_removed(db, old_worker_id, user_name)
    elif row.worker_id != old_worker_id:
        notification_service.notify_user_removed(db, old_worker_id, user_name)
        notification_service.notify_new_user(db, row.worker_id, user_name, row.user.address if row.user else "")
    elif "schedule" in changes and (row.schedule or {}) != old_schedule:
        notification_service.notify_schedule_change(
            db, row.worker_id, user_name, schedule_summary(old_schedule), schedule_summary(row.schedule)
        )
    return assignment_dict(row)
