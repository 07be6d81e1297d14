"""Workers API: list, detail, create (with login account) and update."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.errors import MSG_WORKER_NOT_FOUND, db_error_to_http
from sad.db.session import get_db
from sad.models.worker import Worker
from sad.services.supabase import SupabaseConfig
from sad.services.worker_auth import ensure_worker_auth_account

router = APIRouter()
logger = logging.getLogger(__name__)


def worker_summary(w: Worker) -> dict[str, Any]:
    return {"id": w.id, "name": w.name, "surname": w.surname, "email": w.email}


def worker_detail(w: Worker) -> dict[str, Any]:
    return {
        **worker_summary(w),
        "phone": w.phone,
        "dni": w.dni,
        "worker_type": w.worker_type,
        "role": w.role,
        "is_active": w.is_active,
        "monthly_contracted_hours": w.monthly_contracted_hours,
        "weekly_contracted_hours": w.weekly_contracted_hours,
        "address": w.address,
        "postal_code": w.postal_code,
        "city": w.city,
        "created_at": w.created_at.isoformat() if w.created_at else None,
        "updated_at": w.updated_at.isoformat() if w.updated_at else None,
    }


def get_worker_or_404(db: Session, worker_id: str) -> Worker:
    worker = db.query(Worker).filter(Worker.id == worker_id).first()
    if not worker:
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)
    return worker


class WorkerFields(BaseModel):
    phone: str | None = Field(None, max_length=32)
    dni: str | None = Field(None, max_length=16)
    worker_type: str | None = Field(None, max_length=32)
    is_active: bool | None = None
    monthly_contracted_hours: float | None = Field(None, ge=0)
    weekly_contracted_hours: float | None = Field(None, ge=0)
    address: str | None = Field(None, max_length=256)
    postal_code: str | None = Field(None, max_length=16)
    city: str | None = Field(None, max_length=128)


class CreateWorkerRequest(WorkerFields):
    email: str = Field(..., min_length=3, max_length=256)
    name: str = Field(..., min_length=1, max_length=128)
    surname: str = Field("", max_length=128)
    password: str | None = Field(None, description="When set, a login account is created and its id used as worker id")


class UpdateWorkerRequest(WorkerFields):
    email: str | None = Field(None, min_length=3, max_length=256)
    name: str | None = Field(None, min_length=1, max_length=128)
    surname: str | None = Field(None, max_length=128)


@router.get("/workers")
def list_workers(
    db: Session = Depends(get_db),
    limit: int = Query(10, ge=1, le=500),
    active_only: bool = Query(False),
) -> dict[str, Any]:
    """List workers (id, name, surname, email)."""
    try:
        q = db.query(Worker)
        if active_only:
            q = q.filter(Worker.is_active.is_(True))
        workers = q.order_by(Worker.name.asc(), Worker.surname.asc()).limit(limit).all()
    except SQLAlchemyError as e:
        logger.error("Error listing workers: %s", e)
        raise db_error_to_http(e)
    logger.info("GET /api/workers: %s workers", len(workers))
    return {
        "success": True,
        "workers": [worker_summary(w) for w in workers],
        "isTestData": False,
        "count": len(workers),
    }


@router.get("/workers/{worker_id}")
def get_worker(worker_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return worker_detail(get_worker_or_404(db, worker_id))


@router.post("/workers", status_code=201)
def create_worker(body: CreateWorkerRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    """
    Create a worker. With a password and the platform configured, the login account is created
    first and the worker row takes its id, so workers.id == auth_users.id from the start.
    """
    email = body.email.strip().lower()
    if db.query(Worker).filter(Worker.email == email).first():
        raise HTTPException(status_code=409, detail=f"Ya existe una trabajadora con email {email}")
    worker_id = None
    auth_message = None
    if body.password:
        if not SupabaseConfig().is_configured():
            raise HTTPException(status_code=503, detail="Proveedor de identidad no configurado (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
        result = ensure_worker_auth_account(db, email, body.name, body.password)
        if not result.success:
            raise HTTPException(status_code=400, detail=result.message)
        worker_id = result.auth_user_id
        auth_message = result.message
    fields = body.model_dump(exclude={"password", "email"}, exclude_none=True)
    worker = Worker(id=worker_id, email=email, **fields) if worker_id else Worker(email=email, **fields)
    try:
        db.add(worker)
        db.commit()
        db.refresh(worker)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    logger.info("Created worker %s (%s)", worker.id, email)
    return {"success": True, "worker": worker_detail(worker), "auth": auth_message}


@router.patch("/workers/{worker_id}")
def update_worker(worker_id: str, body: UpdateWorkerRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    worker = get_worker_or_404(db, worker_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes and changes["email"]:
        changes["email"] = changes["email"].strip().lower()
    for key, value in changes.items():
        setattr(worker, key, value)
    try:
        db.commit()
        db.refresh(worker)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    return {"success": True, "worker": worker_detail(worker)}
