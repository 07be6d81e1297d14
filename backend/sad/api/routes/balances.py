"""Monthly hour balances: per user, per worker's users, and totals by assignment type."""
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from sad.core.errors import MSG_USER_NOT_FOUND, MSG_WORKER_NOT_FOUND
from sad.db.session import get_db
from sad.models.assignment import Assignment
from sad.models.worker import Worker
from sad.services.balances import compute_user_monthly_balance, compute_worker_users_monthly_balances, get_all_user_calculations

router = APIRouter()


def _year_month(year: int | None, month: int | None) -> tuple[int, int]:
    today = date.today()
    return year or today.year, month or today.month


@router.get("/balances/users")
def users_totals(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Totals of active assignments per user, split by assignment type."""
    assignments = db.query(Assignment).filter(Assignment.status == "active").all()
    calculations = get_all_user_calculations(assignments)
    return {"users": calculations, "count": len(calculations)}


@router.get("/balances/users/{user_id}")
def user_balance(
    user_id: str,
    db: Session = Depends(get_db),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
) -> dict[str, Any]:
    year, month = _year_month(year, month)
    balance = compute_user_monthly_balance(db, user_id, year, month)
    if balance is None:
        raise HTTPException(status_code=404, detail=MSG_USER_NOT_FOUND)
    return balance.to_dict()


@router.get("/balances/workers/{worker_id}")
def worker_users_balances(
    worker_id: str,
    db: Session = Depends(get_db),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
) -> dict[str, Any]:
    year, month = _year_month(year, month)
    if not db.query(Worker.id).filter(Worker.id == worker_id).first():
        raise HTTPException(status_code=404, detail=MSG_WORKER_NOT_FOUND)
    rows = compute_worker_users_monthly_balances(db, worker_id, year, month)
    return {"worker_id": worker_id, "year": year, "month": month, "users": [r.to_dict() for r in rows]}
