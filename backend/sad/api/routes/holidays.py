"""Holidays API: list by year/month, manual create/delete, integrity report."""
import calendar
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.errors import MSG_HOLIDAY_NOT_FOUND, db_error_to_http
from sad.db.session import get_db
from sad.models.holiday import Holiday
from sad.services.holidays import HOLIDAY_TYPES, check_missing_holidays, get_holidays_for_year, validate_holidays_integrity

router = APIRouter()


def holiday_dict(h: Holiday) -> dict[str, Any]:
    return {
        "id": h.id,
        "day": h.day,
        "month": h.month,
        "year": h.year,
        "name": h.name,
        "type": h.type,
        "is_active": h.is_active,
    }


class CreateHolidayRequest(BaseModel):
    day: int = Field(..., ge=1, le=31)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    name: str = Field(..., min_length=1, max_length=128)
    type: str = Field("local", description="national | regional | local")

    @model_validator(mode="after")
    def real_date(self):
        if self.day > calendar.monthrange(self.year, self.month)[1]:
            raise ValueError(f"Fecha inválida: {self.day}/{self.month}/{self.year}")
        if self.type not in HOLIDAY_TYPES:
            raise ValueError(f"Tipo de festivo inválido: {self.type}")
        return self


@router.get("/holidays")
def list_holidays(
    db: Session = Depends(get_db),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
) -> dict[str, Any]:
    year = year or date.today().year
    q = db.query(Holiday).filter(Holiday.year == year)
    if month is not None:
        q = q.filter(Holiday.month == month)
    rows = q.order_by(Holiday.month.asc(), Holiday.day.asc()).all()
    return {"holidays": [holiday_dict(h) for h in rows], "count": len(rows)}


@router.post("/holidays", status_code=201)
def create_holiday(body: CreateHolidayRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    row = Holiday(day=body.day, month=body.month, year=body.year, name=body.name.strip(), type=body.type, is_active=True)
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise db_error_to_http(e)
    return holiday_dict(row)


@router.delete("/holidays/{holiday_id}")
def delete_holiday(holiday_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    deleted = db.query(Holiday).filter(Holiday.id == holiday_id).delete(synchronize_session=False)
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail=MSG_HOLIDAY_NOT_FOUND)
    return {"ok": True}


@router.get("/holidays/validate")
def validate_holidays(
    db: Session = Depends(get_db),
    year: int | None = Query(None, ge=2000, le=2100),
) -> dict[str, Any]:
    """Integrity report for the year plus required fixed-date holidays that are missing."""
    year = year or date.today().year
    rows = get_holidays_for_year(db, year)
    result = validate_holidays_integrity(rows, year)
    return {"year": year, **result.to_dict(), "missing": check_missing_holidays(rows)}
