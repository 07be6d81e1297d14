from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sad.db.session import get_db
from sad.services.diagnostics import run_diagnostics

router = APIRouter()


@router.get("/diagnose")
def diagnose(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Configuration flags and a probe query per table; never raises on a failing table."""
    return run_diagnostics(db)
