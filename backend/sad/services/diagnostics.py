"""Backend diagnostics: configuration presence and a probe query per table."""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.config import settings
from sad.db.tables import DIAGNOSTIC_TABLE_NAMES
from sad.services import push

logger = logging.getLogger(__name__)


def _configured(value: str) -> str:
    return "Configurado" if value else "No configurado"


def probe_table(db: Session, table: str) -> dict[str, Any]:
    """SELECT id ... LIMIT 1 on table; status OK with the sample, or ERROR with the driver message."""
    try:
        rows = db.execute(text(f"SELECT id FROM {table} LIMIT 1")).all()
        return {"status": "OK", "data": [{"id": str(r[0])} for r in rows]}
    except SQLAlchemyError as e:
        db.rollback()
        orig = getattr(e, "orig", None)
        return {
            "status": "ERROR",
            "error": str(orig or e).strip(),
            "code": getattr(orig, "pgcode", None),
        }


def run_diagnostics(db: Session) -> dict[str, Any]:
    results: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supabase": {
            "url": _configured(settings.supabase_url),
            "key": _configured(settings.supabase_anon_key),
            "service_role_key": _configured(settings.supabase_service_role_key),
        },
        "google_maps": _configured(settings.google_maps_api_key),
        "push": {"apns": _configured("yes" if push.is_configured() else "")},
        "tests": {},
    }
    connection = probe_table(db, "workers")
    results["tests"]["connection"] = connection
    for table in DIAGNOSTIC_TABLE_NAMES:
        results["tests"][table] = probe_table(db, table)
    try:
        from sad.services import notification_service

        results["tests"]["notification_service"] = {
            "status": "OK",
            "available": callable(getattr(notification_service, "create_and_send_notification", None)),
        }
    except ImportError as e:
        results["tests"]["notification_service"] = {"status": "ERROR", "error": str(e)}
    failing = [k for k, v in results["tests"].items() if v.get("status") != "OK"]
    results["ok"] = not failing
    if failing:
        logger.warning("Diagnostics: failing checks %s", failing)
    return results
