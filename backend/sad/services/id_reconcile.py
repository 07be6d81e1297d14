"""
Reconcile workers.id with auth_users.id.

Workers created before their login account carry a random id; the auth account for the same email
has another. RLS policies compare auth.uid() with worker_id, so the worker row and every row that
references it are moved to the auth id. Each worker is migrated in its own transaction:
  1. insert a copy of the worker under the auth id (email made unique temporarily),
  2. repoint worker_id in WORKER_REFERENCING_TABLES,
  3. delete the old worker row and restore the email.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.db.tables import WORKER_REFERENCING_TABLES
from sad.models.auth_user import AuthUser
from sad.models.worker import Worker

logger = logging.getLogger(__name__)

_COPY_COLUMNS = (
    "name",
    "surname",
    "phone",
    "dni",
    "worker_type",
    "role",
    "is_active",
    "monthly_contracted_hours",
    "weekly_contracted_hours",
    "address",
    "postal_code",
    "city",
    "created_at",
)


@dataclass
class IdMapping:
    worker_id: str
    auth_id: str
    email: str
    name: str
    surname: str


@dataclass
class ReconcileReport:
    mapping: IdMapping
    ok: bool
    moved: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def build_id_mapping(db: Session) -> list[IdMapping]:
    """Workers whose email matches an auth user with a different id."""
    email_to_auth = {_normalize_email(a.email): a.id for a in db.query(AuthUser.id, AuthUser.email).all()}
    mapping: list[IdMapping] = []
    for w in db.query(Worker).order_by(Worker.email.asc()).all():
        auth_id = email_to_auth.get(_normalize_email(w.email))
        if auth_id and str(auth_id) != str(w.id):
            mapping.append(IdMapping(worker_id=str(w.id), auth_id=str(auth_id), email=w.email, name=w.name, surname=w.surname))
    return mapping


def orphan_workers(db: Session) -> list[Worker]:
    """Workers with no auth account for their email (cannot be reconciled automatically)."""
    emails = {_normalize_email(a.email) for a in db.query(AuthUser.email).all()}
    return [w for w in db.query(Worker).all() if _normalize_email(w.email) not in emails]


def _reconcile_one(db: Session, item: IdMapping) -> dict[str, int]:
    old = db.query(Worker).filter(Worker.id == item.worker_id).one()
    existing = db.query(Worker).filter(Worker.id == item.auth_id).first()
    if existing is None:
        old.email = f"{item.email}.migrating-{item.worker_id[:8]}"
        db.flush()
        copy = Worker(id=item.auth_id, email=item.email, **{c: getattr(old, c) for c in _COPY_COLUMNS})
        db.add(copy)
        db.flush()
    moved: dict[str, int] = {}
    for table in WORKER_REFERENCING_TABLES:
        result = db.execute(
            text(f"UPDATE {table} SET worker_id = :new_id WHERE worker_id = :old_id"),
            {"new_id": item.auth_id, "old_id": item.worker_id},
        )
        moved[table] = result.rowcount
    db.delete(old)
    db.flush()
    if existing is not None and _normalize_email(existing.email) != _normalize_email(item.email):
        existing.email = item.email
    return moved


def reconcile_worker_ids(db: Session, mapping: list[IdMapping], *, dry_run: bool = False) -> list[ReconcileReport]:
    """Move each mapped worker to its auth id. Failures roll back that worker only and are reported."""
    reports: list[ReconcileReport] = []
    for item in mapping:
        if dry_run:
            reports.append(ReconcileReport(mapping=item, ok=True))
            continue
        try:
            moved = _reconcile_one(db, item)
            db.commit()
            logger.info("Worker %s moved %s -> %s (%s)", item.email, item.worker_id, item.auth_id, moved)
            reports.append(ReconcileReport(mapping=item, ok=True, moved=moved))
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("Worker %s reconcile failed: %s", item.email, e)
            reports.append(ReconcileReport(mapping=item, ok=False, error=str(e)))
    return reports
