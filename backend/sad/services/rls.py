"""
Row-level security: inspect and (re)apply the policies each table needs.

Postgres only (pg_policies / pg_class). Policies are declared in DESIRED_POLICIES and applied as
DROP POLICY IF EXISTS + CREATE POLICY so re-running is safe. `auth.uid()` is the platform's
current-user function; worker-scoped tables compare it with worker_id.
"""
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from sad.db.tables import ALL_TABLE_NAMES
from sad.services.supabase import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Policy:
    name: str
    command: str  # SELECT | INSERT | UPDATE | DELETE | ALL
    roles: str  # e.g. "anon, authenticated"
    using: str | None = None
    with_check: str | None = None

    def create_sql(self, table: str) -> str:
        sql = f'CREATE POLICY "{self.name}" ON public.{table} FOR {self.command} TO {self.roles}'
        if self.using:
            sql += f" USING ({self.using})"
        if self.with_check:
            sql += f" WITH CHECK ({self.with_check})"
        return sql

    def drop_sql(self, table: str) -> str:
        return f'DROP POLICY IF EXISTS "{self.name}" ON public.{table}'


_OWN_ROWS = "auth.uid() = worker_id"
_IS_ADMIN = "EXISTS (SELECT 1 FROM public.auth_users a WHERE a.id = auth.uid() AND a.role IN ('admin', 'super_admin'))"

DESIRED_POLICIES: dict[str, tuple[Policy, ...]] = {
    "holidays": (
        Policy("Allow read access to holidays", "SELECT", "anon, authenticated", using="true"),
        Policy("Allow authenticated insert on holidays", "INSERT", "authenticated", with_check="true"),
        Policy("Allow authenticated update on holidays", "UPDATE", "authenticated", using="true", with_check="true"),
        Policy("Allow authenticated delete on holidays", "DELETE", "authenticated", using="true"),
    ),
    "workers": (
        Policy("Authenticated can read workers", "SELECT", "authenticated", using="true"),
        Policy("Admins manage workers", "ALL", "authenticated", using=_IS_ADMIN, with_check=_IS_ADMIN),
    ),
    "worker_notifications": (
        Policy("Workers read own notifications", "SELECT", "authenticated", using=f"{_OWN_ROWS} OR {_IS_ADMIN}"),
        Policy("Workers update own notifications", "UPDATE", "authenticated", using=_OWN_ROWS, with_check=_OWN_ROWS),
        Policy("Admins create notifications", "INSERT", "authenticated", with_check=_IS_ADMIN),
        Policy("Workers delete own notifications", "DELETE", "authenticated", using=f"{_OWN_ROWS} OR {_IS_ADMIN}"),
    ),
    "worker_devices": (
        Policy("Workers manage own devices", "ALL", "authenticated", using=_OWN_ROWS, with_check=_OWN_ROWS),
    ),
    "worker_notification_settings": (
        Policy("Workers manage own notification settings", "ALL", "authenticated", using=_OWN_ROWS, with_check=_OWN_ROWS),
    ),
    "assignments": (
        Policy("Workers read own assignments", "SELECT", "authenticated", using=f"{_OWN_ROWS} OR {_IS_ADMIN}"),
        Policy("Admins manage assignments", "ALL", "authenticated", using=_IS_ADMIN, with_check=_IS_ADMIN),
    ),
}


def _check_table(table: str) -> None:
    if table not in ALL_TABLE_NAMES:
        raise ValueError(f"Unknown table {table!r}; expected one of {', '.join(ALL_TABLE_NAMES)}")


def list_policies(db: Session, table: str) -> list[dict[str, Any]]:
    _check_table(table)
    rows = db.execute(
        text(
            "SELECT policyname, cmd, roles, qual, with_check FROM pg_policies "
            "WHERE schemaname = 'public' AND tablename = :table ORDER BY policyname"
        ),
        {"table": table},
    ).mappings().all()
    return [dict(r) for r in rows]


def rls_enabled(db: Session, table: str) -> bool:
    _check_table(table)
    value = db.execute(
        text(
            "SELECT c.relrowsecurity FROM pg_class c JOIN pg_namespace n ON n.oid = c.relnamespace "
            "WHERE n.nspname = 'public' AND c.relname = :table"
        ),
        {"table": table},
    ).scalar()
    return bool(value)


def policy_statements(table: str) -> list[str]:
    """SQL to enable RLS and (re)create every declared policy for table."""
    _check_table(table)
    statements = [f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY"]
    for policy in DESIRED_POLICIES.get(table, ()):
        statements.append(policy.drop_sql(table))
        statements.append(policy.create_sql(table))
    return statements


def apply_policies(db: Session, table: str, *, dry_run: bool = False) -> list[str]:
    """Run policy_statements in one transaction. Returns the statements (executed unless dry_run)."""
    statements = policy_statements(table)
    if dry_run:
        return statements
    try:
        for sql in statements:
            db.execute(text(sql))
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Applied %s RLS statements on %s", len(statements), table)
    return statements


def missing_policies(db: Session, table: str) -> list[str]:
    """Declared policy names not present in pg_policies."""
    present = {p["policyname"] for p in list_policies(db, table)}
    return [p.name for p in DESIRED_POLICIES.get(table, ()) if p.name not in present]


def compare_client_access(table: str, columns: str = "id", client: SupabaseClient | None = None) -> dict[str, Any]:
    """
    Read table through the REST gateway with the anon key and with the service-role key.
    Diagnoses "endpoint sees no rows": anon blocked by RLS vs. table actually empty.
    """
    client = client or SupabaseClient()
    anon = client.select(table, columns, service_role=False)
    service = client.select(table, columns, service_role=True)
    anon_rows = anon.get("data") or []
    service_rows = service.get("data") or []
    if "error" in service:
        diagnosis = "service_role_error"
    elif not service_rows:
        diagnosis = "table_empty"
    elif "error" in anon:
        diagnosis = "anon_blocked"
    elif not anon_rows:
        diagnosis = "anon_filtered"
    else:
        diagnosis = "anon_allowed"
    return {
        "table": table,
        "anon": {"count": len(anon_rows), "error": anon.get("error")},
        "service_role": {"count": len(service_rows), "error": service.get("error")},
        "diagnosis": diagnosis,
    }
