#!/usr/bin/env python3
"""
Show row-level security state per table: enabled flag, existing policies, declared policies missing.
With --compare, also read each table through the REST gateway with the anon and service-role keys.

  python scripts/check_rls_policies.py
  python scripts/check_rls_policies.py --table worker_notifications --compare
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy.exc import SQLAlchemyError

from sad.db.session import SessionLocal
from sad.db.tables import ALL_TABLE_NAMES
from sad.services.rls import compare_client_access, list_policies, missing_policies, rls_enabled

_DIAGNOSIS_TEXT = {
    "service_role_error": "la service role no puede leer la tabla (¿existe?)",
    "table_empty": "la tabla está vacía",
    "anon_blocked": "RLS bloquea al cliente anónimo",
    "anon_filtered": "RLS filtra todas las filas para el cliente anónimo",
    "anon_allowed": "el cliente anónimo ve filas",
}


def main():
    parser = argparse.ArgumentParser(description="Inspect RLS policies")
    parser.add_argument("--table", choices=ALL_TABLE_NAMES, help="Only this table")
    parser.add_argument("--compare", action="store_true", help="Compare anon vs service-role access via REST")
    args = parser.parse_args()
    tables = [args.table] if args.table else list(ALL_TABLE_NAMES)

    db = SessionLocal()
    try:
        for table in tables:
            print(f"\n== {table} ==")
            try:
                print("  RLS enabled:", "yes" if rls_enabled(db, table) else "no")
                for p in list_policies(db, table):
                    print(f"  - {p['policyname']} [{p['cmd']}] roles={p['roles']}")
                    if p.get("qual"):
                        print(f"      USING {p['qual']}")
                    if p.get("with_check"):
                        print(f"      WITH CHECK {p['with_check']}")
                missing = missing_policies(db, table)
                if missing:
                    print("  Missing:", ", ".join(missing))
            except SQLAlchemyError as e:
                db.rollback()
                print("  ERROR:", e)
            if args.compare:
                result = compare_client_access(table)
                print(
                    f"  anon={result['anon']['count']} rows, service_role={result['service_role']['count']} rows: "
                    f"{_DIAGNOSIS_TEXT[result['diagnosis']]}"
                )
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
