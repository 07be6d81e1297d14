#!/usr/bin/env python3
"""
Drop public schema and run all migrations from scratch.
Use when the DB is in a mixed state (e.g. some tables missing, some leftover) and you want a clean slate.
Row-level security policies are dropped with the schema: re-run scripts/apply_rls_policies.py afterwards.

Run from backend dir:
  python scripts/drop_schema_and_migrate.py --yes
"""
import argparse
import subprocess
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy import text

from sad.db.session import engine


def main():
    parser = argparse.ArgumentParser(description="Drop the public schema and migrate to head")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args()
    if not args.yes:
        answer = input("This deletes ALL data in the public schema. Type 'yes' to continue: ")
        if answer.strip().lower() != "yes":
            print("Aborted.")
            return 1
    print("Dropping public schema (all tables)...")
    with engine.connect() as conn:
        conn.execute(text("DROP SCHEMA IF EXISTS public CASCADE"))
        conn.execute(text("CREATE SCHEMA public"))
        conn.execute(text("GRANT ALL ON SCHEMA public TO public"))
        conn.commit()
    print("Schema recreated. Running migrations...")
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
    )
    if result.returncode != 0:
        return result.returncode
    print("Done. All tables created.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
