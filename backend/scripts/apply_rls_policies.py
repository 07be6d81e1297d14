#!/usr/bin/env python3
"""
Enable row-level security and (re)create the declared policies.

  python scripts/apply_rls_policies.py --dry-run          # print SQL for every table
  python scripts/apply_rls_policies.py --table holidays
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy.exc import SQLAlchemyError

from sad.db.session import SessionLocal
from sad.services.rls import DESIRED_POLICIES, apply_policies


def main():
    parser = argparse.ArgumentParser(description="Apply RLS policies")
    parser.add_argument("--table", choices=sorted(DESIRED_POLICIES), help="Only this table")
    parser.add_argument("--dry-run", action="store_true", help="Print the SQL without executing it")
    args = parser.parse_args()
    tables = [args.table] if args.table else sorted(DESIRED_POLICIES)

    db = SessionLocal()
    failed = 0
    try:
        for table in tables:
            try:
                statements = apply_policies(db, table, dry_run=args.dry_run)
            except SQLAlchemyError as e:
                failed += 1
                print(f"FAIL {table}: {e}")
                continue
            print(f"{'SQL' if args.dry_run else 'OK '} {table}")
            for sql in statements:
                print(f"    {sql};")
    finally:
        db.close()
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
