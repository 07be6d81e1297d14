#!/usr/bin/env python3
"""
Make workers.id equal to the auth user id for the same email, moving every row that references the worker.

  python scripts/reconcile_worker_ids.py --dry-run   # show the mapping only
  python scripts/reconcile_worker_ids.py
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.db.session import SessionLocal
from sad.services.id_reconcile import build_id_mapping, orphan_workers, reconcile_worker_ids


def main():
    parser = argparse.ArgumentParser(description="Reconcile workers.id with auth_users.id by email")
    parser.add_argument("--dry-run", action="store_true", help="Print the mapping without changing anything")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        mapping = build_id_mapping(db)
        orphans = orphan_workers(db)
        if orphans:
            print(f"{len(orphans)} workers without an auth account (create one with scripts/ensure_worker_auth.py):")
            for w in orphans:
                print(f"  - {w.email} ({w.id})")
        if not mapping:
            print("All workers already use their auth id. Nothing to do.")
            return 0
        print(f"{len(mapping)} workers to migrate:")
        for m in mapping:
            print(f"  {m.email:40} {m.worker_id} -> {m.auth_id}")
        reports = reconcile_worker_ids(db, mapping, dry_run=args.dry_run)
    finally:
        db.close()

    if args.dry_run:
        print("\nDry run: no changes made.")
        return 0
    failed = [r for r in reports if not r.ok]
    for r in reports:
        if r.ok:
            moved = ", ".join(f"{t}={n}" for t, n in r.moved.items())
            print(f"OK   {r.mapping.email}: {moved}")
        else:
            print(f"FAIL {r.mapping.email}: {r.error}")
    print(f"\n{len(reports) - len(failed)} migrated, {len(failed)} failed.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
