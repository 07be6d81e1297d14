#!/usr/bin/env python3
"""
Create or update the login account of a worker and register it in auth_users.
With --all, every worker without an auth account gets one with the given password.

  python scripts/ensure_worker_auth.py worker@example.com "Maria" Pass123
  python scripts/ensure_worker_auth.py --all --password Pass123
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.db.session import SessionLocal
from sad.services.id_reconcile import orphan_workers
from sad.services.supabase import SupabaseConfig
from sad.services.worker_auth import ensure_worker_auth_account


def main():
    parser = argparse.ArgumentParser(description="Ensure worker login accounts")
    parser.add_argument("email", nargs="?")
    parser.add_argument("name", nargs="?", default="")
    parser.add_argument("password", nargs="?")
    parser.add_argument("--all", action="store_true", help="Every worker without an auth account")
    parser.add_argument("--password", dest="all_password", help="Password used with --all")
    args = parser.parse_args()
    if not SupabaseConfig().is_configured():
        print("Faltan SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY en backend/.env")
        return 1

    db = SessionLocal()
    try:
        if args.all:
            if not args.all_password:
                parser.error("--all requires --password")
            targets = [(w.email, f"{w.name} {w.surname}".strip()) for w in orphan_workers(db)]
            password = args.all_password
        else:
            if not args.email or not args.password:
                parser.error("email and password are required")
            targets = [(args.email, args.name)]
            password = args.password
        failed = 0
        for email, name in targets:
            result = ensure_worker_auth_account(db, email, name, password)
            print(f"{'OK  ' if result.success else 'FAIL'} {email}: {result.message} {result.auth_user_id or ''}")
            failed += not result.success
    finally:
        db.close()
    if targets:
        print("\nRun scripts/reconcile_worker_ids.py so workers.id matches the new auth ids.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
