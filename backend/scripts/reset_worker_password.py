#!/usr/bin/env python3
"""
Set a new password for a worker's login account (service-role key required).

  python scripts/reset_worker_password.py worker@example.com NewPass123
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.services.supabase import SupabaseConfig
from sad.services.worker_auth import reset_worker_password_by_email


def main():
    parser = argparse.ArgumentParser(description="Reset a worker password by email")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args()
    if not SupabaseConfig().is_configured():
        print("Faltan SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY en backend/.env")
        return 1
    result = reset_worker_password_by_email(args.email, args.password)
    print(("OK   " if result.success else "FAIL ") + result.message)
    if result.auth_user_id:
        print("auth user id:", result.auth_user_id)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
