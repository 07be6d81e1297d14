#!/usr/bin/env python3
"""
Print the diagnostics report (same as GET /api/diagnose): configuration flags and a probe per table.

  python scripts/diagnose_db.py
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.db.session import SessionLocal
from sad.services.diagnostics import run_diagnostics


def main():
    db = SessionLocal()
    try:
        report = run_diagnostics(db)
    finally:
        db.close()
    print(f"Diagnóstico {report['timestamp']}\n")
    print("Supabase:")
    for key, value in report["supabase"].items():
        print(f"  {key:18} {value}")
    print(f"Google Maps:         {report['google_maps']}")
    print(f"Push (APNs):         {report['push']['apns']}")
    print("\nTablas:")
    for name, result in report["tests"].items():
        if result.get("status") == "OK":
            print(f"  OK    {name}")
        else:
            code = f" [{result['code']}]" if result.get("code") else ""
            print(f"  ERROR {name}{code}: {result.get('error')}")
    print("\nResultado:", "OK" if report["ok"] else "con errores")
    return 0 if report["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
