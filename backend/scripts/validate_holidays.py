#!/usr/bin/env python3
"""
Check stored holidays for a year.

  python scripts/validate_holidays.py 2026            # integrity report
  python scripts/validate_holidays.py 2026 missing    # required holidays not stored
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.db.session import SessionLocal
from sad.services.holidays import check_missing_holidays, get_holidays_for_year, validate_holidays_integrity


def main():
    parser = argparse.ArgumentParser(description="Validate stored holidays")
    parser.add_argument("year", type=int)
    parser.add_argument("command", nargs="?", choices=("validate", "missing"), default="validate")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        holidays = get_holidays_for_year(db, args.year)
    finally:
        db.close()

    if args.command == "missing":
        missing = check_missing_holidays(holidays)
        if not missing:
            print(f"Todos los festivos obligatorios de {args.year} están registrados.")
            return 0
        print(f"Festivos obligatorios que faltan en {args.year}:")
        for name in missing:
            print("  -", name)
        return 1

    result = validate_holidays_integrity(holidays, args.year)
    summary = result.summary
    print(f"Festivos {args.year}: {summary['total_holidays']} "
          f"(nacionales {summary['national_holidays']}, regionales {summary['regional_holidays']}, "
          f"locales {summary['local_holidays']})")
    print("Meses con festivos:", ", ".join(str(m) for m in summary["months_with_holidays"]) or "-")
    for e in result.errors:
        print("ERROR  ", e)
    for w in result.warnings:
        print("AVISO  ", w)
    print("\nVálido" if result.is_valid else "\nNo válido")
    return 0 if result.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
