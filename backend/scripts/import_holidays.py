#!/usr/bin/env python3
"""
Download the year's holidays from the city council page, validate them and replace the stored ones.

  python scripts/import_holidays.py 2026
  python scripts/import_holidays.py 2026 --url https://... --dry-run
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import httpx

from sad.db.session import SessionLocal
from sad.services.holidays import import_holidays, scrape_holidays, validate_scraped_holidays


def main():
    parser = argparse.ArgumentParser(description="Import holidays for a year")
    parser.add_argument("year", type=int)
    parser.add_argument("--url", help="Source page (defaults to HOLIDAYS_SOURCE_URL)")
    parser.add_argument("--dry-run", action="store_true", help="Scrape and validate without writing")
    args = parser.parse_args()
    if not 2000 <= args.year <= 2100:
        print("Año no válido:", args.year)
        return 1

    try:
        holidays = scrape_holidays(args.year, args.url)
        validate_scraped_holidays(holidays, args.year)
    except (httpx.HTTPError, ValueError) as e:
        print("ERROR:", e)
        return 1

    for h in holidays:
        print(f"  {h.day:02d}/{h.month:02d}/{h.year}  {h.type:9}  {h.name}")
    if args.dry_run:
        print(f"\nDry run: {len(holidays)} festivos no guardados.")
        return 0

    db = SessionLocal()
    try:
        inserted = import_holidays(db, holidays)
    except Exception as e:
        db.rollback()
        print("ERROR guardando festivos:", e)
        return 1
    finally:
        db.close()
    print(f"\n{inserted} festivos importados para {args.year}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
