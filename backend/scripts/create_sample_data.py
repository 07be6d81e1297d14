#!/usr/bin/env python3
"""
Insert a small demo data set: two workers, three service users, assignments with schedules, a few holidays.
Rows are matched by email/date so the script can be run more than once.

  python scripts/create_sample_data.py
"""
import sys
from datetime import date
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy.exc import SQLAlchemyError

from sad.db.session import SessionLocal
from sad.models import Assignment, Holiday, ServiceUser, Worker

WORKERS = [
    {"email": "rosa.garcia@example.com", "name": "Rosa", "surname": "García", "phone": "600111222",
     "address": "Carrer de la Riera 10", "postal_code": "08301", "city": "Mataró", "monthly_contracted_hours": 120},
    {"email": "laura.martinez@example.com", "name": "Laura", "surname": "Martínez", "phone": "600333444",
     "address": "Avinguda del Maresme 200", "postal_code": "08302", "city": "Mataró", "monthly_contracted_hours": 80},
]

USERS = [
    {"email": "josep.puig@example.com", "name": "Josep", "surname": "Puig", "address": "Carrer Nou 5",
     "postal_code": "08301", "city": "Mataró", "client_code": "U001", "monthly_assigned_hours": 40},
    {"email": "carme.soler@example.com", "name": "Carme", "surname": "Soler", "address": "Plaça de Santa Anna 3",
     "postal_code": "08301", "city": "Mataró", "client_code": "U002", "monthly_assigned_hours": 30},
    {"email": "joan.ferrer@example.com", "name": "Joan", "surname": "Ferrer", "address": "Carrer de Sant Josep 22",
     "postal_code": "08302", "city": "Mataró", "client_code": "U003", "monthly_assigned_hours": 12},
]

_MORNING = {"enabled": True, "timeSlots": [{"start": "09:00", "end": "11:00"}]}
_OFF = {"enabled": False, "timeSlots": []}
WEEKDAY_SCHEDULE = {
    "monday": _MORNING, "tuesday": _MORNING, "wednesday": _MORNING, "thursday": _MORNING, "friday": _MORNING,
    "saturday": _OFF, "sunday": _OFF,
}
HOLIDAY_SCHEDULE = {"holiday": {"enabled": True, "timeSlots": [{"start": "10:00", "end": "11:30"}]}}

# (worker index, user index, assignment_type, schedule, weekly_hours)
ASSIGNMENTS = [
    (0, 0, "laborables", WEEKDAY_SCHEDULE, 10),
    (0, 1, "laborables", WEEKDAY_SCHEDULE, 10),
    (1, 2, "festivos", HOLIDAY_SCHEDULE, 3),
    (1, 0, "festivos", HOLIDAY_SCHEDULE, 3),
]


def _get_or_create(db, model, lookup: dict, values: dict):
    row = db.query(model).filter_by(**lookup).first()
    if row:
        return row, False
    row = model(**lookup, **values)
    db.add(row)
    db.flush()
    return row, True


def main():
    year = date.today().year
    db = SessionLocal()
    try:
        workers = []
        for w in WORKERS:
            row, created = _get_or_create(db, Worker, {"email": w["email"]}, {k: v for k, v in w.items() if k != "email"})
            workers.append(row)
            print(("+ " if created else "= ") + f"worker {row.email}")
        users = []
        for u in USERS:
            row, created = _get_or_create(db, ServiceUser, {"email": u["email"]}, {k: v for k, v in u.items() if k != "email"})
            users.append(row)
            print(("+ " if created else "= ") + f"user {row.email}")
        for wi, ui, assignment_type, schedule, weekly in ASSIGNMENTS:
            _, created = _get_or_create(
                db,
                Assignment,
                {"worker_id": workers[wi].id, "user_id": users[ui].id, "assignment_type": assignment_type},
                {"start_date": date(year, 1, 1), "schedule": schedule, "weekly_hours": weekly, "status": "active"},
            )
            print(("+ " if created else "= ") + f"assignment {workers[wi].name} -> {users[ui].name} ({assignment_type})")
        for day, month, name, type_ in ((1, 1, "Any nou", "national"), (24, 6, "Sant Joan", "regional"),
                                        (27, 7, "Festa major de Les Santes", "local")):
            _get_or_create(db, Holiday, {"year": year, "month": month, "day": day}, {"name": name, "type": type_})
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        print("ERROR:", e)
        return 1
    finally:
        db.close()
    print("\nSample data ready.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
