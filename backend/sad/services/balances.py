"""
Monthly hour balances for service users.

A user's theoretical hours for a month come from every active assignment overlapping the month,
whichever worker holds it: laborables assignments contribute their weekday hours on working days,
festivos assignments contribute their holiday hours on weekends and holidays. The balance is
theoretical - assigned (users.monthly_assigned_hours); >0 means excess, <0 means shortfall.
"""
import calendar
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from sad.models.assignment import Assignment
from sad.models.service_user import ServiceUser
from sad.services.holidays import holiday_days_for_month

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
ASSIGNMENT_TYPES = ("laborables", "festivos", "flexible", "completa", "personalizada")

# Average weeks per month, used when an assignment only stores weekly hours
WEEKS_PER_MONTH = 52 / 12


@dataclass
class ParsedSchedule:
    weekday_hours: dict[str, float] = field(default_factory=lambda: {d: 0.0 for d in WEEKDAYS})
    holiday_hours_per_day: float = 0.0


@dataclass
class UserMonthlyBalance:
    user_id: str
    year: int
    month: int
    assigned_monthly_hours: float
    theoretical_monthly_hours: float
    difference: float
    laborables_monthly_hours: float = 0.0
    holidays_monthly_hours: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WorkerUserBalanceRow:
    user_id: str
    user_name: str
    user_surname: str
    assigned_monthly_hours: float
    laborables_hours: float
    holidays_hours: float
    total_hours: float
    difference: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def month_date_range(year: int, month: int) -> tuple[date, date, int]:
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month), days_in_month


def hours_from_time_range(start: str, end: str) -> float:
    """
    Hours between two "HH:MM" times. An end earlier than start is taken as the next day
    ("23:00"-"01:00" -> 2.0). Invalid input returns 0.
    """
    if not isinstance(start, str) or not isinstance(end, str) or not start or not end:
        return 0.0
    try:
        start_h, start_m = (int(p) for p in start.split(":")[:2])
        end_h, end_m = (int(p) for p in end.split(":")[:2])
    except ValueError:
        return 0.0
    diff = (end_h * 60 + end_m) - (start_h * 60 + start_m)
    if diff < 0:
        diff += 24 * 60
    return diff / 60 if diff > 0 else 0.0


def _slot_hours(slot: Any) -> float:
    if not isinstance(slot, dict):
        return 0.0
    hours = slot.get("hours")
    if isinstance(hours, (int, float)) and not isinstance(hours, bool) and hours:
        return float(hours)
    if slot.get("start") and slot.get("end"):
        return hours_from_time_range(slot["start"], slot["end"])
    logger.debug("Slot without hours or start/end: %s", slot)
    return 0.0


def parse_assignment_schedule(schedule: Any) -> ParsedSchedule:
    """
    Normalize an assignment schedule (dict or JSON string) into hours per weekday and per holiday.

    Supported shapes, applied in order (later ones override):
      {"monday": {"enabled": true, "timeSlots": [{"start": "09:00", "end": "11:00"}]}, ...}
      {"holiday": {"enabled": true, "timeSlots": [...]}}
      {"holiday_config": {"has_holiday_service": true, "holiday_timeSlots": [...]}}
      {"weekdayHours": {"monday": 2, ...}, "holidayHoursPerDay": 3}   (legacy)
    """
    result = ParsedSchedule()
    if schedule is None:
        return result
    parsed = schedule
    if isinstance(schedule, str):
        try:
            parsed = json.loads(schedule)
        except ValueError:
            logger.warning("Unparseable assignment schedule: %.80s", schedule)
            return result
    if not isinstance(parsed, dict):
        return result

    for day in WEEKDAYS:
        day_data = parsed.get(day)
        if isinstance(day_data, dict) and day_data.get("enabled") and isinstance(day_data.get("timeSlots"), list):
            result.weekday_hours[day] = sum(_slot_hours(s) for s in day_data["timeSlots"])

    holiday = parsed.get("holiday")
    if isinstance(holiday, dict) and holiday.get("enabled") and isinstance(holiday.get("timeSlots"), list):
        result.holiday_hours_per_day += sum(_slot_hours(s) for s in holiday["timeSlots"])

    holiday_config = parsed.get("holiday_config")
    if (
        isinstance(holiday_config, dict)
        and holiday_config.get("has_holiday_service")
        and isinstance(holiday_config.get("holiday_timeSlots"), list)
    ):
        result.holiday_hours_per_day += sum(_slot_hours(s) for s in holiday_config["holiday_timeSlots"])

    legacy = parsed.get("weekdayHours")
    if isinstance(legacy, dict):
        for day in WEEKDAYS:
            value = legacy.get(day)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                result.weekday_hours[day] = float(value)
    legacy_holiday = parsed.get("holidayHoursPerDay")
    if isinstance(legacy_holiday, (int, float)) and not isinstance(legacy_holiday, bool) and legacy_holiday:
        result.holiday_hours_per_day = float(legacy_holiday)

    return result


def _active_assignments_in_month(db: Session, year: int, month: int):
    start, end, _ = month_date_range(year, month)
    return db.query(Assignment).filter(
        Assignment.status == "active",
        Assignment.start_date <= end,
        or_(Assignment.end_date.is_(None), Assignment.end_date >= start),
    )


def monthly_hours_for_assignments(
    assignments: list[Assignment],
    year: int,
    month: int,
    holiday_days: set[int],
) -> tuple[float, float]:
    """(laborables_hours, holidays_hours) for the month. Weekends count as holiday context."""
    _, _, days_in_month = month_date_range(year, month)
    schedules = [(a.assignment_type, parse_assignment_schedule(a.schedule)) for a in assignments]
    laborables = 0.0
    holidays = 0.0
    for day in range(1, days_in_month + 1):
        weekday = date(year, month, day).weekday()  # 0=monday
        holiday_context = weekday >= 5 or day in holiday_days
        for assignment_type, parsed in schedules:
            if assignment_type == "laborables" and not holiday_context:
                laborables += parsed.weekday_hours[WEEKDAYS[weekday]]
            elif assignment_type == "festivos" and holiday_context:
                holidays += parsed.holiday_hours_per_day
    return laborables, holidays


def compute_user_monthly_balance(db: Session, user_id: str, year: int, month: int) -> UserMonthlyBalance | None:
    """Balance for one user summing all of their workers. None when the user does not exist."""
    user = db.query(ServiceUser).filter(ServiceUser.id == user_id).first()
    if user is None:
        return None
    assigned = float(user.monthly_assigned_hours or 0)
    assignments = _active_assignments_in_month(db, year, month).filter(Assignment.user_id == user_id).all()
    holiday_days = holiday_days_for_month(db, year, month)
    laborables, holidays = monthly_hours_for_assignments(assignments, year, month, holiday_days)
    theoretical = laborables + holidays
    logger.debug(
        "Balance user=%s %s-%02d: %s assignments, laborables=%s festivos=%s assigned=%s",
        user_id, year, month, len(assignments), laborables, holidays, assigned,
    )
    return UserMonthlyBalance(
        user_id=user_id,
        year=year,
        month=month,
        assigned_monthly_hours=assigned,
        theoretical_monthly_hours=theoretical,
        difference=theoretical - assigned,
        laborables_monthly_hours=laborables,
        holidays_monthly_hours=holidays,
    )


def compute_worker_users_monthly_balances(db: Session, worker_id: str, year: int, month: int) -> list[WorkerUserBalanceRow]:
    """One row per user the worker serves in the month; each balance includes the user's other workers."""
    rows = _active_assignments_in_month(db, year, month).filter(Assignment.worker_id == worker_id).all()
    users: dict[str, ServiceUser] = {}
    for a in rows:
        if a.user_id not in users and a.user is not None:
            users[a.user_id] = a.user
    out: list[WorkerUserBalanceRow] = []
    for user_id, user in users.items():
        balance = compute_user_monthly_balance(db, user_id, year, month)
        if balance is None:
            logger.warning("Could not compute balance for user %s", user_id)
            continue
        out.append(
            WorkerUserBalanceRow(
                user_id=user_id,
                user_name=user.name or "",
                user_surname=user.surname or "",
                assigned_monthly_hours=balance.assigned_monthly_hours,
                laborables_hours=balance.laborables_monthly_hours,
                holidays_hours=balance.holidays_monthly_hours,
                total_hours=balance.theoretical_monthly_hours,
                difference=balance.difference,
            )
        )
    out.sort(key=lambda r: f"{r.user_name} {r.user_surname}".lower())
    return out


# --- Totals per assignment type (users overview) ---


def assignment_monthly_hours(assignment: Assignment) -> float:
    if assignment.monthly_hours is not None:
        return float(assignment.monthly_hours)
    return round(float(assignment.weekly_hours or 0) * WEEKS_PER_MONTH, 2)


def calculate_user_total_hours(assignments: list[Assignment], user_id: str) -> dict[str, Any] | None:
    """Totals for a user's active assignments, split by assignment type. None if the user has none."""
    user_assignments = [a for a in assignments if a.user_id == user_id and a.status == "active"]
    if not user_assignments:
        return None
    details = {f"{t}_hours": 0.0 for t in ASSIGNMENT_TYPES}
    for a in user_assignments:
        key = f"{a.assignment_type}_hours"
        if key in details:
            details[key] += assignment_monthly_hours(a)
    first = user_assignments[0]
    return {
        "user_id": user_id,
        "user_name": first.user.name if first.user else "",
        "user_surname": first.user.surname if first.user else "",
        "total_assigned_hours": sum(assignment_monthly_hours(a) for a in user_assignments),
        "total_workers": len(user_assignments),
        "assignment_ids": [a.id for a in user_assignments],
        "calculation_details": details,
    }


def get_all_user_calculations(assignments: list[Assignment]) -> list[dict[str, Any]]:
    seen: list[str] = []
    for a in assignments:
        if a.user_id not in seen:
            seen.append(a.user_id)
    return [c for c in (calculate_user_total_hours(assignments, uid) for uid in seen) if c is not None]
