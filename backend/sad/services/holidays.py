"""
Holiday calendar: scrape the city council's table of local holidays, validate, import, and query.

Scraped dates look like "1 de gener" / "15 d'agost" (Catalan month names).
Type is inferred from the name: national list, local (city) list, anything else regional.
"""
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx
from bs4 import BeautifulSoup
from sqlalchemy.orm import Session

from sad.config import settings
from sad.models.holiday import Holiday

logger = logging.getLogger(__name__)

HOLIDAY_TYPES = ("national", "regional", "local")

NATIONAL_HOLIDAYS = (
    "Cap d'Any",
    "Reis",
    "Divendres Sant",
    "Dilluns de Pasqua Florida",
    "Festa del Treball",
    "Sant Joan",
    "L'Assumpció",
    "Diada Nacional de Catalunya",
    "Tots Sants",
    "Dia de la Constitució",
    "La Immaculada",
    "Nadal",
    "Sant Esteve",
)
LOCAL_HOLIDAYS = ("Fira a Mataró", "Festa major de Les Santes")

CATALAN_MONTHS = {
    "gener": 1,
    "febrer": 2,
    "març": 3,
    "abril": 4,
    "maig": 5,
    "juny": 6,
    "juliol": 7,
    "agost": 8,
    "setembre": 9,
    "octubre": 10,
    "novembre": 11,
    "desembre": 12,
}

# (day, month, name, type) expected every year for the service area
EXPECTED_HOLIDAYS = (
    (1, 1, "Cap d'Any", "national"),
    (6, 1, "Reis", "national"),
    (9, 6, "Fira a Mataró", "local"),
    (28, 7, "Festa major de Les Santes", "local"),
    (15, 8, "L'Assumpció", "national"),
    (25, 12, "Nadal", "national"),
)

# Fixed-date holidays that must always be present
REQUIRED_HOLIDAYS = (
    (1, 1, "Cap d'Any"),
    (6, 1, "Reis"),
    (1, 5, "Festa del Treball"),
    (24, 6, "Sant Joan"),
    (15, 8, "L'Assumpció"),
    (11, 9, "Diada Nacional de Catalunya"),
    (25, 12, "Nadal"),
)

_DATE_RE = re.compile(r"(\d{1,2})\s+d(?:e\s+|['’]\s*)([a-zç]+)", re.IGNORECASE)


@dataclass
class HolidayData:
    day: int
    month: int
    year: int
    name: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def determine_holiday_type(name: str) -> str:
    if name in NATIONAL_HOLIDAYS:
        return "national"
    if name in LOCAL_HOLIDAYS:
        return "local"
    return "regional"


def parse_holiday_date(text: str) -> tuple[int, int] | None:
    """(day, month) from "1 de gener" / "15 d'agost"; None when unrecognized."""
    match = _DATE_RE.search(text or "")
    if not match:
        return None
    month = CATALAN_MONTHS.get(match.group(2).lower())
    if not month:
        return None
    return int(match.group(1)), month


def parse_holidays_html(html: str, year: int) -> list[HolidayData]:
    """Rows of the first <table>: date cell, name cell. The header row is skipped."""
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table")
    if table is None:
        raise ValueError("No se encontró la tabla de festivos en la página")
    holidays: list[HolidayData] = []
    for row in table.find_all("tr")[1:]:
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        date_text = cells[0].get_text(strip=True)
        name = cells[1].get_text(strip=True)
        if not date_text or not name:
            continue
        parsed = parse_holiday_date(date_text)
        if parsed is None:
            logger.debug("Skipping unrecognized holiday date %r", date_text)
            continue
        day, month = parsed
        holidays.append(HolidayData(day=day, month=month, year=year, name=name, type=determine_holiday_type(name)))
    return holidays


def scrape_holidays(year: int, url: str | None = None, *, timeout: float = 20.0) -> list[HolidayData]:
    url = url or settings.holidays_source_url
    logger.info("Downloading %s holidays from %s", year, url)
    with httpx.Client(timeout=timeout, follow_redirects=True) as c:
        r = c.get(url)
    r.raise_for_status()
    holidays = parse_holidays_html(r.text, year)
    logger.info("Extracted %s holidays for %s", len(holidays), year)
    return holidays


def validate_scraped_holidays(holidays: list[HolidayData], year: int) -> list[str]:
    """Raise ValueError on unusable data; return warnings for expected holidays that are missing."""
    if not holidays:
        raise ValueError("No se encontraron festivos para validar")
    if any(h.year != year for h in holidays):
        raise ValueError("Algunos festivos no corresponden al año especificado")
    if any(not (1 <= h.day <= 31 and 1 <= h.month <= 12) for h in holidays):
        raise ValueError("Algunos festivos tienen fechas inválidas")
    found = {(h.day, h.month) for h in holidays}
    warnings = [
        f"Festivo esperado no encontrado: {name} ({day}/{month})"
        for day, month, name, _ in EXPECTED_HOLIDAYS
        if (day, month) not in found
    ]
    for w in warnings:
        logger.warning(w)
    return warnings


def import_holidays(db: Session, holidays: list[HolidayData]) -> int:
    """Replace all holidays of the year with the given list. Returns rows inserted."""
    if not holidays:
        return 0
    year = holidays[0].year
    deleted = db.query(Holiday).filter(Holiday.year == year).delete(synchronize_session=False)
    logger.info("Deleted %s existing holidays for %s", deleted, year)
    seen: set[tuple[int, int]] = set()
    for h in holidays:
        if (h.month, h.day) in seen:
            logger.warning("Duplicate holiday %s/%s (%s) skipped", h.day, h.month, h.name)
            continue
        seen.add((h.month, h.day))
        db.add(Holiday(day=h.day, month=h.month, year=h.year, name=h.name, type=h.type, is_active=True))
    db.commit()
    return len(seen)


def get_holidays_for_year(db: Session, year: int) -> list[Holiday]:
    return db.query(Holiday).filter(Holiday.year == year).order_by(Holiday.month.asc(), Holiday.day.asc()).all()


def holiday_days_for_month(db: Session, year: int, month: int) -> set[int]:
    rows = (
        db.query(Holiday.day)
        .filter(Holiday.year == year, Holiday.month == month, Holiday.is_active.is_(True))
        .all()
    )
    return {r.day for r in rows}


def validate_holidays_integrity(holidays: list[Any], year: int) -> ValidationResult:
    """
    Check stored holidays for a year. Accepts Holiday rows or HolidayData.
    Errors: duplicates, invalid type/day/month/year, empty name. Warnings: coverage heuristics.
    """
    summary: dict[str, Any] = {
        "total_holidays": len(holidays),
        "national_holidays": 0,
        "regional_holidays": 0,
        "local_holidays": 0,
        "months_with_holidays": [],
    }
    errors: list[str] = []
    warnings: list[str] = []
    if not holidays:
        errors.append(f"No hay festivos registrados para el año {year}")
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings, summary=summary)

    seen: set[tuple[int, int, int]] = set()
    months: set[int] = set()
    for h in holidays:
        key = (h.year, h.month, h.day)
        if key in seen:
            errors.append(f"Festivo duplicado: {h.name} ({h.day}/{h.month}/{h.year})")
        seen.add(key)
        if h.type in HOLIDAY_TYPES:
            summary[f"{h.type}_holidays"] += 1
        else:
            errors.append(f"Tipo de festivo inválido: {h.type} para {h.name}")
        if not 1 <= h.day <= 31:
            errors.append(f"Día inválido: {h.day} para {h.name}")
        if not 1 <= h.month <= 12:
            errors.append(f"Mes inválido: {h.month} para {h.name}")
        if h.year != year:
            errors.append(f"Año incorrecto: {h.year} para {h.name} (esperado: {year})")
        if not (h.name or "").strip():
            errors.append(f"Nombre de festivo vacío para {h.day}/{h.month}/{h.year}")
        months.add(h.month)
    summary["months_with_holidays"] = sorted(months)

    by_date = {(h.day, h.month): h for h in holidays}
    for day, month, name, expected_type in EXPECTED_HOLIDAYS:
        found = by_date.get((day, month))
        if found is None:
            warnings.append(f"Festivo esperado no encontrado: {name} ({day}/{month})")
        elif found.type != expected_type:
            warnings.append(f"Tipo incorrecto para {name}: esperado {expected_type}, encontrado {found.type}")

    if len(months) < 6:
        warnings.append(f"Pocos meses con festivos: {len(months)} (esperado al menos 6)")
    if summary["national_holidays"] < 8:
        warnings.append(f"Pocos festivos nacionales: {summary['national_holidays']} (esperado al menos 8)")
    if summary["local_holidays"] < 2:
        warnings.append(
            f"Pocos festivos locales: {summary['local_holidays']} (esperado al menos 2: Fira a Mataró y Les Santes)"
        )
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings, summary=summary)


def check_missing_holidays(holidays: list[Any]) -> list[str]:
    """Names (with d/m) of required fixed-date holidays absent from the list."""
    dates = {(h.day, h.month) for h in holidays}
    return [f"{name} ({day}/{month})" for day, month, name in REQUIRED_HOLIDAYS if (day, month) not in dates]
