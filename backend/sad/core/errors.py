"""
Centralized error handling for database failures.
Constants and a reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_CONFLICT = 409  # unique / foreign key violation
STATUS_SERVICE_UNAVAILABLE = 503  # database unreachable
STATUS_INTERNAL_ERROR = 500

MSG_WORKER_NOT_FOUND = "Trabajadora no encontrada"
MSG_NOTIFICATION_NOT_FOUND = "Notificación no encontrada"
MSG_ASSIGNMENT_NOT_FOUND = "Asignación no encontrada"
MSG_USER_NOT_FOUND = "Usuario no encontrado"
MSG_HOLIDAY_NOT_FOUND = "Festivo no encontrado"
MSG_DEVICE_NOT_FOUND = "Dispositivo no encontrado"
MSG_DB_UNAVAILABLE = "Base de datos no disponible. Revisa DATABASE_URL y la conexión."


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code, detail builder)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

def _integrity_detail(exc: Exception) -> str:
    orig = getattr(exc, "orig", None)
    return f"Conflicto de datos: {orig or exc}"


# List of (predicate, status_code, detail). First match wins.
DB_ERROR_RULES: list[tuple[Callable[[Exception], bool], int, Callable[[Exception], str]]] = [
    (lambda e: isinstance(e, IntegrityError), STATUS_CONFLICT, _integrity_detail),
    (lambda e: isinstance(e, OperationalError), STATUS_SERVICE_UNAVAILABLE, lambda e: MSG_DB_UNAVAILABLE),
]


def db_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception raised while talking to the database into an HTTPException.
    Uses DB_ERROR_RULES for known error types; otherwise returns 500 with the raw exception message.
    """
    for predicate, status_code, detail in DB_ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_code, detail=detail(exc))
    if isinstance(exc, SQLAlchemyError):
        return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc.__cause__ or exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
