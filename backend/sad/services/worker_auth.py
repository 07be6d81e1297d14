"""
Worker login accounts on the identity provider.

Every worker signs in with an auth account whose id must equal workers.id; auth_users mirrors
(id, email, role) so SQL and RLS policies can join against it.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sad.core.constants import MIN_PASSWORD_LENGTH
from sad.models.auth_user import AuthUser
from sad.services.supabase import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass
class WorkerAuthResult:
    success: bool
    message: str
    auth_user_id: str | None = None


def _invalid_credentials(email: str, password: str) -> WorkerAuthResult | None:
    if not email or len(password or "") < MIN_PASSWORD_LENGTH:
        return WorkerAuthResult(False, f"Email o contraseña inválidos (mín. {MIN_PASSWORD_LENGTH} caracteres).")
    return None


def upsert_auth_user(db: Session, auth_user_id: str, email: str, role: str = "worker") -> None:
    row = db.query(AuthUser).filter(AuthUser.id == auth_user_id).first()
    if row:
        row.email = email
        row.role = role
    else:
        db.add(AuthUser(id=auth_user_id, email=email, role=role))
    db.commit()


def ensure_worker_auth_account(
    db: Session,
    email: str,
    name: str,
    password: str,
    client: SupabaseClient | None = None,
) -> WorkerAuthResult:
    """
    Create (confirmed) or update the auth account for a worker with role 'worker'.
    Existing accounts get the new password and merged user_metadata. auth_users is upserted.
    """
    email = (email or "").strip()
    name = (name or "").strip()
    invalid = _invalid_credentials(email, password)
    if invalid:
        return invalid
    client = client or SupabaseClient()

    created = client.create_user(email, password, user_metadata={"role": "worker", "name": name})
    auth_user_id = created.get("id") or (created.get("user") or {}).get("id")
    error = created.get("error")

    if error and "already" in str(error).lower():
        found, list_error = client.find_user_by_email(email)
        if list_error:
            return WorkerAuthResult(False, f"Error listando usuarios: {list_error}")
        if found is None:
            return WorkerAuthResult(False, "No se pudo localizar el usuario existente.")
        auth_user_id = found["id"]
        metadata = {**(found.get("user_metadata") or {}), "role": "worker", "name": name}
        updated = client.update_user_by_id(auth_user_id, {"password": password, "user_metadata": metadata})
        if "error" in updated:
            return WorkerAuthResult(False, f"Error actualizando usuario: {updated['error']}")
    elif error:
        return WorkerAuthResult(False, f"Error creando usuario: {error}")

    if not auth_user_id:
        return WorkerAuthResult(False, "No se pudo determinar el ID del usuario.")

    try:
        upsert_auth_user(db, auth_user_id, email)
    except SQLAlchemyError as e:
        db.rollback()
        return WorkerAuthResult(False, f"Error registrando en auth_users: {e}", auth_user_id)
    logger.info("Worker auth account ready for %s (%s)", email, auth_user_id)
    return WorkerAuthResult(True, "Acceso de trabajadora configurado correctamente.", auth_user_id)


def reset_worker_password_by_email(email: str, new_password: str, client: SupabaseClient | None = None) -> WorkerAuthResult:
    email = (email or "").strip()
    invalid = _invalid_credentials(email, new_password)
    if invalid:
        return invalid
    client = client or SupabaseClient()
    found, list_error = client.find_user_by_email(email)
    if list_error:
        return WorkerAuthResult(False, f"Error listando usuarios: {list_error}")
    if found is None:
        return WorkerAuthResult(False, "Usuario no encontrado por email.")
    updated = client.update_user_by_id(found["id"], {"password": new_password})
    if "error" in updated:
        return WorkerAuthResult(False, f"Error actualizando contraseña: {updated['error']}", found["id"])
    return WorkerAuthResult(True, "Contraseña actualizada.", found["id"])
