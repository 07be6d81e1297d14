from sad.db.base import Base
from sad.db.session import get_db, engine, SessionLocal
from sad.db.tables import ALL_TABLE_NAMES, WORKER_REFERENCING_TABLES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES", "WORKER_REFERENCING_TABLES"]
