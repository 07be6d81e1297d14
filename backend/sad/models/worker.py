"""Care worker (trabajadora). `id` must equal the worker's auth_users.id so RLS `auth.uid() = worker_id` holds."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, String
from sqlalchemy.sql import func

from sad.db.base import Base, UUIDStr


class Worker(Base):
    __tablename__ = "workers"

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(256), nullable=False, unique=True, index=True)
    name = Column(String(128), nullable=False)
    surname = Column(String(128), nullable=False, server_default="")
    phone = Column(String(32), nullable=False, server_default="")
    dni = Column(String(16), nullable=False, server_default="")
    worker_type = Column(String(32), nullable=False, server_default="employee")
    role = Column(String(16), nullable=False, server_default="worker")
    is_active = Column(Boolean, nullable=True, default=True, server_default="true")
    monthly_contracted_hours = Column(Float, nullable=False, server_default="0")
    weekly_contracted_hours = Column(Float, nullable=False, server_default="0")
    address = Column(String(256), nullable=True)
    postal_code = Column(String(16), nullable=True)
    city = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)
