"""Service user (usuario): the person receiving home care. Table name is `users`."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, String
from sqlalchemy.sql import func

from sad.db.base import Base, JSONDict, UUIDStr


class ServiceUser(Base):
    __tablename__ = "users"

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(256), nullable=False, server_default="")
    name = Column(String(128), nullable=False)
    surname = Column(String(128), nullable=False, server_default="")
    phone = Column(String(32), nullable=False, server_default="")
    address = Column(String(256), nullable=False, server_default="")
    postal_code = Column(String(16), nullable=False, server_default="")
    city = Column(String(128), nullable=False, server_default="")
    client_code = Column(String(32), nullable=False, server_default="")
    monthly_assigned_hours = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=True, default=True, server_default="true")
    medical_conditions = Column(JSONDict, nullable=True)  # list of strings
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)
