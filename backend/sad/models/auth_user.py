"""Mirror of the identity provider's users (id = auth uid). Kept in sync by worker_auth."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from sad.db.base import Base, UUIDStr


class AuthUser(Base):
    __tablename__ = "auth_users"

    id = Column(UUIDStr, primary_key=True)
    email = Column(String(256), nullable=False, index=True)
    role = Column(String(16), nullable=False, server_default="worker")  # 'worker' | 'admin' | 'super_admin'
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
