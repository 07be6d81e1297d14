"""Public holiday (festivo) for the service area. One row per calendar date."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from sad.db.base import Base, UUIDStr


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (UniqueConstraint("year", "month", "day", name="uq_holidays_date"),)

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    day = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    name = Column(String(128), nullable=False)
    type = Column(String(16), nullable=False, server_default="national")  # national | regional | local
    is_active = Column(Boolean, nullable=False, default=True, server_default="true")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)
