"""Worker-to-user service assignment.

assignment_type: laborables (weekdays) | festivos (weekends + holidays) | flexible | completa | personalizada.
schedule: JSON; per weekday {"enabled": bool, "timeSlots": [{"start": "09:00", "end": "11:00"}]},
plus "holiday" / "holiday_config" blocks for festivos. See services.balances.parse_assignment_schedule.
"""
import uuid

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from sad.db.base import Base, JSONDict, UUIDStr


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(UUIDStr, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    worker_id = Column(UUIDStr, ForeignKey("workers.id"), nullable=False, index=True)
    assignment_type = Column(String(32), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String(16), nullable=False, server_default="active", index=True)
    weekly_hours = Column(Float, nullable=False, server_default="0")
    monthly_hours = Column(Float, nullable=True)
    priority = Column(Integer, nullable=False, server_default="2")
    schedule = Column(JSONDict, nullable=False, default=dict)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    user = relationship("ServiceUser", lazy="joined")
