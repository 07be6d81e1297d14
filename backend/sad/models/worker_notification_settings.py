"""Per-worker delivery preferences. Stored notifications are never filtered; only push delivery is."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func

from sad.db.base import Base, UUIDStr


class WorkerNotificationSettings(Base):
    __tablename__ = "worker_notification_settings"

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    worker_id = Column(UUIDStr, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, unique=True)
    push_enabled = Column(Boolean, nullable=False, default=True, server_default="true")
    sound_enabled = Column(Boolean, nullable=False, default=True, server_default="true")
    vibration_enabled = Column(Boolean, nullable=False, default=True, server_default="true")
    new_user_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    schedule_change_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    assignment_change_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    route_update_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    reminder_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    urgent_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    holiday_update_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    system_notifications = Column(Boolean, nullable=False, default=True, server_default="true")
    quiet_hours_start = Column(String(5), nullable=True)  # "HH:MM" local time
    quiet_hours_end = Column(String(5), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
