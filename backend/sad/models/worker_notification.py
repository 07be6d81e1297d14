"""In-app notification for a worker.

read_at: NULL = unread. expires_at: NULL = never; expired rows are hidden from the feed and pruned hourly.
data: JSON payload merged into the push payload (userName, oldTime, newTime, ...).
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.sql import func

from sad.db.base import Base, JSONDict, UUIDStr


class WorkerNotification(Base):
    __tablename__ = "worker_notifications"

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    worker_id = Column(UUIDStr, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(256), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, server_default="system_message", index=True)
    data = Column(JSONDict, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    priority = Column(String(16), nullable=False, server_default="normal")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
