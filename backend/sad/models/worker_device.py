"""Worker device registered for push. One row per (worker_id, device_id); push_token may be NULL until granted."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.sql import func

from sad.db.base import Base, UUIDStr


class WorkerDevice(Base):
    __tablename__ = "worker_devices"
    __table_args__ = (UniqueConstraint("worker_id", "device_id", name="uq_worker_devices_worker_device"),)

    id = Column(UUIDStr, primary_key=True, default=lambda: str(uuid.uuid4()))
    worker_id = Column(UUIDStr, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(String(128), nullable=False)
    device_name = Column(String(128), nullable=True)
    platform = Column(String(16), nullable=False)  # 'ios' | 'android' | 'web'
    app_version = Column(String(32), nullable=True)
    os_version = Column(String(32), nullable=True)
    push_token = Column(String(512), nullable=True)
    authorized = Column(Boolean, nullable=False, default=True, server_default="true")
    last_used = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
