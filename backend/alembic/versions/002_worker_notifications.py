"""Worker notifications, registered devices and per-worker notification settings.

- worker_notifications: read_at NULL = unread; expires_at NULL = never expires.
  Index supports "my recent notifications" and "my unread count".
- worker_devices: one row per (worker_id, device_id); push_token refreshed on app launch.
- worker_notification_settings: one row per worker; quiet hours as "HH:MM" local time.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_SETTINGS_SWITCHES = (
    "push_enabled",
    "sound_enabled",
    "vibration_enabled",
    "new_user_notifications",
    "schedule_change_notifications",
    "assignment_change_notifications",
    "route_update_notifications",
    "reminder_notifications",
    "urgent_notifications",
    "holiday_update_notifications",
    "system_notifications",
)


def upgrade() -> None:
    op.create_table(
        "worker_notifications",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("worker_id", UUID(as_uuid=False), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False, server_default="system_message"),
        sa.Column("data", JSONB, nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("priority", sa.String(16), nullable=False, server_default="normal"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_worker_notifications_worker_id", "worker_notifications", ["worker_id"], unique=False)
    op.create_index("ix_worker_notifications_type", "worker_notifications", ["type"], unique=False)
    op.create_index(
        "ix_worker_notifications_worker_read_sent",
        "worker_notifications",
        ["worker_id", "read_at", "sent_at"],
        unique=False,
        postgresql_ops={"sent_at": "DESC"},
    )

    op.create_table(
        "worker_devices",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("worker_id", UUID(as_uuid=False), nullable=False),
        sa.Column("device_id", sa.String(128), nullable=False),
        sa.Column("device_name", sa.String(128), nullable=True),
        sa.Column("platform", sa.String(16), nullable=False),
        sa.Column("app_version", sa.String(32), nullable=True),
        sa.Column("os_version", sa.String(32), nullable=True),
        sa.Column("push_token", sa.String(512), nullable=True),
        sa.Column("authorized", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("last_used", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("worker_id", "device_id", name="uq_worker_devices_worker_device"),
    )
    op.create_index("ix_worker_devices_worker_id", "worker_devices", ["worker_id"], unique=False)

    op.create_table(
        "worker_notification_settings",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("worker_id", UUID(as_uuid=False), nullable=False),
        *[sa.Column(name, sa.Boolean(), nullable=False, server_default="true") for name in _SETTINGS_SWITCHES],
        sa.Column("quiet_hours_start", sa.String(5), nullable=True),
        sa.Column("quiet_hours_end", sa.String(5), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("worker_id"),
    )


def downgrade() -> None:
    op.drop_table("worker_notification_settings")
    op.drop_index("ix_worker_devices_worker_id", table_name="worker_devices")
    op.drop_table("worker_devices")
    op.drop_index("ix_worker_notifications_worker_read_sent", table_name="worker_notifications")
    op.drop_index("ix_worker_notifications_type", table_name="worker_notifications")
    op.drop_index("ix_worker_notifications_worker_id", table_name="worker_notifications")
    op.drop_table("worker_notifications")
