"""Initial schema: workers, auth_users mirror, service users, assignments.

workers.id is meant to equal auth_users.id (the identity provider uid) so row-level
security can compare auth.uid() with worker_id directly.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "workers",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("surname", sa.String(128), nullable=False, server_default=""),
        sa.Column("phone", sa.String(32), nullable=False, server_default=""),
        sa.Column("dni", sa.String(16), nullable=False, server_default=""),
        sa.Column("worker_type", sa.String(32), nullable=False, server_default="employee"),
        sa.Column("role", sa.String(16), nullable=False, server_default="worker"),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default="true"),
        sa.Column("monthly_contracted_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("weekly_contracted_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("address", sa.String(256), nullable=True),
        sa.Column("postal_code", sa.String(16), nullable=True),
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workers_email", "workers", ["email"], unique=True)

    op.create_table(
        "auth_users",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="worker"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_auth_users_email", "auth_users", ["email"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("email", sa.String(256), nullable=False, server_default=""),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("surname", sa.String(128), nullable=False, server_default=""),
        sa.Column("phone", sa.String(32), nullable=False, server_default=""),
        sa.Column("address", sa.String(256), nullable=False, server_default=""),
        sa.Column("postal_code", sa.String(16), nullable=False, server_default=""),
        sa.Column("city", sa.String(128), nullable=False, server_default=""),
        sa.Column("client_code", sa.String(32), nullable=False, server_default=""),
        sa.Column("monthly_assigned_hours", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default="true"),
        sa.Column("medical_conditions", JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "assignments",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("user_id", UUID(as_uuid=False), nullable=False),
        sa.Column("worker_id", UUID(as_uuid=False), nullable=False),
        sa.Column("assignment_type", sa.String(32), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("weekly_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("monthly_hours", sa.Float(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("schedule", JSONB, nullable=False, server_default="{}"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assignments_user_id", "assignments", ["user_id"], unique=False)
    op.create_index("ix_assignments_worker_id", "assignments", ["worker_id"], unique=False)
    op.create_index("ix_assignments_status", "assignments", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_assignments_status", table_name="assignments")
    op.drop_index("ix_assignments_worker_id", table_name="assignments")
    op.drop_index("ix_assignments_user_id", table_name="assignments")
    op.drop_table("assignments")
    op.drop_table("users")
    op.drop_index("ix_auth_users_email", table_name="auth_users")
    op.drop_table("auth_users")
    op.drop_index("ix_workers_email", table_name="workers")
    op.drop_table("workers")
