"""Holidays (festivos): one row per calendar date, imported yearly from the city council page."""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "holidays",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, server_default="national"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "month", "day", name="uq_holidays_date"),
    )
    op.create_index("ix_holidays_year", "holidays", ["year"], unique=False)
    op.create_index("ix_holidays_month", "holidays", ["month"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_holidays_month", table_name="holidays")
    op.drop_index("ix_holidays_year", table_name="holidays")
    op.drop_table("holidays")
