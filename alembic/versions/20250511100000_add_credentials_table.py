"""Add credentials table: one refresh token per user.

Revision ID: 20250511100000
Revises: 20250511000000
Create Date: 2025-05-11

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20250511100000"
down_revision: Union[str, None] = "20250511000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "credentials",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("refresh_token", sa.String(length=128), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index(
        op.f("ix_credentials_refresh_token"),
        "credentials",
        ["refresh_token"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_credentials_refresh_token"), table_name="credentials")
    op.drop_table("credentials")
