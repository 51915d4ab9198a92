"""Create microposts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "microposts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content", sa.String(length=140), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_microposts_user_id"), "microposts", ["user_id"])
    op.create_index(op.f("ix_microposts_created_at"), "microposts", ["created_at"])


def downgrade() -> None:
    op.drop_index(op.f("ix_microposts_created_at"), table_name="microposts")
    op.drop_index(op.f("ix_microposts_user_id"), table_name="microposts")
    op.drop_table("microposts")
