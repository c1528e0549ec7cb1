"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-20 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "draws",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_draws_created_at", "draws", ["created_at"])

    op.create_table(
        "draw_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "draw_id",
            sa.String(),
            sa.ForeignKey("draws.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("giver", sa.String(), nullable=False),
        sa.Column("receiver", sa.String(), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("accessed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("draw_id", "position", name="uq_draw_assignments_draw_position"),
    )
    op.create_index("ix_draw_assignments_token", "draw_assignments", ["token"], unique=True)

    op.create_table(
        "active_draw",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "draw_id",
            sa.String(),
            sa.ForeignKey("draws.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("active_draw")
    op.drop_index("ix_draw_assignments_token", table_name="draw_assignments")
    op.drop_table("draw_assignments")
    op.drop_index("ix_draws_created_at", table_name="draws")
    op.drop_table("draws")
