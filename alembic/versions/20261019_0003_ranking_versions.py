"""ranking snapshot versions

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:20:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import context, op

# revision identifiers, used by Alembic.
revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    if not context.is_offline_mode():
        bind = op.get_bind()
        inspector = sa.inspect(bind)
        if inspector.has_table("rankingversion"):
            return

    op.create_table(
        "rankingversion",
        sa.Column("season", sa.String(length=7), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("season"),
    )


def downgrade() -> None:
    if not context.is_offline_mode():
        bind = op.get_bind()
        inspector = sa.inspect(bind)
        if not inspector.has_table("rankingversion"):
            return

    op.drop_table("rankingversion")
