"""season ranking snapshots

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:10:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import context, op

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def _stat_columns() -> list[sa.Column]:
    return [
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("win_rate", sa.Float(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("total_games", sa.Integer(), nullable=False),
        sa.Column("last_match_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    if not context.is_offline_mode():
        bind = op.get_bind()
        inspector = sa.inspect(bind)
        if inspector.has_table("playerranking"):
            return

    op.create_table(
        "playerranking",
        sa.Column("season", sa.String(length=7), nullable=False),
        sa.Column("player_id", sa.Uuid(), nullable=False),
        *_stat_columns(),
        sa.ForeignKeyConstraint(["player_id"], ["player.id"]),
        sa.PrimaryKeyConstraint("season", "player_id"),
    )
    op.create_index("ix_playerranking_rank", "playerranking", ["rank"], unique=False)

    op.create_table(
        "teamranking",
        sa.Column("season", sa.String(length=7), nullable=False),
        sa.Column("player1_id", sa.Uuid(), nullable=False),
        sa.Column("player2_id", sa.Uuid(), nullable=False),
        *_stat_columns(),
        sa.ForeignKeyConstraint(["player1_id"], ["player.id"]),
        sa.ForeignKeyConstraint(["player2_id"], ["player.id"]),
        sa.PrimaryKeyConstraint("season", "player1_id", "player2_id"),
    )
    op.create_index("ix_teamranking_rank", "teamranking", ["rank"], unique=False)


def downgrade() -> None:
    if not context.is_offline_mode():
        bind = op.get_bind()
        inspector = sa.inspect(bind)
        if not inspector.has_table("playerranking"):
            return

    op.drop_index("ix_teamranking_rank", table_name="teamranking")
    op.drop_table("teamranking")
    op.drop_index("ix_playerranking_rank", table_name="playerranking")
    op.drop_table("playerranking")
