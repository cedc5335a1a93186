"""players and matches

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import context, op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Offline migrations use a mock connection that cannot be inspected.
    if not context.is_offline_mode():
        bind = op.get_bind()
        inspector = sa.inspect(bind)
        if inspector.has_table("player"):
            return

    op.create_table(
        "player",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=32), nullable=False),
        sa.Column(
            "role",
            sa.Enum("ALL_ROUND", "FORWARD", "DEFENDER", name="playerrole"),
            nullable=False,
        ),
        sa.Column("is_present", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_player_name"),
    )
    op.create_index("ix_player_name", "player", ["name"], unique=False)
    op.create_index("ix_player_role", "player", ["role"], unique=False)
    op.create_index("ix_player_is_present", "player", ["is_present"], unique=False)

    op.create_table(
        "match",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("season", sa.String(length=7), nullable=False),
        sa.Column("team_a_player1_id", sa.Uuid(), nullable=False),
        sa.Column("team_a_player2_id", sa.Uuid(), nullable=False),
        sa.Column("team_b_player1_id", sa.Uuid(), nullable=False),
        sa.Column("team_b_player2_id", sa.Uuid(), nullable=False),
        sa.Column("score_a", sa.Integer(), nullable=False),
        sa.Column("score_b", sa.Integer(), nullable=False),
        sa.Column("winner", sa.Enum("A", "B", name="teamside"), nullable=False),
        sa.Column("played_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["team_a_player1_id"], ["player.id"]),
        sa.ForeignKeyConstraint(["team_a_player2_id"], ["player.id"]),
        sa.ForeignKeyConstraint(["team_b_player1_id"], ["player.id"]),
        sa.ForeignKeyConstraint(["team_b_player2_id"], ["player.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in (
        "season",
        "team_a_player1_id",
        "team_a_player2_id",
        "team_b_player1_id",
        "team_b_player2_id",
        "winner",
        "played_at",
    ):
        op.create_index(f"ix_match_{column}", "match", [column], unique=False)


def downgrade() -> None:
    if not context.is_offline_mode():
        bind = op.get_bind()
        inspector = sa.inspect(bind)
        if not inspector.has_table("player"):
            return

    op.drop_table("match")
    op.drop_table("player")
    sa.Enum(name="teamside").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="playerrole").drop(op.get_bind(), checkfirst=True)
