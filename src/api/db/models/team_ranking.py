from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel


class TeamRanking(SQLModel, table=True):
    # player1_id/player2_id hold the canonical (string-ordered) pair.
    season: str = Field(primary_key=True, max_length=7)
    player1_id: UUID = Field(primary_key=True, foreign_key="player.id")
    player2_id: UUID = Field(primary_key=True, foreign_key="player.id")
    rank: int = Field(ge=1, index=True)
    win_rate: float = Field(default=0.0)
    wins: int = Field(default=0, ge=0)
    total_games: int = Field(default=0, ge=0)
    last_match_at: datetime | None = Field(default=None)
