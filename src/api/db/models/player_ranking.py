from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel


class PlayerRanking(SQLModel, table=True):
    season: str = Field(primary_key=True, max_length=7)
    player_id: UUID = Field(primary_key=True, foreign_key="player.id")
    rank: int = Field(ge=1, index=True)
    win_rate: float = Field(default=0.0)
    wins: int = Field(default=0, ge=0)
    total_games: int = Field(default=0, ge=0)
    last_match_at: datetime | None = Field(default=None)
