from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from api.db.enums import TeamSide


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Match(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Fixed at creation from played_at; score edits never move a match.
    season: str = Field(index=True, min_length=7, max_length=7)

    team_a_player1_id: UUID = Field(foreign_key="player.id", index=True)
    team_a_player2_id: UUID = Field(foreign_key="player.id", index=True)
    team_b_player1_id: UUID = Field(foreign_key="player.id", index=True)
    team_b_player2_id: UUID = Field(foreign_key="player.id", index=True)

    score_a: int = Field(default=0, ge=0)
    score_b: int = Field(default=0, ge=0)
    winner: TeamSide = Field(index=True)

    played_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
