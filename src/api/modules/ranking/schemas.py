from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from api.common.schemas import SeasonOffsetPage


class PlayerRankingResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "season": "2024-05",
                "player_id": "fa7bf995-fd2d-47f1-b76c-d405eb7ca8c5",
                "player_name": "Alice",
                "rank": 1,
                "win_rate": 0.75,
                "wins": 3,
                "total_games": 4,
                "last_match_at": "2024-05-20T19:40:00",
            }
        },
    )

    season: str
    player_id: UUID
    player_name: str | None = None
    rank: int
    win_rate: float
    wins: int
    total_games: int
    last_match_at: datetime | None


class TeamRankingResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "season": "2024-05",
                "player1_id": "0c4a3c1e-5a9f-4d59-9a2e-3c3f3b0b9a11",
                "player2_id": "fa7bf995-fd2d-47f1-b76c-d405eb7ca8c5",
                "player1_name": "Bob",
                "player2_name": "Alice",
                "rank": 1,
                "win_rate": 1.0,
                "wins": 2,
                "total_games": 2,
                "last_match_at": "2024-05-20T19:40:00",
            }
        },
    )

    season: str
    player1_id: UUID
    player2_id: UUID
    player1_name: str | None = None
    player2_name: str | None = None
    rank: int
    win_rate: float
    wins: int
    total_games: int
    last_match_at: datetime | None


class RankingSnapshot(BaseModel):
    """Both ranking kinds of one season, replaced as a unit."""

    model_config = ConfigDict(frozen=True)

    season: str
    version: int = 0
    players: tuple[PlayerRankingResponse, ...] = ()
    teams: tuple[TeamRankingResponse, ...] = ()


class PlayerRankingListResponse(SeasonOffsetPage[PlayerRankingResponse]):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "season": "2024-05",
                "stale": False,
                "items": [],
                "total": 0,
                "limit": 100,
                "offset": 0,
                "has_more": False,
            }
        }
    )


class TeamRankingListResponse(SeasonOffsetPage[TeamRankingResponse]):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "season": "2024-05",
                "stale": False,
                "items": [],
                "total": 0,
                "limit": 100,
                "offset": 0,
                "has_more": False,
            }
        }
    )


class SeasonResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"season": "2024-05", "starts_at": "2024-05-01T00:00:00", "ends_at": "2024-06-01T00:00:00"}}
    )

    season: str
    starts_at: datetime
    ends_at: datetime


class SeasonListResponse(BaseModel):
    items: list[str]
    current: str


class RankingStatusResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "season": "2024-05",
                "stale": False,
                "recomputing": False,
                "version": 3,
                "players": 8,
                "teams": 11,
            }
        }
    )

    season: str
    stale: bool
    recomputing: bool
    version: int
    players: int
    teams: int
