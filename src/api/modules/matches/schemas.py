from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.db.enums import TeamSide
from api.db.models import Match


class MatchCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "team_a": [
                    "5f6e8d34-292d-434f-a8ff-f48f4f3040f9",
                    "0c4a3c1e-5a9f-4d59-9a2e-3c3f3b0b9a11",
                ],
                "team_b": [
                    "fa7bf995-fd2d-47f1-b76c-d405eb7ca8c5",
                    "8f12a4a6-2f9e-40fd-9f97-bcf8f5e6aace",
                ],
                "score_a": 21,
                "score_b": 15,
                "played_at": None,
            }
        }
    )

    team_a: list[UUID] = Field(min_length=2, max_length=2)
    team_b: list[UUID] = Field(min_length=2, max_length=2)
    score_a: int = Field(ge=0)
    score_b: int = Field(ge=0)
    played_at: datetime | None = None


class MatchScoreUpdateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"score_a": 18, "score_b": 21}}
    )

    score_a: int = Field(ge=0)
    score_b: int = Field(ge=0)


class TeamDrawRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "players": [
                    "5f6e8d34-292d-434f-a8ff-f48f4f3040f9",
                    "0c4a3c1e-5a9f-4d59-9a2e-3c3f3b0b9a11",
                    "fa7bf995-fd2d-47f1-b76c-d405eb7ca8c5",
                    "8f12a4a6-2f9e-40fd-9f97-bcf8f5e6aace",
                ]
            }
        }
    )

    players: list[UUID] = Field(min_length=4, max_length=4)


class TeamDrawResponse(BaseModel):
    team_a: list[UUID]
    team_b: list[UUID]


class MatchResponse(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "8bcbf808-c8ab-4f75-95e8-f5f0871500af",
                "season": "2024-05",
                "team_a": [
                    "5f6e8d34-292d-434f-a8ff-f48f4f3040f9",
                    "0c4a3c1e-5a9f-4d59-9a2e-3c3f3b0b9a11",
                ],
                "team_b": [
                    "fa7bf995-fd2d-47f1-b76c-d405eb7ca8c5",
                    "8f12a4a6-2f9e-40fd-9f97-bcf8f5e6aace",
                ],
                "score_a": 21,
                "score_b": 15,
                "winner": "A",
                "played_at": "2024-05-02T20:20:10",
                "created_at": "2024-05-02T20:20:10",
            }
        },
    )

    id: UUID
    season: str
    team_a: tuple[UUID, UUID]
    team_b: tuple[UUID, UUID]
    score_a: int
    score_b: int
    winner: TeamSide
    played_at: datetime
    created_at: datetime

    @classmethod
    def from_match(cls, match: Match) -> MatchResponse:
        return cls(
            id=match.id,
            season=match.season,
            team_a=(match.team_a_player1_id, match.team_a_player2_id),
            team_b=(match.team_b_player1_id, match.team_b_player2_id),
            score_a=match.score_a,
            score_b=match.score_b,
            winner=match.winner,
            played_at=match.played_at,
            created_at=match.created_at,
        )


class MatchWriteResponse(MatchResponse):
    ranking_stale: bool = False


class MatchDeleteResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "8bcbf808-c8ab-4f75-95e8-f5f0871500af",
                "season": "2024-05",
                "deleted": True,
                "ranking_stale": False,
            }
        }
    )

    id: UUID
    season: str
    deleted: bool
    ranking_stale: bool
