from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

PlayerId = Hashable
Pair = tuple[PlayerId, PlayerId]
K = TypeVar("K", bound=Hashable)


class TeamSide(str, Enum):
    A = "A"
    B = "B"


@dataclass(frozen=True)
class MatchRecord:
    """Engine view of one recorded match."""

    match_id: Hashable
    season: str
    team_a: Pair
    team_b: Pair
    score_a: int
    score_b: int
    winner: TeamSide
    played_at: datetime

    @property
    def winning_team(self) -> Pair:
        return self.team_a if self.winner == TeamSide.A else self.team_b


@dataclass
class Tally:
    wins: int = 0
    total_games: int = 0
    last_played_at: datetime | None = None

    @property
    def win_rate(self) -> float:
        return (self.wins / self.total_games) if self.total_games > 0 else 0.0

    def record(self, *, won: bool, played_at: datetime) -> None:
        self.total_games += 1
        if won:
            self.wins += 1
        if self.last_played_at is None or played_at > self.last_played_at:
            self.last_played_at = played_at


@dataclass(frozen=True)
class Standing(Generic[K]):
    key: K
    rank: int
    wins: int
    total_games: int
    win_rate: float
    last_played_at: datetime | None
