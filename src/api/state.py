from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from fastapi import FastAPI

from api.modules.matches.schemas import MatchResponse
from api.modules.players.schemas import PlayerResponse
from api.modules.ranking.locks import SeasonLockRegistry
from api.modules.ranking.schemas import RankingSnapshot
from ladder.optimistic import OptimisticStore


@dataclass
class ProjectionState:
    """Process-wide in-memory projections shared by every request."""

    players: OptimisticStore[UUID, PlayerResponse] = field(default_factory=OptimisticStore)
    matches: OptimisticStore[UUID, MatchResponse] = field(default_factory=OptimisticStore)
    rankings: OptimisticStore[str, RankingSnapshot] = field(default_factory=OptimisticStore)
    season_locks: SeasonLockRegistry = field(default_factory=SeasonLockRegistry)
    # Stale season -> snapshot version current when its recompute failed
    # (None when unknown). A later snapshot version clears the mark.
    stale_seasons: dict[str, int | None] = field(default_factory=dict)


def get_app_projections(app: FastAPI) -> ProjectionState:
    state = getattr(app.state, "projections", None)
    if isinstance(state, ProjectionState):
        return state
    state = ProjectionState()
    app.state.projections = state
    return state
