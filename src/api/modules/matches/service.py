from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

import numpy as np

from api.db.models import Match
from api.modules.matches.repository import MatchesRepository
from api.modules.matches.schemas import (
    MatchCreateRequest,
    MatchResponse,
    MatchScoreUpdateRequest,
)
from api.modules.ranking.locks import SeasonLockRegistry
from api.modules.ranking.service import RankingService
from ladder.optimistic import OptimisticStore
from ladder.results import draw_teams, validate_lineup, winner_for
from ladder.seasons import ensure_season, season_for, utcnow
from ladder.types import Pair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchMutation:
    match: MatchResponse
    ranking_stale: bool


class MatchesService:
    def __init__(
        self,
        repository: MatchesRepository,
        projection: OptimisticStore[UUID, MatchResponse],
        ranking_service: RankingService,
        season_locks: SeasonLockRegistry,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.repository = repository
        self.projection = projection
        self.ranking_service = ranking_service
        self.season_locks = season_locks
        self.rng = rng if rng is not None else np.random.default_rng()

    async def create_match(self, payload: MatchCreateRequest) -> MatchMutation:
        team_a, team_b = validate_lineup(payload.team_a, payload.team_b)
        winner = winner_for(payload.score_a, payload.score_b)
        await self._ensure_players_exist([*team_a, *team_b])

        played_at = self._normalize_played_at(payload.played_at)
        season = season_for(played_at)
        match = Match(
            season=season,
            team_a_player1_id=team_a[0],
            team_a_player2_id=team_a[1],
            team_b_player1_id=team_b[0],
            team_b_player2_id=team_b[1],
            score_a=payload.score_a,
            score_b=payload.score_b,
            winner=winner,
            played_at=played_at,
            created_at=utcnow(),
        )
        view = MatchResponse.from_match(match)
        async with self.season_locks.hold(season):
            await self.projection.create(
                match.id,
                view,
                persist=lambda: self.repository.create_match(match),
            )
            consistent = await self.ranking_service.sync_after_mutation(season)
        logger.info(
            "match_created",
            extra={"match_id": str(match.id), "season": season, "winner": winner.value},
        )
        return MatchMutation(match=view, ranking_stale=not consistent)

    async def get_match(self, match_id: UUID) -> MatchResponse | None:
        cached = self.projection.get(match_id)
        if cached is not None:
            return cached
        # Not cached here: only holders of the season lock seed the projection.
        match = await self.repository.get_match(match_id)
        return MatchResponse.from_match(match) if match is not None else None

    async def list_matches(
        self,
        *,
        season: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, list[MatchResponse]]:
        safe_limit = max(1, limit)
        safe_offset = max(0, offset)
        safe_season = ensure_season(season) if season else None
        total = await self.repository.count_matches(season=safe_season)
        matches = await self.repository.list_matches(
            season=safe_season,
            limit=safe_limit,
            offset=safe_offset,
        )
        return total, [MatchResponse.from_match(match) for match in matches]

    async def update_score(
        self,
        match_id: UUID,
        payload: MatchScoreUpdateRequest,
    ) -> MatchMutation:
        winner = winner_for(payload.score_a, payload.score_b)
        season = (await self._require_match(match_id)).season
        async with self.season_locks.hold(season):
            match = await self._reload_locked(match_id)
            updated_view = MatchResponse.from_match(match).model_copy(
                update={
                    "score_a": payload.score_a,
                    "score_b": payload.score_b,
                    "winner": winner,
                }
            )
            await self.projection.update(
                match_id,
                updated_view,
                persist=lambda: self.repository.update_score(
                    match,
                    score_a=payload.score_a,
                    score_b=payload.score_b,
                    winner=winner,
                ),
            )
            consistent = await self.ranking_service.sync_after_mutation(season)
        logger.info(
            "match_score_updated",
            extra={"match_id": str(match_id), "season": season, "winner": winner.value},
        )
        return MatchMutation(match=updated_view, ranking_stale=not consistent)

    async def delete_match(self, match_id: UUID) -> MatchMutation:
        season = (await self._require_match(match_id)).season
        async with self.season_locks.hold(season):
            match = await self._reload_locked(match_id)
            view = MatchResponse.from_match(match)
            await self.projection.delete(
                match_id,
                persist=lambda: self.repository.delete_match(match),
            )
            consistent = await self.ranking_service.sync_after_mutation(season)
        logger.info("match_deleted", extra={"match_id": str(match_id), "season": season})
        return MatchMutation(match=view, ranking_stale=not consistent)

    async def draw_teams(self, player_ids: list[UUID]) -> tuple[Pair, Pair]:
        await self._ensure_players_exist(player_ids)
        return draw_teams(player_ids, rng=self.rng)

    async def _ensure_players_exist(self, player_ids: list[UUID]) -> None:
        missing = await self.repository.find_missing_players(player_ids)
        if missing:
            joined = ", ".join(str(player_id) for player_id in missing)
            raise ValueError(f"Unknown player ids: {joined}")

    async def _require_match(self, match_id: UUID) -> Match:
        match = await self.repository.get_match(match_id)
        if match is None:
            raise LookupError(f"Match not found: {match_id}")
        return match

    async def _reload_locked(self, match_id: UUID) -> Match:
        """Re-read a match under its season lock and seed the projection from it.

        The row read before the lock may already be updated or deleted by the
        previous holder.
        """
        match = await self.repository.get_match(match_id)
        if match is None:
            self.projection.forget(match_id)
            raise LookupError(f"Match not found: {match_id}")
        self.projection.remember(match_id, MatchResponse.from_match(match))
        return match

    @staticmethod
    def _normalize_played_at(played_at: datetime | None) -> datetime:
        if played_at is None:
            return utcnow()
        if played_at.tzinfo is not None:
            return played_at.astimezone(timezone.utc).replace(tzinfo=None)
        return played_at
