from __future__ import annotations

import logging
from uuid import UUID

from api.db.models import Match, PlayerRanking, TeamRanking
from api.modules.ranking.locks import SeasonLockRegistry
from api.modules.ranking.repository import RankingRepository
from api.modules.ranking.schemas import (
    PlayerRankingResponse,
    RankingSnapshot,
    TeamRankingResponse,
)
from ladder.optimistic import OptimisticStore
from ladder.seasons import current_season, ensure_season
from ladder.standings import SeasonStandings, compute_season_standings
from ladder.types import MatchRecord

logger = logging.getLogger(__name__)


def match_to_record(match: Match) -> MatchRecord:
    return MatchRecord(
        match_id=match.id,
        season=match.season,
        team_a=(match.team_a_player1_id, match.team_a_player2_id),
        team_b=(match.team_b_player1_id, match.team_b_player2_id),
        score_a=match.score_a,
        score_b=match.score_b,
        winner=match.winner,
        played_at=match.played_at,
    )


class RankingService:
    """Keeps each season's ranking snapshot consistent with its matches.

    ``recompute_season`` rebuilds both ranking kinds from the full match set
    of one season and swaps them in atomically, bumping the season's
    snapshot version. Match mutations call ``sync_after_mutation`` while
    holding the season lock; a failed recompute there leaves the previous
    snapshot servable and marks the season stale until a newer snapshot
    version exists.

    The database is authoritative. Readers compare the cached snapshot's
    version with the stored one, so a recompute done by another process
    (a second worker, the CLI) is picked up on the next read.
    """

    def __init__(
        self,
        ranking_repository: RankingRepository,
        projection: OptimisticStore[str, RankingSnapshot],
        season_locks: SeasonLockRegistry,
        stale_seasons: dict[str, int | None],
    ) -> None:
        self.ranking_repository = ranking_repository
        self.projection = projection
        self.season_locks = season_locks
        self.stale_seasons = stale_seasons

    @staticmethod
    def current_season() -> str:
        return current_season()

    async def list_seasons(self) -> list[str]:
        return await self.ranking_repository.list_seasons()

    async def recompute_season(self, season: str) -> RankingSnapshot:
        """Recompute without locking; callers must hold the season lock."""
        season = ensure_season(season)
        matches = await self.ranking_repository.list_season_matches(season)
        standings = compute_season_standings(
            season,
            [match_to_record(match) for match in matches],
        )
        player_rows, team_rows = self.build_ranking_rows(standings)
        cached = self.projection.get(season)
        snapshot = RankingSnapshot(
            season=season,
            version=cached.version if cached is not None else 0,
            players=tuple(PlayerRankingResponse.model_validate(row) for row in player_rows),
            teams=tuple(TeamRankingResponse.model_validate(row) for row in team_rows),
        )
        version = await self.projection.put(
            season,
            snapshot,
            persist=lambda: self.ranking_repository.replace_season_snapshots(
                season=season,
                players=player_rows,
                teams=team_rows,
            ),
        )
        snapshot = snapshot.model_copy(update={"version": version})
        self._adopt(snapshot)
        self.stale_seasons.pop(season, None)
        logger.info(
            "ranking_recomputed",
            extra={
                "season": season,
                "version": version,
                "matches": len(matches),
                "players": len(player_rows),
                "teams": len(team_rows),
            },
        )
        return snapshot

    async def recompute_season_locked(self, season: str) -> RankingSnapshot:
        season = ensure_season(season)
        async with self.season_locks.hold(season):
            return await self.recompute_season(season)

    async def sync_after_mutation(self, season: str) -> bool:
        """Recompute after an accepted match mutation.

        Returns False when the recompute failed; the mutation stays applied
        and the season is reported stale.
        """
        baseline: int | None = None
        try:
            baseline = await self.ranking_repository.get_snapshot_version(season)
            await self.recompute_season(season)
        except Exception:
            self.stale_seasons[season] = baseline
            logger.warning(
                "ranking_recompute_failed",
                extra={"season": season, "version": baseline},
                exc_info=True,
            )
            return False
        return True

    def is_stale(self, season: str) -> bool:
        return season in self.stale_seasons

    def is_recomputing(self, season: str) -> bool:
        return self.season_locks.is_locked(season)

    async def get_snapshot(self, season: str) -> RankingSnapshot:
        season = ensure_season(season)
        stored_version = await self.ranking_repository.get_snapshot_version(season)
        cached = self.projection.get(season)
        if cached is not None and cached.version >= stored_version:
            return cached
        version, player_rows, team_rows = await self.ranking_repository.load_season_snapshot(
            season
        )
        return self._adopt(
            RankingSnapshot(
                season=season,
                version=version,
                players=tuple(PlayerRankingResponse.model_validate(row) for row in player_rows),
                teams=tuple(TeamRankingResponse.model_validate(row) for row in team_rows),
            )
        )

    def _adopt(self, snapshot: RankingSnapshot) -> RankingSnapshot:
        """Cache ``snapshot`` unless an equal or newer version is already held."""
        season = snapshot.season
        cached = self.projection.get(season)
        if cached is not None and cached.version >= snapshot.version:
            return cached
        self.projection.remember(season, snapshot)
        if season in self.stale_seasons:
            marked_at = self.stale_seasons[season]
            if marked_at is not None and snapshot.version > marked_at:
                del self.stale_seasons[season]
                logger.info(
                    "ranking_stale_cleared",
                    extra={"season": season, "version": snapshot.version},
                )
        return snapshot

    async def get_player_rankings(
        self,
        season: str,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[int, list[PlayerRankingResponse]]:
        safe_limit = max(1, limit)
        safe_offset = max(0, offset)
        snapshot = await self.get_snapshot(season)
        page = list(snapshot.players[safe_offset : safe_offset + safe_limit])
        names = await self.ranking_repository.get_player_names([row.player_id for row in page])
        items = [row.model_copy(update={"player_name": names.get(row.player_id)}) for row in page]
        return len(snapshot.players), items

    async def get_team_rankings(
        self,
        season: str,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[int, list[TeamRankingResponse]]:
        safe_limit = max(1, limit)
        safe_offset = max(0, offset)
        snapshot = await self.get_snapshot(season)
        page = list(snapshot.teams[safe_offset : safe_offset + safe_limit])
        player_ids: list[UUID] = []
        for row in page:
            player_ids.extend((row.player1_id, row.player2_id))
        names = await self.ranking_repository.get_player_names(player_ids)
        items = [
            row.model_copy(
                update={
                    "player1_name": names.get(row.player1_id),
                    "player2_name": names.get(row.player2_id),
                }
            )
            for row in page
        ]
        return len(snapshot.teams), items

    async def get_player_ranking(self, season: str, player_id: UUID) -> PlayerRankingResponse:
        snapshot = await self.get_snapshot(season)
        for row in snapshot.players:
            if row.player_id == player_id:
                names = await self.ranking_repository.get_player_names([player_id])
                return row.model_copy(update={"player_name": names.get(player_id)})
        raise LookupError(f"Player {player_id} has no ranking in season {snapshot.season}.")

    @staticmethod
    def build_ranking_rows(
        standings: SeasonStandings,
    ) -> tuple[list[PlayerRanking], list[TeamRanking]]:
        player_rows = [
            PlayerRanking(
                season=standings.season,
                player_id=standing.key,
                rank=standing.rank,
                win_rate=standing.win_rate,
                wins=standing.wins,
                total_games=standing.total_games,
                last_match_at=standing.last_played_at,
            )
            for standing in standings.players
        ]
        team_rows = [
            TeamRanking(
                season=standings.season,
                player1_id=standing.key[0],
                player2_id=standing.key[1],
                rank=standing.rank,
                win_rate=standing.win_rate,
                wins=standing.wins,
                total_games=standing.total_games,
                last_match_at=standing.last_played_at,
            )
            for standing in standings.pairs
        ]
        return player_rows, team_rows
