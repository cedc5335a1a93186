from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, insert, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from api.db.models import Match, Player, PlayerRanking, RankingVersion, TeamRanking

# A reader that keeps losing the race against replaces gives up.
SNAPSHOT_READ_ATTEMPTS = 3


class SnapshotReadConflictError(RuntimeError):
    pass


class RankingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_season_matches(self, season: str) -> list[Match]:
        stmt = (
            select(Match)
            .where(Match.season == season)
            .order_by(col(Match.played_at), col(Match.created_at), col(Match.id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_seasons(self) -> list[str]:
        stmt = select(Match.season).distinct()
        result = await self.session.execute(stmt)
        return sorted((row for row in result.scalars().all()), reverse=True)

    async def get_snapshot_version(self, season: str) -> int:
        stmt = select(RankingVersion.version).where(col(RankingVersion.season) == season)
        result = await self.session.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    async def replace_season_snapshots(
        self,
        season: str,
        players: list[PlayerRanking],
        teams: list[TeamRanking],
    ) -> int:
        """Swap both ranking kinds of a season in one transaction.

        Returns the snapshot version written with them.
        """
        try:
            version = await self._bump_version(season)
            await self.session.execute(
                delete(PlayerRanking).where(col(PlayerRanking.season) == season)
            )
            await self.session.execute(
                delete(TeamRanking).where(col(TeamRanking.season) == season)
            )
            # Bulk INSERTs keep the fresh rows out of the identity map, so a
            # later recompute in the same session cannot collide with them.
            if players:
                await self.session.execute(
                    insert(PlayerRanking), [row.model_dump() for row in players]
                )
            if teams:
                await self.session.execute(
                    insert(TeamRanking), [row.model_dump() for row in teams]
                )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return version

    async def load_season_snapshot(
        self,
        season: str,
    ) -> tuple[int, list[PlayerRanking], list[TeamRanking]]:
        """Read both ranking kinds as written by one replace.

        The version is read before and after the rows; a replace committed
        in between changes it and the read is retried.
        """
        for _ in range(SNAPSHOT_READ_ATTEMPTS):
            version = await self.get_snapshot_version(season)
            players = await self.list_player_rankings(season)
            teams = await self.list_team_rankings(season)
            if await self.get_snapshot_version(season) == version:
                return version, players, teams
        raise SnapshotReadConflictError(
            f"Ranking snapshot of {season} kept changing while being read."
        )

    async def list_player_rankings(self, season: str) -> list[PlayerRanking]:
        stmt = (
            select(PlayerRanking)
            .where(PlayerRanking.season == season)
            .order_by(col(PlayerRanking.rank))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_team_rankings(self, season: str) -> list[TeamRanking]:
        stmt = (
            select(TeamRanking)
            .where(TeamRanking.season == season)
            .order_by(col(TeamRanking.rank))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_player_names(self, player_ids: list[UUID]) -> dict[UUID, str]:
        if not player_ids:
            return {}
        stmt = select(Player).where(col(Player.id).in_(player_ids))
        result = await self.session.execute(stmt)
        return {player.id: player.name for player in result.scalars().all()}

    async def _bump_version(self, season: str) -> int:
        stmt = (
            select(RankingVersion.version)
            .where(col(RankingVersion.season) == season)
            .with_for_update()
        )
        previous = (await self.session.execute(stmt)).scalar_one_or_none()
        if previous is None:
            await self.session.execute(insert(RankingVersion).values(season=season, version=1))
            return 1
        await self.session.execute(
            update(RankingVersion)
            .where(col(RankingVersion.season) == season)
            .values(version=previous + 1)
        )
        return previous + 1
