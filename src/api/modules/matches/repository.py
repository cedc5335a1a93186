from __future__ import annotations

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from api.db.enums import TeamSide
from api.db.models import Match, Player


class MatchesRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_match(self, match: Match) -> Match:
        self.session.add(match)
        await self._commit()
        await self.session.refresh(match)
        return match

    async def get_match(self, match_id: UUID) -> Match | None:
        return await self.session.get(Match, match_id, populate_existing=True)

    async def update_score(
        self,
        match: Match,
        *,
        score_a: int,
        score_b: int,
        winner: TeamSide,
    ) -> Match:
        match.score_a = score_a
        match.score_b = score_b
        match.winner = winner
        self.session.add(match)
        await self._commit()
        await self.session.refresh(match)
        return match

    async def delete_match(self, match: Match) -> None:
        await self.session.delete(match)
        await self._commit()

    async def count_matches(self, *, season: str | None = None) -> int:
        stmt = select(func.count()).select_from(Match)
        if season is not None:
            stmt = stmt.where(Match.season == season)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_matches(
        self,
        *,
        season: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Match]:
        stmt = select(Match)
        if season is not None:
            stmt = stmt.where(Match.season == season)
        stmt = stmt.order_by(col(Match.played_at).desc()).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def find_missing_players(self, player_ids: list[UUID]) -> list[UUID]:
        if not player_ids:
            return []
        stmt = select(Player.id).where(col(Player.id).in_(player_ids))
        result = await self.session.execute(stmt)
        found = set(result.scalars().all())
        return [player_id for player_id in player_ids if player_id not in found]
