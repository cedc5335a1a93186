from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from api.db.models import Match, Player


class PlayerRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, player: Player) -> Player:
        return await self.save(player)

    async def save(self, player: Player) -> Player:
        self.session.add(player)
        await self._commit()
        await self.session.refresh(player)
        return player

    async def delete(self, player: Player) -> None:
        await self.session.delete(player)
        await self._commit()

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def get_by_id(self, player_id: UUID) -> Player | None:
        return await self.session.get(Player, player_id, populate_existing=True)

    async def get_by_name(self, name: str) -> Player | None:
        stmt = select(Player).where(Player.name == name)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def count_players(self, *, present: bool | None = None) -> int:
        stmt = select(func.count()).select_from(Player)
        if present is not None:
            stmt = stmt.where(col(Player.is_present) == present)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_players(
        self,
        *,
        limit: int = 50,
        offset: int = 0,
        present: bool | None = None,
    ) -> list[Player]:
        stmt = select(Player)
        if present is not None:
            stmt = stmt.where(col(Player.is_present) == present)
        stmt = stmt.order_by(col(Player.created_at).desc(), col(Player.name)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_matches_for_player(self, player_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(Match)
            .where(
                or_(
                    col(Match.team_a_player1_id) == player_id,
                    col(Match.team_a_player2_id) == player_id,
                    col(Match.team_b_player1_id) == player_id,
                    col(Match.team_b_player2_id) == player_id,
                )
            )
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
