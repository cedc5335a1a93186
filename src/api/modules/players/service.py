from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from api.db.models import Player
from api.modules.players.repository import PlayerRepository
from api.modules.players.schemas import (
    PlayerCreateRequest,
    PlayerResponse,
    PlayerUpdateRequest,
)
from ladder.optimistic import OptimisticStore

logger = logging.getLogger(__name__)


class PlayerConflictError(ValueError):
    pass


class PlayersService:
    def __init__(
        self,
        repository: PlayerRepository,
        projection: OptimisticStore[UUID, PlayerResponse],
    ) -> None:
        self.repository = repository
        self.projection = projection

    async def create_player(self, payload: PlayerCreateRequest) -> PlayerResponse:
        if await self.repository.get_by_name(payload.name) is not None:
            raise PlayerConflictError(f"Player name already exists: {payload.name}")
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        player = Player(
            name=payload.name,
            role=payload.role,
            is_present=payload.is_present,
            created_at=now,
            updated_at=now,
        )
        view = PlayerResponse.model_validate(player)
        try:
            await self.projection.create(
                player.id,
                view,
                persist=lambda: self.repository.create(player),
            )
        except IntegrityError as exc:
            raise PlayerConflictError(f"Player name already exists: {payload.name}") from exc
        return view

    async def get_player(self, player_id: UUID) -> PlayerResponse | None:
        cached = self.projection.get(player_id)
        if cached is not None:
            return cached
        player = await self.repository.get_by_id(player_id)
        return PlayerResponse.model_validate(player) if player is not None else None

    async def list_players(
        self,
        *,
        limit: int = 50,
        offset: int = 0,
        present: bool | None = None,
    ) -> tuple[int, list[PlayerResponse]]:
        safe_limit = max(1, limit)
        safe_offset = max(0, offset)
        total = await self.repository.count_players(present=present)
        players = await self.repository.list_players(
            limit=safe_limit,
            offset=safe_offset,
            present=present,
        )
        return total, [PlayerResponse.model_validate(player) for player in players]

    async def update_player(self, player_id: UUID, payload: PlayerUpdateRequest) -> PlayerResponse:
        player = await self._require_player(player_id)
        if payload.name is not None and payload.name != player.name:
            existing = await self.repository.get_by_name(payload.name)
            if existing is not None and existing.id != player_id:
                raise PlayerConflictError(f"Player name already in use: {payload.name}")

        changes: dict[str, object] = {
            "updated_at": datetime.now(timezone.utc).replace(tzinfo=None),
        }
        if payload.name is not None:
            changes["name"] = payload.name
        if payload.role is not None:
            changes["role"] = payload.role
        if payload.is_present is not None:
            changes["is_present"] = payload.is_present

        self._seed(player)
        updated_view = PlayerResponse.model_validate(player).model_copy(update=changes)

        async def _persist() -> Player:
            for field_name, value in changes.items():
                setattr(player, field_name, value)
            return await self.repository.save(player)

        try:
            await self.projection.update(player_id, updated_view, persist=_persist)
        except IntegrityError as exc:
            raise PlayerConflictError("Player name already in use.") from exc
        except Exception:
            await self._forget_if_gone(player_id)
            raise
        return updated_view

    async def set_presence(self, player_id: UUID, is_present: bool) -> PlayerResponse:
        return await self.update_player(player_id, PlayerUpdateRequest(is_present=is_present))

    async def toggle_presence(self, player_id: UUID) -> PlayerResponse:
        player = await self._require_player(player_id)
        return await self.set_presence(player_id, not player.is_present)

    async def delete_player(self, player_id: UUID) -> None:
        player = await self._require_player(player_id)
        if await self.repository.count_matches_for_player(player_id) > 0:
            raise PlayerConflictError("Player has recorded matches and cannot be deleted.")
        self._seed(player)
        try:
            await self.projection.delete(
                player_id,
                persist=lambda: self.repository.delete(player),
            )
        except Exception:
            await self._forget_if_gone(player_id)
            raise
        logger.info("player_deleted", extra={"player_id": str(player_id)})

    async def _require_player(self, player_id: UUID) -> Player:
        player = await self.repository.get_by_id(player_id)
        if player is None:
            raise LookupError(f"Player not found: {player_id}")
        return player

    def _seed(self, player: Player) -> None:
        self.projection.remember(player.id, PlayerResponse.model_validate(player))

    async def _forget_if_gone(self, player_id: UUID) -> None:
        # A concurrent delete can win the race; its row must not reappear
        # through this write's rollback.
        if await self.repository.get_by_id(player_id) is None:
            self.projection.forget(player_id)
