from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.db.session import get_session
from api.deps.projections import get_projection_state_dep
from api.modules.players.repository import PlayerRepository
from api.modules.players.service import PlayersService
from api.state import ProjectionState

SESSION_DEP = Depends(get_session)
PROJECTIONS_DEP = Depends(get_projection_state_dep)


def get_players_service_dep(
    session: AsyncSession = SESSION_DEP,
    projections: ProjectionState = PROJECTIONS_DEP,
) -> PlayersService:
    return PlayersService(
        repository=PlayerRepository(session=session),
        projection=projections.players,
    )
