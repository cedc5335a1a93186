from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.db.session import get_session
from api.deps.projections import get_projection_state_dep
from api.deps.ranking import build_ranking_service
from api.modules.matches.repository import MatchesRepository
from api.modules.matches.service import MatchesService
from api.state import ProjectionState

SESSION_DEP = Depends(get_session)
PROJECTIONS_DEP = Depends(get_projection_state_dep)


def get_matches_service_dep(
    session: AsyncSession = SESSION_DEP,
    projections: ProjectionState = PROJECTIONS_DEP,
) -> MatchesService:
    return MatchesService(
        repository=MatchesRepository(session=session),
        projection=projections.matches,
        ranking_service=build_ranking_service(session, projections),
        season_locks=projections.season_locks,
    )
