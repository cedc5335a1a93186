from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.db.session import get_session
from api.deps.projections import get_projection_state_dep
from api.modules.ranking.repository import RankingRepository
from api.modules.ranking.service import RankingService
from api.state import ProjectionState

SESSION_DEP = Depends(get_session)
PROJECTIONS_DEP = Depends(get_projection_state_dep)


def build_ranking_service(session: AsyncSession, projections: ProjectionState) -> RankingService:
    return RankingService(
        ranking_repository=RankingRepository(session=session),
        projection=projections.rankings,
        season_locks=projections.season_locks,
        stale_seasons=projections.stale_seasons,
    )


def get_ranking_service_dep(
    session: AsyncSession = SESSION_DEP,
    projections: ProjectionState = PROJECTIONS_DEP,
) -> RankingService:
    return build_ranking_service(session, projections)
