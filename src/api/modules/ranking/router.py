from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from api.common.pagination import clamp_page
from api.config import Settings
from api.deps.ranking import get_ranking_service_dep
from api.deps.settings import get_settings_dep
from api.modules.ranking.schemas import (
    PlayerRankingListResponse,
    PlayerRankingResponse,
    RankingStatusResponse,
    SeasonListResponse,
    SeasonResponse,
    TeamRankingListResponse,
)
from api.modules.ranking.service import RankingService
from ladder.seasons import ensure_season, season_bounds

router = APIRouter(prefix="/ranking", tags=["ranking"])
RANKING_SERVICE_DEP = Depends(get_ranking_service_dep)
SETTINGS_DEP = Depends(get_settings_dep)


def _valid_season(season: str) -> str:
    try:
        return ensure_season(season)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get(
    "/seasons/current",
    response_model=SeasonResponse,
    summary="Get Current Season",
    description="Returns the season key for the current wall-clock month (UTC).",
)
async def get_current_season(
    ranking_service: RankingService = RANKING_SERVICE_DEP,
) -> SeasonResponse:
    season = ranking_service.current_season()
    starts_at, ends_at = season_bounds(season)
    return SeasonResponse(season=season, starts_at=starts_at, ends_at=ends_at)


@router.get(
    "/seasons",
    response_model=SeasonListResponse,
    summary="List Seasons",
    description="Returns every season that has at least one recorded match, newest first.",
)
async def list_seasons(
    ranking_service: RankingService = RANKING_SERVICE_DEP,
) -> SeasonListResponse:
    seasons = await ranking_service.list_seasons()
    return SeasonListResponse(items=seasons, current=ranking_service.current_season())


@router.get(
    "/{season}/players",
    response_model=PlayerRankingListResponse,
    summary="Get Player Ranking",
    description="Returns the individual ranking snapshot of a season ordered by rank.",
    responses={400: {"description": "Malformed season key."}},
)
async def get_player_rankings(
    season: str,
    limit: int = 100,
    offset: int = 0,
    ranking_service: RankingService = RANKING_SERVICE_DEP,
    settings: Settings = SETTINGS_DEP,
) -> PlayerRankingListResponse:
    season = _valid_season(season)
    safe_limit, safe_offset = clamp_page(
        limit=limit,
        offset=offset,
        maximum=settings.ranking_page_max,
    )
    total, items = await ranking_service.get_player_rankings(
        season,
        limit=safe_limit,
        offset=safe_offset,
    )
    return PlayerRankingListResponse(
        season=season,
        stale=ranking_service.is_stale(season),
        items=items,
        total=total,
        limit=safe_limit,
        offset=safe_offset,
        has_more=(safe_offset + len(items)) < total,
    )


@router.get(
    "/{season}/players/{player_id}",
    response_model=PlayerRankingResponse,
    summary="Get Player Standing",
    description="Returns one player's rank and win rate in a season.",
    responses={
        400: {"description": "Malformed season key."},
        404: {"description": "Player has no ranking in this season."},
    },
)
async def get_player_ranking(
    season: str,
    player_id: UUID,
    ranking_service: RankingService = RANKING_SERVICE_DEP,
) -> PlayerRankingResponse:
    season = _valid_season(season)
    try:
        return await ranking_service.get_player_ranking(season, player_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get(
    "/{season}/teams",
    response_model=TeamRankingListResponse,
    summary="Get Team Ranking",
    description="Returns the pair ranking snapshot of a season ordered by rank.",
    responses={400: {"description": "Malformed season key."}},
)
async def get_team_rankings(
    season: str,
    limit: int = 100,
    offset: int = 0,
    ranking_service: RankingService = RANKING_SERVICE_DEP,
    settings: Settings = SETTINGS_DEP,
) -> TeamRankingListResponse:
    season = _valid_season(season)
    safe_limit, safe_offset = clamp_page(
        limit=limit,
        offset=offset,
        maximum=settings.ranking_page_max,
    )
    total, items = await ranking_service.get_team_rankings(
        season,
        limit=safe_limit,
        offset=safe_offset,
    )
    return TeamRankingListResponse(
        season=season,
        stale=ranking_service.is_stale(season),
        items=items,
        total=total,
        limit=safe_limit,
        offset=safe_offset,
        has_more=(safe_offset + len(items)) < total,
    )


@router.get(
    "/{season}/status",
    response_model=RankingStatusResponse,
    summary="Get Ranking Status",
    description="Reports whether the season snapshot is stale or being recomputed.",
)
async def get_ranking_status(
    season: str,
    ranking_service: RankingService = RANKING_SERVICE_DEP,
) -> RankingStatusResponse:
    season = _valid_season(season)
    snapshot = await ranking_service.get_snapshot(season)
    return RankingStatusResponse(
        season=season,
        stale=ranking_service.is_stale(season),
        recomputing=ranking_service.is_recomputing(season),
        version=snapshot.version,
        players=len(snapshot.players),
        teams=len(snapshot.teams),
    )


@router.post(
    "/{season}/recompute",
    response_model=RankingStatusResponse,
    summary="Recompute Season Ranking",
    description=(
        "Rebuilds both ranking snapshots of a season from its matches. "
        "Idempotent; this is the recovery path for a stale season."
    ),
    responses={400: {"description": "Malformed season key."}},
)
async def post_recompute(
    season: str,
    ranking_service: RankingService = RANKING_SERVICE_DEP,
) -> RankingStatusResponse:
    season = _valid_season(season)
    snapshot = await ranking_service.recompute_season_locked(season)
    return RankingStatusResponse(
        season=season,
        stale=ranking_service.is_stale(season),
        recomputing=False,
        version=snapshot.version,
        players=len(snapshot.players),
        teams=len(snapshot.teams),
    )
