from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from api.common.pagination import build_page, clamp_page
from api.common.schemas import OffsetPage
from api.config import Settings
from api.deps.matches import get_matches_service_dep
from api.deps.settings import get_settings_dep
from api.modules.matches.schemas import (
    MatchCreateRequest,
    MatchDeleteResponse,
    MatchResponse,
    MatchScoreUpdateRequest,
    MatchWriteResponse,
    TeamDrawRequest,
    TeamDrawResponse,
)
from api.modules.matches.service import MatchesService, MatchMutation

router = APIRouter(prefix="/matches", tags=["matches"])
MATCHES_SERVICE_DEP = Depends(get_matches_service_dep)
SETTINGS_DEP = Depends(get_settings_dep)


def _write_response(mutation: MatchMutation) -> MatchWriteResponse:
    return MatchWriteResponse(
        **mutation.match.model_dump(),
        ranking_stale=mutation.ranking_stale,
    )


@router.get(
    "",
    response_model=OffsetPage[MatchResponse],
    summary="List Matches",
    description="Returns matches newest first, optionally restricted to one season (YYYY-MM).",
    responses={400: {"description": "Malformed season key."}},
)
async def list_matches(
    season: str | None = None,
    limit: int = 50,
    offset: int = 0,
    service: MatchesService = MATCHES_SERVICE_DEP,
    settings: Settings = SETTINGS_DEP,
) -> OffsetPage[MatchResponse]:
    safe_limit, safe_offset = clamp_page(
        limit=limit,
        offset=offset,
        maximum=settings.matches_page_max,
    )
    try:
        total, matches = await service.list_matches(
            season=season,
            limit=safe_limit,
            offset=safe_offset,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return build_page(items=matches, total=total, limit=safe_limit, offset=safe_offset)


@router.post(
    "",
    response_model=MatchWriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record Match",
    description=(
        "Records a finished 2v2 match and recomputes the rankings of its season. "
        "ranking_stale is true when the match was stored but the ranking recompute failed."
    ),
    responses={
        201: {"description": "Match recorded."},
        400: {
            "description": "Invalid line-up, draw, or unknown player.",
            "content": {"application/json": {"example": {"detail": "A match cannot end in a draw."}}},
        },
    },
)
async def post_match(
    request: MatchCreateRequest,
    service: MatchesService = MATCHES_SERVICE_DEP,
) -> MatchWriteResponse:
    try:
        mutation = await service.create_match(request)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _write_response(mutation)


@router.post(
    "/teams/draw",
    response_model=TeamDrawResponse,
    summary="Draw Teams",
    description="Randomly splits four players into two pairs. Nothing is stored.",
    responses={400: {"description": "Players are not four distinct known ids."}},
)
async def post_team_draw(
    request: TeamDrawRequest,
    service: MatchesService = MATCHES_SERVICE_DEP,
) -> TeamDrawResponse:
    try:
        team_a, team_b = await service.draw_teams(request.players)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return TeamDrawResponse(team_a=list(team_a), team_b=list(team_b))


@router.get(
    "/{match_id}",
    response_model=MatchResponse,
    summary="Get Match",
    responses={404: {"description": "Match not found."}},
)
async def get_match(
    match_id: UUID,
    service: MatchesService = MATCHES_SERVICE_DEP,
) -> MatchResponse:
    match = await service.get_match(match_id)
    if match is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Match not found: {match_id}",
        )
    return match


@router.put(
    "/{match_id}",
    response_model=MatchWriteResponse,
    summary="Correct Match Score",
    description="Replaces both scores, re-derives the winner and recomputes the season rankings.",
    responses={
        400: {"description": "Scores are equal or negative."},
        404: {"description": "Match not found."},
    },
)
async def put_match_score(
    match_id: UUID,
    request: MatchScoreUpdateRequest,
    service: MatchesService = MATCHES_SERVICE_DEP,
) -> MatchWriteResponse:
    try:
        mutation = await service.update_score(match_id, request)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _write_response(mutation)


@router.delete(
    "/{match_id}",
    response_model=MatchDeleteResponse,
    summary="Delete Match",
    description="Deletes a match and recomputes the rankings of its season.",
    responses={404: {"description": "Match not found."}},
)
async def delete_match(
    match_id: UUID,
    service: MatchesService = MATCHES_SERVICE_DEP,
) -> MatchDeleteResponse:
    try:
        mutation = await service.delete_match(match_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MatchDeleteResponse(
        id=mutation.match.id,
        season=mutation.match.season,
        deleted=True,
        ranking_stale=mutation.ranking_stale,
    )
