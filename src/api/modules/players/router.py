from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from api.common.pagination import build_page, clamp_page
from api.common.schemas import OffsetPage
from api.config import Settings
from api.deps.players import get_players_service_dep
from api.deps.settings import get_settings_dep
from api.modules.players.schemas import (
    PlayerCreateRequest,
    PlayerPresenceRequest,
    PlayerResponse,
    PlayerUpdateRequest,
)
from api.modules.players.service import PlayerConflictError, PlayersService

router = APIRouter(prefix="/players", tags=["players"])
PLAYERS_SERVICE_DEP = Depends(get_players_service_dep)
SETTINGS_DEP = Depends(get_settings_dep)


@router.get(
    "",
    response_model=OffsetPage[PlayerResponse],
    summary="List Players",
    description="Returns registered players, newest first. Optionally filtered by presence.",
)
async def list_players(
    limit: int = 50,
    offset: int = 0,
    present: bool | None = None,
    service: PlayersService = PLAYERS_SERVICE_DEP,
    settings: Settings = SETTINGS_DEP,
) -> OffsetPage[PlayerResponse]:
    safe_limit, safe_offset = clamp_page(
        limit=limit,
        offset=offset,
        maximum=settings.players_page_max,
    )
    total, players = await service.list_players(
        limit=safe_limit,
        offset=safe_offset,
        present=present,
    )
    return build_page(items=players, total=total, limit=safe_limit, offset=safe_offset)


@router.post(
    "",
    response_model=PlayerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Player",
    description="Registers a player with a unique name.",
    responses={
        201: {"description": "Player created."},
        409: {"description": "Player name already exists."},
    },
)
async def post_player(
    request: PlayerCreateRequest,
    service: PlayersService = PLAYERS_SERVICE_DEP,
) -> PlayerResponse:
    try:
        return await service.create_player(request)
    except PlayerConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.get(
    "/{player_id}",
    response_model=PlayerResponse,
    summary="Get Player",
    responses={404: {"description": "Player not found."}},
)
async def get_player(
    player_id: UUID,
    service: PlayersService = PLAYERS_SERVICE_DEP,
) -> PlayerResponse:
    player = await service.get_player(player_id)
    if player is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player not found: {player_id}",
        )
    return player


@router.put(
    "/{player_id}",
    response_model=PlayerResponse,
    summary="Update Player",
    description="Updates name, role or presence. Always stamps a new updated_at.",
    responses={
        404: {"description": "Player not found."},
        409: {"description": "Player name already in use."},
    },
)
async def put_player(
    player_id: UUID,
    request: PlayerUpdateRequest,
    service: PlayersService = PLAYERS_SERVICE_DEP,
) -> PlayerResponse:
    try:
        return await service.update_player(player_id, request)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PlayerConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.patch(
    "/{player_id}/present",
    response_model=PlayerResponse,
    summary="Set Player Presence",
    responses={404: {"description": "Player not found."}},
)
async def patch_player_presence(
    player_id: UUID,
    request: PlayerPresenceRequest,
    service: PlayersService = PLAYERS_SERVICE_DEP,
) -> PlayerResponse:
    try:
        return await service.set_presence(player_id, request.is_present)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/{player_id}/present/toggle",
    response_model=PlayerResponse,
    summary="Toggle Player Presence",
    responses={404: {"description": "Player not found."}},
)
async def post_toggle_presence(
    player_id: UUID,
    service: PlayersService = PLAYERS_SERVICE_DEP,
) -> PlayerResponse:
    try:
        return await service.toggle_presence(player_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete(
    "/{player_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Player",
    description="Deletes a player that has no recorded matches.",
    responses={
        404: {"description": "Player not found."},
        409: {"description": "Player has recorded matches."},
    },
)
async def delete_player(
    player_id: UUID,
    service: PlayersService = PLAYERS_SERVICE_DEP,
) -> None:
    try:
        await service.delete_player(player_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PlayerConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
