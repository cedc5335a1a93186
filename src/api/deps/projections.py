from __future__ import annotations

from fastapi import Request

from api.state import ProjectionState, get_app_projections


def get_projection_state_dep(request: Request) -> ProjectionState:
    return get_app_projections(request.app)
