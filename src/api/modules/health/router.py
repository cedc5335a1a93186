from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy import text

from api.db.session import get_engine
from api.deps.settings import get_settings_dep
from api.state import get_app_projections

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    app: str
    env: str


class HealthReadyResponse(BaseModel):
    status: str
    app: str
    env: str
    checks: dict[str, bool]
    stale_seasons: list[str] = []


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns basic application health and environment metadata.",
    responses={
        200: {
            "description": "Service is healthy.",
            "content": {
                "application/json": {
                    "example": {
                        "status": "ok",
                        "app": "doubles-ladder-api",
                        "env": "development",
                    }
                }
            },
        }
    },
)
def get_health(request: Request) -> HealthResponse:
    settings = get_settings_dep(request)
    return HealthResponse(
        status="ok",
        app=settings.app_name,
        env=settings.app_env,
    )


async def _check_db_ready() -> bool:
    engine = get_engine()
    async with engine.connect() as connection:
        await connection.execute(text("SELECT 1"))
    return True


@router.get(
    "/ready",
    response_model=HealthReadyResponse,
    summary="Readiness Check",
    description=(
        "Checks database connectivity and lists seasons whose ranking snapshot "
        "is stale and awaits a manual recompute."
    ),
    responses={
        200: {
            "description": "Service is ready.",
            "content": {
                "application/json": {
                    "example": {
                        "status": "ready",
                        "app": "doubles-ladder-api",
                        "env": "development",
                        "checks": {"db": True},
                        "stale_seasons": [],
                    }
                }
            },
        },
        503: {
            "description": "Service is not ready.",
            "content": {
                "application/json": {
                    "example": {
                        "error_code": "service_unavailable",
                        "message": "Database not ready",
                        "detail": "Database not ready",
                        "request_id": "req-123",
                    }
                }
            },
        },
    },
)
async def get_ready(request: Request) -> HealthReadyResponse:
    settings = get_settings_dep(request)
    if not await _check_db_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not ready",
        )
    return HealthReadyResponse(
        status="ready",
        app=settings.app_name,
        env=settings.app_env,
        checks={"db": True},
        stale_seasons=sorted(get_app_projections(request.app).stale_seasons),
    )
