from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import Settings, get_settings
from api.db import session as db_session
from api.error_handling import register_error_handlers
from api.modules.health.router import router as health_router
from api.modules.matches.router import router as matches_router
from api.modules.players.router import router as players_router
from api.modules.ranking.router import router as ranking_router
from api.observability import configure_logging, register_request_logging
from api.state import ProjectionState


def create_app(settings: Settings | None = None) -> FastAPI:
    cfg = settings or get_settings()
    configure_logging(cfg)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if cfg.db_auto_create:
            await db_session.init_db()
        yield
        await db_session.dispose_engine()

    app = FastAPI(
        title=cfg.app_name,
        debug=cfg.app_debug,
        docs_url=cfg.docs_url,
        redoc_url=cfg.redoc_url,
        lifespan=lifespan,
    )
    register_error_handlers(app)
    if cfg.app_log_requests:
        register_request_logging(app)
    if cfg.app_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.app_cors_origins,
            allow_credentials=cfg.app_cors_allow_credentials,
            allow_methods=cfg.app_cors_allow_methods,
            allow_headers=cfg.app_cors_allow_headers,
        )
    app.state.settings = cfg
    app.state.projections = ProjectionState()
    app.include_router(health_router)
    app.include_router(players_router, prefix="/api/v1")
    app.include_router(matches_router, prefix="/api/v1")
    app.include_router(ranking_router, prefix="/api/v1")
    return app


app = create_app()
