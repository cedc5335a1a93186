from __future__ import annotations

from fastapi import Request

from api.config import Settings, get_settings


def get_settings_dep(request: Request) -> Settings:
    state_settings = getattr(request.app.state, "settings", None)
    if isinstance(state_settings, Settings):
        return state_settings
    return get_settings()
