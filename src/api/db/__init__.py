from . import enums, models
from .session import get_engine, get_session, get_sessionmaker, init_db

__all__ = [
    "enums",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_db",
    "models",
]
