from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from api.db.enums import PlayerRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Player(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("name", name="uq_player_name"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True, min_length=1, max_length=32)
    role: PlayerRole = Field(default=PlayerRole.ALL_ROUND, index=True)
    is_present: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
