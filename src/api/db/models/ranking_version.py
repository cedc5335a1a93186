from __future__ import annotations

from sqlmodel import Field, SQLModel


class RankingVersion(SQLModel, table=True):
    """Generation counter of a season's ranking snapshot.

    Bumped in the same transaction that replaces the ranking rows, so every
    process can tell whether its cached snapshot is still current.
    """

    season: str = Field(primary_key=True, max_length=7)
    version: int = Field(default=0, ge=0)
