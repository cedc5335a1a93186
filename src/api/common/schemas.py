from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class OffsetPage(BaseModel, Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int
    has_more: bool


class SeasonOffsetPage(OffsetPage[T], Generic[T]):
    """Page of one season's ranking snapshot."""

    season: str
    stale: bool
