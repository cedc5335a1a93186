from __future__ import annotations

from typing import TypeVar

from api.common.schemas import OffsetPage

T = TypeVar("T")


def clamp_page(*, limit: int, offset: int, maximum: int) -> tuple[int, int]:
    return max(1, min(limit, maximum)), max(0, offset)


def build_page(*, items: list[T], total: int, limit: int, offset: int) -> OffsetPage[T]:
    return OffsetPage[T](
        items=items,
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + len(items)) < total,
    )
