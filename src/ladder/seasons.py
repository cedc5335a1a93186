from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

SEASON_FORMAT = "%Y-%m"
SEASON_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def season_for(played_at: datetime) -> str:
    if played_at.tzinfo is not None:
        played_at = played_at.astimezone(timezone.utc).replace(tzinfo=None)
    return played_at.strftime(SEASON_FORMAT)


def current_season(now: datetime | None = None) -> str:
    return season_for(now or utcnow())


def is_valid_season(season: str) -> bool:
    return bool(SEASON_PATTERN.match(season))


def ensure_season(season: str) -> str:
    normalized = season.strip()
    if not is_valid_season(normalized):
        raise ValueError(f"Season must use the YYYY-MM format, got {season!r}.")
    return normalized


def season_bounds(season: str) -> tuple[datetime, datetime]:
    """Return the half-open [start, end) interval covered by a season."""
    start = datetime.strptime(ensure_season(season), SEASON_FORMAT)
    # Day 28 + 4 days always lands in the following month.
    next_month = (start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return start, next_month
