from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from ladder.types import K, Standing, Tally


def ranking_sort_key(tally: Tally) -> tuple[float, int, int, bool, datetime]:
    # Earlier last match ranks higher; entities without one go last.
    last_played = tally.last_played_at
    return (
        -tally.win_rate,
        -tally.wins,
        tally.total_games,
        last_played is None,
        last_played if last_played is not None else datetime.min,
    )


def rank_tallies(tallies: Mapping[K, Tally]) -> list[Standing[K]]:
    ordered = sorted(tallies.items(), key=lambda item: ranking_sort_key(item[1]))
    return [
        Standing(
            key=key,
            rank=idx,
            wins=tally.wins,
            total_games=tally.total_games,
            win_rate=tally.win_rate,
            last_played_at=tally.last_played_at,
        )
        for idx, (key, tally) in enumerate(ordered, start=1)
    ]
