from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ladder.aggregation import aggregate_season
from ladder.ordering import rank_tallies
from ladder.types import MatchRecord, Pair, PlayerId, Standing


@dataclass(frozen=True)
class SeasonStandings:
    season: str
    players: list[Standing[PlayerId]]
    pairs: list[Standing[Pair]]


def compute_season_standings(season: str, matches: Iterable[MatchRecord]) -> SeasonStandings:
    tallies = aggregate_season(matches, season=season)
    return SeasonStandings(
        season=season,
        players=rank_tallies(tallies.players),
        pairs=rank_tallies(tallies.pairs),
    )
