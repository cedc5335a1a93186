from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ladder.pairs import canonical_pair
from ladder.types import MatchRecord, Pair, PlayerId, Tally


@dataclass
class SeasonTallies:
    players: dict[PlayerId, Tally] = field(default_factory=dict)
    pairs: dict[Pair, Tally] = field(default_factory=dict)


def aggregate_season(
    matches: Iterable[MatchRecord],
    season: str | None = None,
) -> SeasonTallies:
    """Accumulate per-player and per-pair counters in one pass.

    Mapping order is first appearance while scanning ``matches`` in the given
    order, which the ranking sort keeps for full ties.
    """
    tallies = SeasonTallies()
    for match in matches:
        if season is not None and match.season != season:
            raise ValueError(
                f"Match {match.match_id} belongs to season {match.season}, not {season}."
            )
        winners = match.winning_team
        for player_id in (*match.team_a, *match.team_b):
            tally = tallies.players.setdefault(player_id, Tally())
            tally.record(won=player_id in winners, played_at=match.played_at)

        for team in (match.team_a, match.team_b):
            pair = canonical_pair(*team)
            tally = tallies.pairs.setdefault(pair, Tally())
            tally.record(won=team == winners, played_at=match.played_at)
    return tallies
