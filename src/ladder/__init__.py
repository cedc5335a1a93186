from .aggregation import SeasonTallies, aggregate_season
from .optimistic import OptimisticStore
from .ordering import rank_tallies, ranking_sort_key
from .pairs import canonical_pair
from .results import draw_teams, validate_lineup, winner_for
from .seasons import current_season, ensure_season, season_bounds, season_for
from .standings import SeasonStandings, compute_season_standings
from .types import MatchRecord, Pair, PlayerId, Standing, Tally, TeamSide

__all__ = [
    "MatchRecord",
    "OptimisticStore",
    "Pair",
    "PlayerId",
    "SeasonStandings",
    "SeasonTallies",
    "Standing",
    "Tally",
    "TeamSide",
    "aggregate_season",
    "canonical_pair",
    "compute_season_standings",
    "current_season",
    "draw_teams",
    "ensure_season",
    "rank_tallies",
    "ranking_sort_key",
    "season_bounds",
    "season_for",
    "validate_lineup",
    "winner_for",
]
