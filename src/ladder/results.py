from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ladder.types import Pair, PlayerId, TeamSide

PLAYERS_PER_TEAM = 2
PLAYERS_PER_MATCH = PLAYERS_PER_TEAM * 2


def winner_for(score_a: int, score_b: int) -> TeamSide:
    if isinstance(score_a, bool) or isinstance(score_b, bool):
        raise ValueError("Scores must be integers.")
    if score_a < 0 or score_b < 0:
        raise ValueError("Scores must be non-negative.")
    if score_a == score_b:
        raise ValueError("A match cannot end in a draw.")
    return TeamSide.A if score_a > score_b else TeamSide.B


def validate_lineup(team_a: Sequence[PlayerId], team_b: Sequence[PlayerId]) -> tuple[Pair, Pair]:
    if len(team_a) != PLAYERS_PER_TEAM or len(team_b) != PLAYERS_PER_TEAM:
        raise ValueError(f"Each team needs exactly {PLAYERS_PER_TEAM} players.")
    players = [*team_a, *team_b]
    if len(set(players)) != PLAYERS_PER_MATCH:
        raise ValueError(f"A match needs {PLAYERS_PER_MATCH} distinct players.")
    return (team_a[0], team_a[1]), (team_b[0], team_b[1])


def draw_teams(
    players: Sequence[PlayerId],
    rng: np.random.Generator,
) -> tuple[Pair, Pair]:
    """Split four distinct players into two random pairs."""
    if len(players) != PLAYERS_PER_MATCH or len(set(players)) != PLAYERS_PER_MATCH:
        raise ValueError(f"Team draw needs {PLAYERS_PER_MATCH} distinct players.")
    order = rng.permutation(PLAYERS_PER_MATCH)
    shuffled = [players[int(idx)] for idx in order]
    return (shuffled[0], shuffled[1]), (shuffled[2], shuffled[3])
