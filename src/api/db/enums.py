from __future__ import annotations

from enum import Enum

from ladder.types import TeamSide


class PlayerRole(str, Enum):
    ALL_ROUND = "all_round"
    FORWARD = "forward"
    DEFENDER = "defender"


__all__ = ["PlayerRole", "TeamSide"]
