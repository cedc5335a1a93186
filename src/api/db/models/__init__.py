from .match import Match
from .player import Player
from .player_ranking import PlayerRanking
from .ranking_version import RankingVersion
from .team_ranking import TeamRanking

__all__ = [
    "Match",
    "Player",
    "PlayerRanking",
    "RankingVersion",
    "TeamRanking",
]
