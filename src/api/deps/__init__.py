from .matches import get_matches_service_dep
from .players import get_players_service_dep
from .projections import get_projection_state_dep
from .ranking import get_ranking_service_dep
from .settings import get_settings_dep

__all__ = [
    "get_matches_service_dep",
    "get_players_service_dep",
    "get_projection_state_dep",
    "get_ranking_service_dep",
    "get_settings_dep",
]
