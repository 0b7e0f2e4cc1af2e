# webapp/services/__init__.py

from .espn_scoreboard import fetch_scoreboard, fetch_week_games, finalize_completed_games
from .team_analytics_cache import load_team_analytics, rebuild_team_analytics_cache

__all__ = [
    "fetch_scoreboard",
    "fetch_week_games",
    "finalize_completed_games",
    "load_team_analytics",
    "rebuild_team_analytics_cache",
]
