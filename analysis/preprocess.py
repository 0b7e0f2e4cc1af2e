"""
Season analytics preprocessor.

Builds the full-range per-team analytics (records, cover-margin and points
distributions, weekly timeline) plus the season metrics snapshot used by
the upcoming-game analyzer. Run offline; the output is cached in the
team_analytics table by webapp.services.team_analytics_cache.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import numpy as np

from .metrics import GameLog, TeamGame, collect_team_games, log_week_bounds, snapshot_from_games
from .models import TeamRef

CONTEXTS = ("overall", "favorite", "underdog", "home", "road")


def _mean(values: List[float]) -> Optional[float]:
    return float(np.mean(values)) if values else None


def _median(values: List[float]) -> Optional[float]:
    return float(np.median(values)) if values else None


def _pct_string(wins: int, losses: int) -> str:
    total = wins + losses
    return f"{(wins / total) * 100:.1f}" if total else "0.0"


def _record(games: List[TeamGame]) -> Dict[str, Any]:
    wins = sum(1 for g in games if g.ats_result == "win")
    losses = sum(1 for g in games if g.ats_result == "loss")
    pushes = sum(1 for g in games if g.ats_result == "push")
    return {
        "wins": wins,
        "losses": losses,
        "pushes": pushes,
        "percentage": _pct_string(wins, losses),
    }


def _margin_detail(g: TeamGame) -> Dict[str, Any]:
    return {
        "value": float(g.cover_margin),
        "week": g.week,
        "opponent": g.opponent.abbreviation,
        "spread": -g.spread_value if g.is_favorite else g.spread_value,
        "covered": g.ats_result == "win",
    }


def _cover_stats(games: List[TeamGame]) -> Dict[str, Any]:
    """
    Mean/median over non-push cover margins, plus the biggest cover and
    the worst miss with the game they came from.
    """
    decided = [g for g in games if g.ats_result in ("win", "loss")]
    if not decided:
        return {"mean": None, "median": None, "maxCover": None, "maxMiss": None}

    values = [float(g.cover_margin) for g in decided]
    covered = [g for g in decided if g.ats_result == "win"]
    missed = [g for g in decided if g.ats_result == "loss"]

    # first occurrence wins on ties
    max_cover = max(covered, key=lambda g: g.cover_margin) if covered else None
    max_miss = min(missed, key=lambda g: g.cover_margin) if missed else None

    return {
        "mean": _mean(values),
        "median": _median(values),
        "maxCover": _margin_detail(max_cover) if max_cover else None,
        "maxMiss": _margin_detail(max_miss) if max_miss else None,
    }


def _points_stats(points: List[float]) -> Dict[str, Optional[float]]:
    if not points:
        return {"mean": None, "median": None, "max": None, "min": None}
    arr = np.asarray(points, dtype=float)
    return {
        "mean": float(arr.mean()),
        "median": float(np.median(arr)),
        "max": float(arr.max()),
        "min": float(arr.min()),
    }


def _points_block(games: List[TeamGame], attr: str) -> Dict[str, Any]:
    all_pts = [getattr(g, attr) for g in games]
    home_pts = [getattr(g, attr) for g in games if g.is_home]
    road_pts = [getattr(g, attr) for g in games if not g.is_home]
    stats = _points_stats(all_pts)
    return {
        "all": all_pts,
        "home": home_pts,
        "road": road_pts,
        "stats": stats,
        "homeStats": _points_stats(home_pts),
        "roadStats": _points_stats(road_pts),
        "mean": stats["mean"],
    }


def _timeline(games: List[TeamGame]) -> List[Dict[str, Any]]:
    rows = []
    for g in games:
        if g.ats_result is None:
            continue
        rows.append(
            {
                "week": g.week,
                "opponent": g.opponent.abbreviation,
                "location": "Home" if g.is_home else "Away",
                "teamScore": g.team_score,
                "opponentScore": g.opponent_score,
                "spread": -g.spread_value if g.is_favorite else g.spread_value,
                "covered": g.ats_result == "win",
                "push": g.ats_result == "push",
                "coverMargin": g.cover_margin,
                "isHome": g.is_home,
                "isFavorite": g.is_favorite,
            }
        )
    rows.sort(key=lambda r: r["week"])
    return rows


def calculate_team_analytics(
    team_id: str,
    game_log: GameLog,
    start_week: int,
    end_week: int,
) -> Dict[str, Any]:
    """
    Full-range analytics for one team over weeks [start_week, end_week].
    """
    games = collect_team_games(team_id, game_log, start_week, end_week, inclusive=True)

    wins = sum(1 for g in games if g.actual_margin > 0)
    losses = sum(1 for g in games if g.actual_margin < 0)
    ties = sum(1 for g in games if g.actual_margin == 0)

    # points distributions only cover games that had a line
    lined = [g for g in games if g.ats_result is not None]

    by_context = {
        "overall": lined,
        "favorite": [g for g in lined if g.is_favorite],
        "underdog": [g for g in lined if not g.is_favorite],
        "home": [g for g in lined if g.is_home],
        "road": [g for g in lined if not g.is_home],
    }

    snapshot = snapshot_from_games(games)

    return {
        "gamesPlayed": len(games),
        "totalGames": len(games),
        "seasonRecord": {
            "wins": wins,
            "losses": losses,
            "ties": ties,
            "formatted": f"{wins}-{losses}" + (f"-{ties}" if ties else ""),
            "percentage": _pct_string(wins, losses),
        },
        "spreadRecord": _record(by_context["overall"]),
        "favoriteRecord": _record(by_context["favorite"]),
        "underdogRecord": _record(by_context["underdog"]),
        "homeRecord": _record(by_context["home"]),
        "awayRecord": _record(by_context["road"]),
        "coverStats": {ctx: _cover_stats(by_context[ctx]) for ctx in CONTEXTS},
        "pointsStats": {
            "scored": _points_block(lined, "team_score"),
            "allowed": _points_block(lined, "opponent_score"),
        },
        "weeklyPerformance": _timeline(games),
        "metrics": snapshot.to_json() if snapshot is not None else None,
    }


def collect_teams(game_log: GameLog) -> Dict[str, TeamRef]:
    teams: Dict[str, TeamRef] = {}
    for week in sorted(game_log, key=int):
        for game in game_log[week].values():
            for team in (game.home_team, game.away_team):
                teams.setdefault(team.id, team)
    return teams


def preprocess_all_analytics(
    game_log: GameLog,
    now: Optional[datetime] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Analytics for every team in the log over the log's full week range.

    Returns {teamId: {teamInfo, analytics, metrics, lastUpdated, weekRange}}.
    """
    bounds = log_week_bounds(game_log)
    if bounds is None:
        return {}
    start_week, end_week = bounds
    stamp = (now or datetime.now(timezone.utc)).isoformat()

    out: Dict[str, Dict[str, Any]] = {}
    for team_id, team in collect_teams(game_log).items():
        analytics = calculate_team_analytics(team_id, game_log, start_week, end_week)
        info = team.to_json()
        info.pop("score", None)
        out[team_id] = {
            "teamInfo": info,
            "analytics": analytics,
            "metrics": analytics["metrics"],
            "lastUpdated": stamp,
            "weekRange": {"start": start_week, "end": end_week},
        }
    return out
