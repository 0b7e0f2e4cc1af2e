from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .backtest import backtest_game
from .confidence import analyze_upcoming_game
from .constants import (
    EASY_MIN_IMPORTANCE,
    EASY_SUPPORT_PCT,
    STATUS_PRE,
    UPSET_MAX_SUPPORT_PCT,
)
from .errors import AnalyticsError
from .metrics import GameLog, week_games
from .models import BacktestResult, GameResult, Spread, TeamMetricsSnapshot

logger = logging.getLogger(__name__)

LiveGames = Union[Mapping[str, Dict[str, Any]], Iterable[Dict[str, Any]]]


# ---------- Merge ----------


def merge_week_games(
    week: int,
    stored: Mapping[str, GameResult],
    live: Optional[LiveGames] = None,
) -> Dict[str, GameResult]:
    """
    Stored finals plus any live-feed games the store does not have yet.

    A finalized record always wins: a live snapshot for a game that is
    already stored is ignored, even if its score disagrees.
    """
    merged: Dict[str, GameResult] = dict(stored)

    if live is None:
        return merged
    snapshots = live.values() if isinstance(live, Mapping) else live

    for snap in snapshots:
        game_id = str(snap.get("id") or snap.get("gameId"))
        if game_id in merged:
            continue
        data = dict(snap)
        # spreads are attached later from the spread store
        data["spread"] = None
        data["status"] = snap.get("status") or STATUS_PRE
        merged[game_id] = GameResult.from_json(data, week=week)

    return merged


def _with_spread(game: GameResult, spread: Optional[Spread]) -> GameResult:
    if spread is None:
        return game
    try:
        return GameResult(
            game_id=game.game_id,
            week=game.week,
            home_team=game.home_team,
            away_team=game.away_team,
            spread=spread,
            date=game.date,
            status=game.status,
        )
    except ValueError as e:
        logger.warning("ignoring spread for game %s: %s", game.game_id, e)
        return game


def _coerce_spread(raw: Any) -> Optional[Spread]:
    if raw is None or isinstance(raw, Spread):
        return raw
    return Spread.from_json(raw)


def _snapshot_json(data: Any) -> Optional[TeamMetricsSnapshot]:
    if isinstance(data, TeamMetricsSnapshot):
        return data
    if not isinstance(data, Mapping) or "gamesPlayed" not in data:
        return None
    return TeamMetricsSnapshot.from_json(data)


def _season_snapshot(entry: Any) -> Optional[TeamMetricsSnapshot]:
    """
    Accepts a cache entry ({teamInfo, analytics, metrics, ...}), an entry
    whose snapshot sits under analytics.metrics, a bare snapshot, or a
    snapshot's JSON. Anything else has no usable metrics.
    """
    if entry is None or isinstance(entry, TeamMetricsSnapshot):
        return entry
    if not isinstance(entry, Mapping):
        return None

    if "metrics" in entry:
        return _snapshot_json(entry["metrics"])

    analytics = entry.get("analytics")
    if isinstance(analytics, Mapping) and "metrics" in analytics:
        return _snapshot_json(analytics["metrics"])

    if "spreadWinPct" in entry:
        return _snapshot_json(entry)
    return None


# ---------- Completed games ----------


def categorize_completed_game(result: Optional[BacktestResult]) -> Dict[str, Any]:
    if result is None or result.analysis.is_push:
        return {
            "category": "inconclusive",
            "categoryLabel": "Inconclusive",
            "reason": "Push or insufficient data",
        }

    analysis = result.analysis
    evaluated = analysis.metrics_supporting + analysis.metrics_against
    if evaluated == 0:
        return {
            "category": "inconclusive",
            "categoryLabel": "Inconclusive",
            "reason": "No metrics could be evaluated",
        }

    support_pct = (analysis.metrics_supporting / evaluated) * 100
    avg_importance = analysis.avg_importance_score

    if support_pct >= EASY_SUPPORT_PCT and avg_importance >= EASY_MIN_IMPORTANCE:
        return {
            "category": "easy",
            "categoryLabel": "Easy Pick",
            "reason": f"{analysis.metrics_supporting}/{evaluated} metrics supported the winner with high importance",
        }

    if support_pct <= UPSET_MAX_SUPPORT_PCT:
        return {
            "category": "upset",
            "categoryLabel": "Nobody Saw That Coming",
            "reason": f"Only {analysis.metrics_supporting}/{evaluated} metrics supported the winner",
        }

    return {
        "category": "tossup",
        "categoryLabel": "Toss-Up",
        "reason": f"Mixed signals with {round(support_pct)}% metric support",
    }


def _completed_entry(week: int, game: GameResult, game_log: GameLog) -> Dict[str, Any]:
    result: Optional[BacktestResult] = None
    error: Optional[Dict[str, Any]] = None
    try:
        result = backtest_game(week, game.game_id, game_log)
    except AnalyticsError as e:
        error = e.to_json()

    analysis = result.analysis if result is not None else None
    return {
        "gameId": game.game_id,
        "game": game.to_json(),
        "category": categorize_completed_game(result),
        "backtestResult": result.to_json() if result is not None else error,
        "winner": analysis.winner_team.brief() if analysis and analysis.winner_team else None,
        "loser": analysis.loser_team.brief() if analysis and analysis.loser_team else None,
        "metricsSupporting": analysis.metrics_supporting if analysis else 0,
        "avgImportance": analysis.avg_importance_score if analysis else 0.0,
    }


def _bucket(games: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"count": len(games), "games": games}


# ---------- Public API ----------


def generate_weekly_summary(
    week: int,
    game_log: GameLog,
    season_analytics_by_team: Mapping[str, Any],
    spreads_by_week: Mapping[int, Mapping[str, Any]],
    live_games_for_week: Optional[LiveGames] = None,
) -> Dict[str, Any]:
    """
    One report for a week: games already started are backtested and
    bucketed easy / upset / toss-up / inconclusive; games not started are
    scored for confidence from each team's season metrics.
    """
    week = int(week)
    games = merge_week_games(week, week_games(game_log, week), live_games_for_week)

    raw_spreads = spreads_by_week.get(week)
    if raw_spreads is None:
        raw_spreads = spreads_by_week.get(str(week)) or {}  # type: ignore[call-overload]

    completed: List[Dict[str, Any]] = []
    upcoming: List[Dict[str, Any]] = []
    no_analysis: List[Dict[str, Any]] = []

    for game_id in sorted(games):
        game = games[game_id]

        if game.status != STATUS_PRE:
            completed.append(_completed_entry(week, game, game_log))
            continue

        game = _with_spread(game, _coerce_spread(raw_spreads.get(game_id)) or game.spread)
        home_metrics = _season_snapshot(season_analytics_by_team.get(game.home_team.id))
        away_metrics = _season_snapshot(season_analytics_by_team.get(game.away_team.id))

        if home_metrics is None or away_metrics is None:
            no_analysis.append(
                {
                    "gameId": game_id,
                    "game": game.to_json(),
                    "reason": "Season analytics missing for one or both teams",
                }
            )
            continue

        confidence = analyze_upcoming_game(game, home_metrics, away_metrics)
        upcoming.append(
            {
                "gameId": game_id,
                "game": game.to_json(),
                "analysis": confidence.to_json(),
                "confidence": confidence.confidence,
                "confidenceScore": confidence.confidence_score,
            }
        )

    def by_category(name: str) -> List[Dict[str, Any]]:
        return [g for g in completed if g["category"]["category"] == name]

    def by_tier(name: str) -> List[Dict[str, Any]]:
        tier = [g for g in upcoming if g["confidence"] == name]
        return sorted(tier, key=lambda g: g["confidenceScore"], reverse=True)

    easy = sorted(by_category("easy"), key=lambda g: g["avgImportance"], reverse=True)
    upsets = sorted(by_category("upset"), key=lambda g: g["metricsSupporting"])

    return {
        "week": week,
        "totalGames": len(completed) + len(upcoming) + len(no_analysis),
        "completed": {
            "total": len(completed),
            "easyPicks": _bucket(easy),
            "upsets": _bucket(upsets),
            "tossUps": _bucket(by_category("tossup")),
            "inconclusive": _bucket(by_category("inconclusive")),
        },
        "upcoming": {
            "total": len(upcoming) + len(no_analysis),
            "highConfidence": _bucket(by_tier("high")),
            "mediumConfidence": _bucket(by_tier("medium")),
            "lowConfidence": _bucket(by_tier("low")),
            "noAnalysis": _bucket(no_analysis),
        },
    }
