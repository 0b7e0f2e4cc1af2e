# webapp/routes/analysis.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from flask import Blueprint, current_app, jsonify, request

from analysis import (
    AnalyticsError,
    GameNotFound,
    backtest_game,
    backtest_week_range,
    calculate_team_analytics,
    generate_weekly_summary,
)
from analysis.metrics import log_week_bounds
from db import SessionLocal
from webapp.config import SEASON
from webapp.services.espn_scoreboard import fetch_week_games
from webapp.services.store import get_all_results, get_all_spreads
from webapp.services.team_analytics_cache import (
    get_team_analytics,
    load_team_analytics,
    rebuild_team_analytics_cache,
)

logger = logging.getLogger(__name__)

analysis_bp = Blueprint("analysis", __name__, url_prefix="/api")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _bool_arg(name: str, default: bool = False) -> bool:
    v = request.args.get(name, None)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


def _int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    """
    Parse an int query param. Raises ValueError on junk so routes can 400.
    """
    v = request.args.get(name, None)
    if v is None or str(v).strip() == "":
        return default
    return int(str(v).strip())


def _load_game_log():
    session = SessionLocal()
    try:
        return get_all_results(session)
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Backtests
# ---------------------------------------------------------------------------

@analysis_bp.route("/backtest/game/<int:week>/<game_id>")
def backtest_game_api(week: int, game_id: str):
    game_log = _load_game_log()
    try:
        result = backtest_game(week, game_id, game_log)
    except GameNotFound as e:
        return jsonify(e.to_json()), 404
    except AnalyticsError as e:
        # expected state (early season, no line yet); UI shows the message
        return jsonify(e.to_json())

    return jsonify(result.to_json())


@analysis_bp.route("/backtest/range")
def backtest_range_api():
    try:
        start_week = _int_arg("startWeek")
        end_week = _int_arg("endWeek")
    except ValueError:
        return jsonify({"error": "startWeek and endWeek must be integers"}), 400

    game_log = _load_game_log()
    bounds = log_week_bounds(game_log)
    if bounds is None:
        return jsonify({"error": "No completed games stored yet"}), 404

    start_week = start_week if start_week is not None else bounds[0]
    end_week = end_week if end_week is not None else bounds[1]

    try:
        summary = backtest_week_range(
            start_week,
            end_week,
            game_log,
            workers=int(current_app.config.get("BACKTEST_WORKERS", 1)),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(summary.to_json(include_results=_bool_arg("includeResults", True)))


# ---------------------------------------------------------------------------
# Weekly summary
# ---------------------------------------------------------------------------

@analysis_bp.route("/summary/week/<int:week>")
def weekly_summary_api(week: int):
    session = SessionLocal()
    try:
        game_log = get_all_results(session)
        spreads = get_all_spreads(session)
        season_analytics = load_team_analytics(session)
    finally:
        session.close()

    live = None
    if _bool_arg("live", True):
        season = request.args.get("season", default=SEASON, type=int)
        try:
            live = fetch_week_games(week, season)
        except requests.RequestException as e:
            logger.warning("live scoreboard unavailable for week %s: %s", week, e)
            return jsonify({"error": "Failed to fetch live games", "week": week, "details": str(e)}), 502

    return jsonify(generate_weekly_summary(week, game_log, season_analytics, spreads, live))


# ---------------------------------------------------------------------------
# Season analytics
# ---------------------------------------------------------------------------

@analysis_bp.route("/analytics/game/<game_id>")
def game_analytics_api(game_id: str):
    home_id = request.args.get("homeTeamId")
    away_id = request.args.get("awayTeamId")
    if not home_id or not away_id:
        return jsonify({"error": "Missing required parameters 'homeTeamId' and 'awayTeamId'", "gameId": game_id}), 400

    try:
        start_week = _int_arg("startWeek")
        end_week = _int_arg("endWeek")
    except ValueError:
        return jsonify({"error": "startWeek and endWeek must be integers"}), 400

    game_log = _load_game_log()
    bounds = log_week_bounds(game_log) or (1, 1)
    start_week = start_week if start_week is not None else bounds[0]
    end_week = end_week if end_week is not None else bounds[1]

    payload: Dict[str, Any] = {
        "gameId": game_id,
        "weekRange": {"start": start_week, "end": end_week},
        "homeTeam": {"id": home_id, **calculate_team_analytics(home_id, game_log, start_week, end_week)},
        "awayTeam": {"id": away_id, **calculate_team_analytics(away_id, game_log, start_week, end_week)},
    }
    return jsonify(payload)


@analysis_bp.route("/analytics/team/<team_id>")
def team_analytics_api(team_id: str):
    session = SessionLocal()
    try:
        entry = get_team_analytics(session, team_id)
    finally:
        session.close()

    if entry is None:
        return jsonify({"error": "No cached analytics for team; run the preprocessor", "teamId": team_id}), 404
    return jsonify({"teamId": team_id, **entry})


@analysis_bp.route("/analytics/preprocess", methods=["POST"])
def preprocess_api():
    session = SessionLocal()
    try:
        count = rebuild_team_analytics_cache(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    return jsonify({"ok": True, "teamsProcessed": count})
