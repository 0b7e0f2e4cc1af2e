# webapp/routes/games.py
from __future__ import annotations

import logging

import requests
from flask import Blueprint, jsonify, request

from db import SessionLocal
from webapp.config import SEASON
from webapp.services.espn_scoreboard import (
    fetch_scoreboard,
    fetch_week_games,
    finalize_completed_games,
)
from webapp.services.store import get_current_week, get_spreads

logger = logging.getLogger(__name__)

games_bp = Blueprint("games", __name__, url_prefix="/api/games")


@games_bp.route("", methods=["GET"])
def games_api():
    """
    Live scoreboard. With ?week= asks the feed for that regular-season
    week, otherwise the current Thursday-Monday window.
    """
    week = request.args.get("week", type=int)
    season = request.args.get("season", default=SEASON, type=int)

    try:
        games = fetch_week_games(week, season) if week is not None else fetch_scoreboard()
    except requests.RequestException as e:
        logger.warning("scoreboard fetch failed week=%s: %s", week, e)
        return jsonify({"error": "Failed to fetch games", "week": week, "details": str(e)}), 502

    spreads = {}
    if week is not None:
        session = SessionLocal()
        try:
            spreads = get_spreads(session, week)
        finally:
            session.close()

    for g in games:
        g["spread"] = spreads.get(g["id"])

    return jsonify({"week": week, "season": season, "games": games})


@games_bp.route("/sync", methods=["POST"])
def games_sync_api():
    """
    Pull a week from the feed and store every game that has gone final.
    """
    body = request.get_json(silent=True) or {}
    season = int(body.get("season") or SEASON)

    session = SessionLocal()
    try:
        week = body.get("week")
        week = int(week) if week is not None else get_current_week(session)

        try:
            snapshots = fetch_week_games(week, season)
        except requests.RequestException as e:
            logger.warning("scoreboard fetch failed week=%s: %s", week, e)
            return jsonify({"error": "week_sync_failed", "season": season, "week": week, "details": str(e)}), 502

        written = finalize_completed_games(session, week, snapshots)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    logger.info("week %s sync: %d new final(s) of %d games", week, written, len(snapshots))
    return jsonify(
        {
            "ok": True,
            "season": season,
            "week": week,
            "gamesSeen": len(snapshots),
            "gamesFinalized": written,
        }
    )
