# webapp/routes/pool.py
#
# Pick'em pool bookkeeping: spreads, players + their picks, settings.

from __future__ import annotations

from flask import Blueprint, jsonify, request

from db import SessionLocal
from webapp.config import MAX_WEEK, MIN_WEEK
from webapp.services.store import (
    delete_player,
    get_current_week,
    get_player,
    get_spreads,
    list_players,
    player_to_json,
    set_current_week,
    set_selection,
    set_spread,
    upsert_player,
)

pool_bp = Blueprint("pool", __name__, url_prefix="/api")


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


# ---------- Spreads ----------

@pool_bp.route("/spreads", methods=["GET"])
def spreads_get():
    week = request.args.get("week", type=int)
    session = SessionLocal()
    try:
        if week is None:
            week = get_current_week(session)
        return jsonify({"week": week, "spreads": get_spreads(session, week)})
    finally:
        session.close()


@pool_bp.route("/spreads", methods=["POST"])
def spreads_post():
    body = _json_body()
    week = body.get("week")
    game_id = body.get("gameId")
    if week is None or not game_id:
        return jsonify({"error": "Missing required fields 'week' and 'gameId'"}), 400

    value = body.get("value", body.get("spread"))
    favored = body.get("favoredTeam")

    session = SessionLocal()
    try:
        try:
            set_spread(session, int(week), str(game_id), value, favored)
        except (TypeError, ValueError) as e:
            return jsonify({"error": str(e), "week": week, "gameId": game_id}), 400
        session.commit()
        return jsonify({"week": int(week), "gameId": str(game_id), "spreads": get_spreads(session, int(week))})
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------- Players ----------

@pool_bp.route("/players", methods=["GET"])
def players_get():
    session = SessionLocal()
    try:
        return jsonify({"players": [player_to_json(p) for p in list_players(session)]})
    finally:
        session.close()


@pool_bp.route("/players", methods=["POST"])
def players_post():
    body = _json_body()
    name = str(body.get("name") or "").strip()
    if not name:
        return jsonify({"error": "Missing required field 'name'"}), 400

    session = SessionLocal()
    try:
        player = upsert_player(session, name, body.get("selections"))
        session.commit()
        return jsonify(player_to_json(player)), 201
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pool_bp.route("/players/<name>/selection", methods=["PUT"])
def player_selection_put(name: str):
    body = _json_body()
    game_id = body.get("gameId")
    if not game_id:
        return jsonify({"error": "Missing required field 'gameId'"}), 400

    session = SessionLocal()
    try:
        player = set_selection(session, name, str(game_id), body.get("teamId"))
        if player is None:
            return jsonify({"error": f"Unknown player '{name}'"}), 404
        session.commit()
        return jsonify(player_to_json(player))
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pool_bp.route("/players/<name>", methods=["DELETE"])
def player_delete(name: str):
    session = SessionLocal()
    try:
        if get_player(session, name) is None:
            return jsonify({"error": f"Unknown player '{name}'"}), 404
        delete_player(session, name)
        session.commit()
        return jsonify({"ok": True, "name": name})
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------- Settings ----------

@pool_bp.route("/settings", methods=["GET"])
def settings_get():
    session = SessionLocal()
    try:
        return jsonify({"currentWeek": get_current_week(session)})
    finally:
        session.close()


@pool_bp.route("/settings", methods=["POST"])
def settings_post():
    body = _json_body()
    try:
        week = int(body.get("currentWeek"))
    except (TypeError, ValueError):
        return jsonify({"error": "currentWeek must be an integer"}), 400
    if not (MIN_WEEK <= week <= MAX_WEEK):
        return jsonify({"error": f"currentWeek must be between {MIN_WEEK} and {MAX_WEEK}"}), 400

    session = SessionLocal()
    try:
        set_current_week(session, week)
        session.commit()
        return jsonify({"currentWeek": week})
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
