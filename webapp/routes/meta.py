# webapp/routes/meta.py

from flask import Blueprint, jsonify
from sqlalchemy import func

from db import GameResultRow, SessionLocal
from webapp.config import MAX_WEEK, MIN_WEEK, SEASON
from webapp.services.store import get_current_week, stored_weeks

meta_bp = Blueprint("meta", __name__, url_prefix="/api/meta")


def _team_count(session) -> int:
    home = {r[0] for r in session.query(GameResultRow.home_team_id).distinct().all()}
    away = {r[0] for r in session.query(GameResultRow.away_team_id).distinct().all()}
    return len((home | away) - {None})


@meta_bp.route("", methods=["GET"])
def meta_api():
    session = SessionLocal()
    try:
        weeks = stored_weeks(session)
        games = session.query(func.count(GameResultRow.id)).scalar() or 0

        return jsonify(
            {
                "season": SEASON,
                "minWeek": MIN_WEEK,
                "maxWeek": MAX_WEEK,
                "currentWeek": get_current_week(session),
                "completedWeeks": weeks,
                "latestCompletedWeek": max(weeks) if weeks else None,
                "gamesStored": int(games),
                "teamCount": _team_count(session),
            }
        )
    finally:
        session.close()
