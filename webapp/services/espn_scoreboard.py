# webapp/services/espn_scoreboard.py
"""
ESPN NFL scoreboard client.

Public entrypoints:

    fetch_scoreboard(start_date, end_date)   -> [snapshot, ...]
    fetch_week_games(week, season)           -> [snapshot, ...]
    finalize_completed_games(session, week, snapshots)

A snapshot is the live-game shape the weekly summary merges in:

    {id, week, name, shortName, date, status, statusDetail,
     homeTeam: {id, name, abbreviation, color, alternateColor, score, record},
     awayTeam: {...}}

`status` is ESPN's state: "pre", "in" or "post".

This module does no analytics and does not commit.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests
from sqlalchemy.orm import Session

from analysis.models import GameResult
from webapp.config import ESPN_SCOREBOARD_URL, ESPN_TIMEOUT_SECONDS
from webapp.services.store import get_spread, record_game_result

logger = logging.getLogger(__name__)


# ---------- Week window ----------


def week_date_range(today: Optional[date] = None) -> Tuple[str, str]:
    """
    Thursday-Monday window for the NFL week around `today`, as YYYYMMDD.

    Tuesday and Wednesday look ahead to the coming Thursday; Thursday
    through Monday look back to the Thursday that started the week.
    """
    today = today or date.today()
    weekday = today.weekday()  # Monday = 0

    offset = -4 if weekday == 0 else 3 - weekday
    thursday = today + timedelta(days=offset)
    monday = thursday + timedelta(days=4)

    return thursday.strftime("%Y%m%d"), monday.strftime("%Y%m%d")


# ---------- Payload transform ----------


def _competitor(comp: Dict[str, Any]) -> Dict[str, Any]:
    team = comp.get("team") or {}
    records = comp.get("records") or comp.get("record") or []
    record = ""
    if isinstance(records, list) and records:
        record = records[0].get("summary") or records[0].get("displayValue") or ""

    score = comp.get("score")
    return {
        "id": str(comp.get("id") or team.get("id")),
        "name": team.get("displayName") or "",
        "abbreviation": team.get("abbreviation") or "",
        "color": team.get("color"),
        "alternateColor": team.get("alternateColor"),
        "score": float(score) if score not in (None, "") else None,
        "record": record,
    }


def transform_event(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    competitions = event.get("competitions") or []
    if not competitions:
        return None
    competition = competitions[0]

    competitors = competition.get("competitors") or []
    home = next((c for c in competitors if c.get("homeAway") == "home"), None)
    away = next((c for c in competitors if c.get("homeAway") == "away"), None)
    if home is None or away is None:
        return None

    status_type = (competition.get("status") or event.get("status") or {}).get("type") or {}
    week = (event.get("week") or {}).get("number")

    return {
        "id": str(event.get("id")),
        "week": int(week) if week is not None else None,
        "name": event.get("name"),
        "shortName": event.get("shortName"),
        "date": event.get("date"),
        "status": status_type.get("state") or "pre",
        "statusDetail": status_type.get("shortDetail") or status_type.get("description"),
        "homeTeam": _competitor(home),
        "awayTeam": _competitor(away),
    }


def parse_scoreboard(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    games = []
    for event in payload.get("events") or []:
        snap = transform_event(event)
        if snap is not None:
            games.append(snap)
    return games


# ---------- HTTP ----------


def _get(params: Dict[str, Any], http: Optional[requests.Session] = None) -> Dict[str, Any]:
    client = http or requests
    logger.info("fetching ESPN scoreboard params=%s", params)
    r = client.get(ESPN_SCOREBOARD_URL, params=params, timeout=ESPN_TIMEOUT_SECONDS)
    r.raise_for_status()
    return r.json()


def fetch_scoreboard(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    http: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    if start_date is None or end_date is None:
        start_date, end_date = week_date_range()
    return parse_scoreboard(_get({"dates": f"{start_date}-{end_date}"}, http))


def fetch_week_games(
    week: int,
    season: int,
    http: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    # seasontype 2 = regular season
    params = {"dates": int(season), "seasontype": 2, "week": int(week)}
    games = parse_scoreboard(_get(params, http))
    for g in games:
        if g.get("week") is None:
            g["week"] = int(week)
    return games


# ---------- Finalization ----------


def finalize_completed_games(
    session: Session,
    week: int,
    snapshots: Iterable[Dict[str, Any]],
) -> int:
    """
    Append every finished ("post") snapshot to the game result store with
    the spread stored for it. Already-stored games are left alone.

    Returns number of new rows.
    """
    written = 0
    for snap in snapshots:
        if snap.get("status") != "post":
            continue

        game_id = str(snap["id"])
        spread = get_spread(session, week, game_id)
        data = dict(snap)
        data["status"] = "post"
        data["spread"] = None

        game = GameResult.from_json(data, week=week)
        if spread is not None:
            try:
                game = GameResult.from_json(
                    dict(data, spread=spread.to_json()), week=week
                )
            except ValueError as e:
                logger.warning("game %s: stored spread ignored (%s)", game_id, e)

        if record_game_result(session, game):
            written += 1

    return written
