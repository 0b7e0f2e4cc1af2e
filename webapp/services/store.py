# webapp/services/store.py
"""
Storage glue for the pick'em pool.

Everything here takes a SQLAlchemy Session and does NOT commit; routes
and scripts own the transaction (commit/rollback/close).

The analytics core never sees rows: get_all_results() hands it a plain
{week: {gameId: GameResult}} mapping.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from analysis.models import GameResult, Spread, TeamRef
from db import GameResultRow, Player, Setting, SpreadRow
from webapp.config import DEFAULT_CURRENT_WEEK


# ---------- Game results (append-only) ----------


def _row_to_game(r: GameResultRow) -> GameResult:
    spread = None
    if r.spread_value is not None and r.favored_team:
        spread = Spread(value=float(r.spread_value), favored_team=str(r.favored_team))

    return GameResult(
        game_id=str(r.game_id),
        week=int(r.week),
        date=r.date,
        status="post",
        home_team=TeamRef(
            id=str(r.home_team_id),
            name=r.home_team_name or "",
            abbreviation=r.home_team_abbrev or "",
            score=float(r.home_score) if r.home_score is not None else None,
            color=r.home_team_color,
            alternate_color=r.home_team_alt_color,
        ),
        away_team=TeamRef(
            id=str(r.away_team_id),
            name=r.away_team_name or "",
            abbreviation=r.away_team_abbrev or "",
            score=float(r.away_score) if r.away_score is not None else None,
            color=r.away_team_color,
            alternate_color=r.away_team_alt_color,
        ),
        spread=spread,
    )


def get_week_results(session: Session, week: int) -> Dict[str, GameResult]:
    rows = (
        session.query(GameResultRow)
        .filter(GameResultRow.week == int(week))
        .order_by(GameResultRow.game_id.asc())
        .all()
    )
    return {str(r.game_id): _row_to_game(r) for r in rows}


def get_all_results(session: Session) -> Dict[int, Dict[str, GameResult]]:
    rows = (
        session.query(GameResultRow)
        .order_by(GameResultRow.week.asc(), GameResultRow.game_id.asc())
        .all()
    )
    out: Dict[int, Dict[str, GameResult]] = defaultdict(dict)
    for r in rows:
        out[int(r.week)][str(r.game_id)] = _row_to_game(r)
    return dict(out)


def stored_weeks(session: Session) -> List[int]:
    rows = session.query(GameResultRow.week).distinct().order_by(GameResultRow.week).all()
    return [int(w[0]) for w in rows if w[0] is not None]


def record_game_result(session: Session, game: GameResult) -> bool:
    """
    Append a finalized game. Returns False (and writes nothing) when the
    (week, gameId) pair is already stored.
    """
    exists = (
        session.query(GameResultRow.id)
        .filter(
            GameResultRow.week == int(game.week),
            GameResultRow.game_id == str(game.game_id),
        )
        .first()
    )
    if exists:
        return False

    home, away = game.home_team, game.away_team
    session.add(
        GameResultRow(
            week=int(game.week),
            game_id=str(game.game_id),
            date=game.date,
            home_team_id=home.id,
            home_team_name=home.name,
            home_team_abbrev=home.abbreviation,
            home_team_color=home.color,
            home_team_alt_color=home.alternate_color,
            home_score=home.score,
            away_team_id=away.id,
            away_team_name=away.name,
            away_team_abbrev=away.abbreviation,
            away_team_color=away.color,
            away_team_alt_color=away.alternate_color,
            away_score=away.score,
            spread_value=game.spread.value if game.spread else None,
            favored_team=game.spread.favored_team if game.spread else None,
        )
    )
    return True


# ---------- Spreads ----------


def _spread_json(r: SpreadRow) -> Dict[str, Any]:
    return {"value": r.value, "favoredTeam": r.favored_team}


def get_spreads(session: Session, week: int) -> Dict[str, Dict[str, Any]]:
    rows = session.query(SpreadRow).filter(SpreadRow.week == int(week)).all()
    return {str(r.game_id): _spread_json(r) for r in rows}


def get_all_spreads(session: Session) -> Dict[int, Dict[str, Dict[str, Any]]]:
    out: Dict[int, Dict[str, Dict[str, Any]]] = defaultdict(dict)
    for r in session.query(SpreadRow).order_by(SpreadRow.week.asc()).all():
        out[int(r.week)][str(r.game_id)] = _spread_json(r)
    return dict(out)


def get_spread(session: Session, week: int, game_id: str) -> Optional[Spread]:
    r = (
        session.query(SpreadRow)
        .filter(SpreadRow.week == int(week), SpreadRow.game_id == str(game_id))
        .first()
    )
    if r is None:
        return None
    return Spread.from_json(_spread_json(r))


def set_spread(
    session: Session,
    week: int,
    game_id: str,
    value: Optional[float],
    favored_team: Optional[str],
) -> SpreadRow:
    if value is not None and float(value) < 0:
        raise ValueError("spread must be >= 0; use favoredTeam for direction")

    row = (
        session.query(SpreadRow)
        .filter(SpreadRow.week == int(week), SpreadRow.game_id == str(game_id))
        .first()
    )
    if row is None:
        row = SpreadRow(week=int(week), game_id=str(game_id))
        session.add(row)

    row.value = float(value) if value is not None else None
    row.favored_team = str(favored_team) if favored_team not in (None, "") else None
    return row


# ---------- Players ----------


def player_to_json(p: Player) -> Dict[str, Any]:
    return {"name": p.name, "selections": dict(p.selections or {})}


def list_players(session: Session) -> List[Player]:
    return session.query(Player).order_by(Player.id.asc()).all()


def get_player(session: Session, name: str) -> Optional[Player]:
    return session.query(Player).filter(Player.name == name).first()


def upsert_player(session: Session, name: str, selections: Optional[Dict[str, Any]] = None) -> Player:
    player = get_player(session, name)
    if player is None:
        player = Player(name=name)
        session.add(player)
    player.selections = {str(k): v for k, v in (selections or {}).items()}
    return player


def set_selection(session: Session, name: str, game_id: str, team_id: Optional[str]) -> Optional[Player]:
    player = get_player(session, name)
    if player is None:
        return None
    # reassign so the JSON column is flagged dirty
    selections = dict(player.selections or {})
    selections[str(game_id)] = team_id
    player.selections = selections
    return player


def delete_player(session: Session, name: str) -> int:
    return session.query(Player).filter(Player.name == name).delete(synchronize_session=False)


# ---------- Settings ----------


def get_current_week(session: Session) -> int:
    row = session.query(Setting).filter(Setting.key == "currentWeek").first()
    if row is None or row.value is None:
        return DEFAULT_CURRENT_WEEK
    return int(row.value)


def set_current_week(session: Session, week: int) -> int:
    row = session.query(Setting).filter(Setting.key == "currentWeek").first()
    if row is None:
        row = Setting(key="currentWeek")
        session.add(row)
    row.value = str(int(week))
    return int(week)
