# webapp/services/team_analytics_cache.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from analysis.preprocess import preprocess_all_analytics
from db import TeamAnalytics
from webapp.services.store import get_all_results

logger = logging.getLogger(__name__)


def rebuild_team_analytics_cache(session: Session) -> int:
    """
    Recompute season analytics for every team from the stored game log
    and replace the team_analytics rows.

    Returns number of rows written. Does not commit.
    """
    game_log = get_all_results(session)
    entries = preprocess_all_analytics(game_log)

    session.query(TeamAnalytics).delete(synchronize_session=False)
    session.flush()

    for team_id, entry in entries.items():
        session.add(
            TeamAnalytics(
                team_id=str(team_id),
                team_info=entry["teamInfo"],
                analytics=entry["analytics"],
                metrics=entry["metrics"],
                week_start=int(entry["weekRange"]["start"]),
                week_end=int(entry["weekRange"]["end"]),
                last_updated=entry["lastUpdated"],
            )
        )

    logger.info("team analytics cache rebuilt for %d teams", len(entries))
    return len(entries)


def _row_to_entry(r: TeamAnalytics) -> Dict[str, Any]:
    return {
        "teamInfo": r.team_info or {},
        "analytics": r.analytics or {},
        "metrics": r.metrics,
        "weekRange": {"start": r.week_start, "end": r.week_end},
        "lastUpdated": r.last_updated,
    }


def load_team_analytics(session: Session) -> Dict[str, Dict[str, Any]]:
    rows = session.query(TeamAnalytics).all()
    return {str(r.team_id): _row_to_entry(r) for r in rows}


def get_team_analytics(session: Session, team_id: str) -> Optional[Dict[str, Any]]:
    r = session.query(TeamAnalytics).filter(TeamAnalytics.team_id == str(team_id)).first()
    return _row_to_entry(r) if r is not None else None
