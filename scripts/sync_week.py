#!/usr/bin/env python3
# scripts/sync_week.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from db import SessionLocal, init_db  # noqa: E402
from webapp.config import SEASON  # noqa: E402
from webapp.services.espn_scoreboard import fetch_week_games, finalize_completed_games  # noqa: E402
from webapp.services.store import get_current_week  # noqa: E402
from webapp.services.team_analytics_cache import rebuild_team_analytics_cache  # noqa: E402


def main(season: int, week: Optional[int], preprocess: bool) -> int:
    init_db()
    session = SessionLocal()
    try:
        if week is None:
            week = get_current_week(session)

        print(f"[SYNC] season={season} week={week}")
        snapshots = fetch_week_games(week, season)
        final = sum(1 for s in snapshots if s.get("status") == "post")

        written = finalize_completed_games(session, week, snapshots)
        session.commit()
        print(f"[OK] week={week} | games={len(snapshots)} final={final} newly stored={written}")

        if preprocess and written:
            n = rebuild_team_analytics_cache(session)
            session.commit()
            print(f"[OK] team_analytics rows={n}")
        return 0

    except Exception as e:
        session.rollback()
        print(f"[ERR] Failed season={season} week={week}: {e!r}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--season", type=int, default=SEASON, help="Season year (default: SEASON from .env)")
    p.add_argument("--week", type=int, default=None, help="Week to sync (default: currentWeek setting)")
    p.add_argument("--preprocess", action="store_true", help="Rebuild team analytics if anything new was stored")
    args = p.parse_args()

    raise SystemExit(main(args.season, args.week, args.preprocess))
