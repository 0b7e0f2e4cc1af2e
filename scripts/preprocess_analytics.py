# scripts/preprocess_analytics.py
"""
Rebuild the team_analytics cache from every stored final.

Run after each week's games have been synced:

    python scripts/preprocess_analytics.py
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from db import SessionLocal, init_db  # noqa: E402
from webapp.services.store import stored_weeks  # noqa: E402
from webapp.services.team_analytics_cache import rebuild_team_analytics_cache  # noqa: E402


def main() -> int:
    p = argparse.ArgumentParser(description="Recompute season analytics for every team")
    p.parse_args()

    init_db()
    session = SessionLocal()
    try:
        weeks = stored_weeks(session)
        if not weeks:
            print("[WARN] no completed games stored; nothing to preprocess")
            return 1

        n = rebuild_team_analytics_cache(session)
        session.commit()
        print(f"[OK] weeks {min(weeks)}-{max(weeks)} | team_analytics rows={n}")
        return 0
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
