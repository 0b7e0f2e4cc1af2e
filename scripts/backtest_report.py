# scripts/backtest_report.py
"""
Print which metrics have best predicted ATS winners over a week range.

    python scripts/backtest_report.py --start 2 --end 10
    python scripts/backtest_report.py --json > report.json
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from analysis import backtest_week_range  # noqa: E402
from analysis.metrics import log_week_bounds  # noqa: E402
from db import SessionLocal  # noqa: E402
from webapp.config import BACKTEST_WORKERS  # noqa: E402
from webapp.services.store import get_all_results  # noqa: E402


def main() -> int:
    p = argparse.ArgumentParser()
    p.add_argument("--start", type=int, default=None, help="First week (default: first stored week)")
    p.add_argument("--end", type=int, default=None, help="Last week (default: last stored week)")
    p.add_argument("--workers", type=int, default=BACKTEST_WORKERS)
    p.add_argument("--json", action="store_true", help="Dump the full summary as JSON")
    args = p.parse_args()

    session = SessionLocal()
    try:
        game_log = get_all_results(session)
    finally:
        session.close()

    bounds = log_week_bounds(game_log)
    if bounds is None:
        print("[ERR] no completed games stored")
        return 1

    start = args.start if args.start is not None else bounds[0]
    end = args.end if args.end is not None else bounds[1]
    summary = backtest_week_range(start, end, game_log, workers=args.workers)

    if args.json:
        print(json.dumps(summary.to_json(), indent=2))
        return 0

    print(
        f"[BACKTEST] weeks {start}-{end} | analyzed={summary.games_analyzed} "
        f"skipped={summary.games_skipped} pushes={summary.pushes}"
    )
    print(f"{'metric':<28} {'category':<12} {'right':>5} {'wrong':>5} {'acc%':>6} {'imp':>6}")
    for agg in summary.metric_rankings:
        print(
            f"{agg.metric:<28} {agg.category:<12} {agg.times_correct:>5} {agg.times_wrong:>5} "
            f"{agg.accuracy:>6.1f} {agg.avg_importance:>6.1f}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
