from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .constants import RANKING_ACCURACY_TOLERANCE
from .errors import AnalyticsError, GameNotFound, InsufficientHistory, MissingSpread
from .metrics import GameLog, compute_metrics, week_games
from .models import BacktestRangeSummary, BacktestResult, MetricPerformanceAggregate
from .outcome import analyze_completed_game

logger = logging.getLogger(__name__)


def backtest_game(week: int, game_id: str, game_log: GameLog) -> BacktestResult:
    """
    Re-run a finished game with each team's metrics as they stood
    going into that week.

    Raises GameNotFound, InsufficientHistory or MissingSpread.
    """
    week = int(week)
    game_id = str(game_id)

    game = week_games(game_log, week).get(game_id)
    if game is None:
        raise GameNotFound("Game not found", week=week, game_id=game_id)

    home_metrics = compute_metrics(game.home_team.id, week, game_log)
    away_metrics = compute_metrics(game.away_team.id, week, game_log)

    if home_metrics is None or away_metrics is None:
        raise InsufficientHistory(
            "Insufficient historical data for one or both teams",
            week=week,
            game_id=game_id,
        )

    if game.spread is None:
        raise MissingSpread("No spread recorded for this game", week=week, game_id=game_id)

    return BacktestResult(
        week=week,
        game_id=game_id,
        game=game,
        home_metrics=home_metrics,
        away_metrics=away_metrics,
        analysis=analyze_completed_game(game, home_metrics, away_metrics),
    )


def _try_backtest(args: Tuple[int, str, GameLog]) -> Tuple[Optional[BacktestResult], Optional[str]]:
    week, game_id, game_log = args
    try:
        return backtest_game(week, game_id, game_log), None
    except AnalyticsError as e:
        return None, e.message


def _compare_rankings(a: MetricPerformanceAggregate, b: MetricPerformanceAggregate) -> int:
    if abs(a.accuracy - b.accuracy) > RANKING_ACCURACY_TOLERANCE:
        return -1 if a.accuracy > b.accuracy else 1
    if a.avg_importance == b.avg_importance:
        return 0
    return -1 if a.avg_importance > b.avg_importance else 1


def rank_metrics(results: List[BacktestResult]) -> List[MetricPerformanceAggregate]:
    """
    Accuracy per metric across analyzed (non-push) games, best first.
    """
    rows: List[Dict[str, Any]] = []
    for r in results:
        for mc in r.analysis.metric_correlations:
            rows.append(
                {
                    "metric": mc.metric,
                    "category": mc.category,
                    "correct": int(mc.predicted_correctly),
                    "importance": float(mc.importance_score),
                }
            )

    if not rows:
        return []

    df = pd.DataFrame(rows)
    grouped = (
        df.groupby(["metric", "category"], sort=False, as_index=False)
        .agg(
            times_correct=("correct", "sum"),
            games=("correct", "size"),
            total_importance=("importance", "sum"),
        )
    )

    aggregates = [
        MetricPerformanceAggregate(
            metric=str(row["metric"]),
            category=str(row["category"]),
            times_correct=int(row["times_correct"]),
            times_wrong=int(row["games"]) - int(row["times_correct"]),
            total_importance=float(row["total_importance"]),
        )
        for _, row in grouped.iterrows()
    ]

    return sorted(aggregates, key=cmp_to_key(_compare_rankings))


def backtest_week_range(
    start_week: int,
    end_week: int,
    game_log: GameLog,
    workers: int = 1,
) -> BacktestRangeSummary:
    """
    Backtest every stored game in [start_week, end_week] and aggregate
    how often each metric pointed at the side that covered.

    Games that cannot be analyzed (no history, no spread) and pushes are
    skipped. workers > 1 spreads the per-game work over threads; output
    order is the same either way.
    """
    start_week = int(start_week)
    end_week = int(end_week)
    if start_week > end_week:
        raise ValueError(f"startWeek ({start_week}) is after endWeek ({end_week})")

    jobs: List[Tuple[int, str, GameLog]] = []
    for week in range(start_week, end_week + 1):
        for game_id in sorted(week_games(game_log, week)):
            jobs.append((week, game_id, game_log))

    if workers and workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(_try_backtest, jobs))
    else:
        outcomes = [_try_backtest(job) for job in jobs]

    results: List[BacktestResult] = []
    skipped = 0
    pushes = 0

    for (week, game_id, _), (result, error) in zip(jobs, outcomes):
        if result is None:
            skipped += 1
            logger.debug("backtest skipped week=%s game=%s: %s", week, game_id, error)
            continue
        if result.analysis.is_push:
            pushes += 1
            continue
        results.append(result)

    return BacktestRangeSummary(
        start_week=start_week,
        end_week=end_week,
        results=results,
        metric_rankings=rank_metrics(results),
        games_skipped=skipped,
        pushes=pushes,
    )
