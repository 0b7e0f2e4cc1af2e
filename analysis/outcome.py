from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from .constants import (
    COMPLETED_GAME_METRICS,
    CORRECT_PREDICTION_BOOST,
    IMPORTANCE_CAP,
    LOCATION_LABELS,
    SCALE_DEFAULT,
    SCALE_WIN_PCT,
    MetricDefinition,
)
from .errors import MissingMetrics, MissingSpread
from .metrics import classify_cover, cover_margin
from .models import GameAnalysis, GameResult, MetricCorrelation, TeamMetricsSnapshot

_SCALES: Dict[str, float] = {m.name: m.scale for m in COMPLETED_GAME_METRICS}
_SCALES.update({label: SCALE_WIN_PCT for label in LOCATION_LABELS.values()})


def scale_for_metric(metric_name: str) -> float:
    return _SCALES.get(metric_name, SCALE_DEFAULT)


def calculate_importance_score(metric_name: str, strength: float, predicted_correctly: bool) -> int:
    """
    0-100 score blending how far apart the two sides were on a metric with
    whether the metric pointed at the side that covered.
    """
    try:
        strength = abs(float(strength))
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(strength):
        return 0

    score = min(strength * scale_for_metric(metric_name), IMPORTANCE_CAP)
    if predicted_correctly:
        score *= CORRECT_PREDICTION_BOOST

    # half-up rounding, then clamp
    rounded = int(math.floor(score + 0.5))
    return int(max(0, min(rounded, int(IMPORTANCE_CAP))))


def metric_value(snapshot: TeamMetricsSnapshot, key: str, role: str) -> float:
    """
    Read a metric off a snapshot. `role` is "home"/"away" for the side the
    team actually played; it picks the location win % for key "location".
    """
    if key == "location":
        return float(snapshot.home_win_pct if role == "home" else snapshot.away_win_pct)

    value: Any = snapshot
    for part in key.split("."):
        value = getattr(value, part)
    return float(value or 0.0)


def _applies(metric: MetricDefinition, winner_favored: bool) -> bool:
    if metric.applies == "winner_favored":
        return winner_favored
    if metric.applies == "winner_underdog":
        return not winner_favored
    return True


def _correlate(
    metric: MetricDefinition,
    winner_value: float,
    loser_value: float,
    label: Optional[str] = None,
) -> MetricCorrelation:
    name = label or metric.name
    diff = winner_value - loser_value
    predicted = diff > 0 if metric.higher_is_better else diff < 0
    strength = abs(diff)
    return MetricCorrelation(
        metric=name,
        category=metric.category,
        winner_value=winner_value,
        loser_value=loser_value,
        difference=diff,
        predicted_correctly=predicted,
        strength=strength,
        importance_score=calculate_importance_score(name, strength, predicted),
    )


def analyze_completed_game(
    game: GameResult,
    home_metrics: TeamMetricsSnapshot,
    away_metrics: TeamMetricsSnapshot,
) -> GameAnalysis:
    """
    Decide who covered and score every applicable metric on whether it
    pointed at that side.

    Pushes come back with is_push=True and no correlations; they say
    nothing about which side a metric favored.
    """
    if game.spread is None:
        raise MissingSpread("Game has no spread", week=game.week, game_id=game.game_id)
    if home_metrics is None or away_metrics is None:
        raise MissingMetrics(
            "Metrics missing for one or both teams", week=game.week, game_id=game.game_id
        )

    spread = game.spread
    actual_margin = game.home_score - game.away_score
    home_favored = spread.favored_team == game.home_team.id

    home_cover = cover_margin(actual_margin, spread.value, home_favored)
    away_cover = cover_margin(-actual_margin, spread.value, not home_favored)

    if classify_cover(home_cover) == "push":
        return GameAnalysis(is_push=True, spread=spread.value, actual_margin=actual_margin)

    correct_pick = "home" if home_cover > 0 else "away"
    loser_role = "away" if correct_pick == "home" else "home"

    if correct_pick == "home":
        winner_team, loser_team = game.home_team, game.away_team
        winner_metrics, loser_metrics = home_metrics, away_metrics
        winner_favored = home_favored
    else:
        winner_team, loser_team = game.away_team, game.home_team
        winner_metrics, loser_metrics = away_metrics, home_metrics
        winner_favored = not home_favored

    correlations: List[MetricCorrelation] = []
    for metric in COMPLETED_GAME_METRICS:
        if not _applies(metric, winner_favored):
            continue

        label = LOCATION_LABELS[correct_pick] if metric.key == "location" else None
        correlations.append(
            _correlate(
                metric,
                metric_value(winner_metrics, metric.key, correct_pick),
                metric_value(loser_metrics, metric.key, loser_role),
                label=label,
            )
        )

    # stable: ties keep table order
    correlations.sort(key=lambda c: c.importance_score, reverse=True)

    supporting = sum(1 for c in correlations if c.predicted_correctly)
    avg_importance = (
        sum(c.importance_score for c in correlations) / len(correlations)
        if correlations
        else 0.0
    )

    return GameAnalysis(
        is_push=False,
        spread=spread.value,
        actual_margin=actual_margin,
        correct_pick=correct_pick,
        winner_team=winner_team,
        loser_team=loser_team,
        cover_margin=home_cover if correct_pick == "home" else away_cover,
        metric_correlations=correlations,
        metrics_supporting=supporting,
        metrics_against=len(correlations) - supporting,
        avg_importance_score=avg_importance,
    )
