from __future__ import annotations

from typing import Optional

from .constants import (
    HIGH_CONFIDENCE_MIN,
    MEDIUM_CONFIDENCE_MIN,
    PICK_FAVORITE_MIN,
    PICK_UNDERDOG_MAX,
    UPCOMING_GAME_METRICS,
)
from .models import GameResult, TeamMetricsSnapshot, UpcomingGameConfidence
from .outcome import metric_value


def confidence_tier(weighted_confidence: float) -> str:
    if weighted_confidence >= HIGH_CONFIDENCE_MIN:
        return "high"
    if weighted_confidence >= MEDIUM_CONFIDENCE_MIN:
        return "medium"
    return "low"


def _degraded(game: GameResult, reason: str) -> UpcomingGameConfidence:
    return UpcomingGameConfidence(
        game_id=game.game_id,
        confidence="low",
        confidence_score=0,
        reason=reason,
        spread=game.spread.value if game.spread else None,
        analyzed=False,
    )


def analyze_upcoming_game(
    game: GameResult,
    home_metrics: Optional[TeamMetricsSnapshot],
    away_metrics: Optional[TeamMetricsSnapshot],
) -> UpcomingGameConfidence:
    """
    How strongly do the metrics back the favorite in a game not yet played?

    Every weighted metric compares the favorite's value to the underdog's;
    the share of weight on the favorite's side is the confidence score.
    Missing spread or metrics return a zero-confidence result, not an error.
    """
    if game.spread is None:
        return _degraded(game, "No spread set for this game")
    if home_metrics is None or away_metrics is None:
        return _degraded(game, "Metrics unavailable for one or both teams")

    home_favored = game.spread.favored_team == game.home_team.id
    if home_favored:
        favored_team, underdog_team = game.home_team, game.away_team
        favored_metrics, underdog_metrics = home_metrics, away_metrics
        favored_role, underdog_role = "home", "away"
    else:
        favored_team, underdog_team = game.away_team, game.home_team
        favored_metrics, underdog_metrics = away_metrics, home_metrics
        favored_role, underdog_role = "away", "home"

    supporting = 0
    total_weight = 0.0
    weighted_support = 0.0

    for metric in UPCOMING_GAME_METRICS:
        favored_value = metric_value(favored_metrics, metric.key, favored_role)
        underdog_value = metric_value(
            underdog_metrics, metric.underdog_key or metric.key, underdog_role
        )
        diff = favored_value - underdog_value
        supports_favorite = diff > 0 if metric.higher_is_better else diff < 0

        total_weight += metric.weight
        if supports_favorite:
            supporting += 1
            weighted_support += metric.weight

    count = len(UPCOMING_GAME_METRICS)
    weighted_confidence = (weighted_support / total_weight) * 100 if total_weight else 0.0
    alignment = (supporting / count) * 100 if count else 0.0

    if weighted_confidence >= PICK_FAVORITE_MIN:
        pick, reason = favored_team, "Metrics strongly support the favorite"
    elif weighted_confidence <= PICK_UNDERDOG_MAX:
        pick, reason = underdog_team, "Metrics favor the underdog"
    else:
        pick, reason = None, "Mixed signals - proceed with caution"

    return UpcomingGameConfidence(
        game_id=game.game_id,
        confidence=confidence_tier(weighted_confidence),
        confidence_score=int(round(weighted_confidence)),
        weighted_confidence=weighted_confidence,
        metrics_alignment=int(round(alignment)),
        metrics_supporting=supporting,
        metrics_against=count - supporting,
        suggested_team=pick,
        reason=reason,
        favored_team=favored_team,
        underdog_team=underdog_team,
        spread=game.spread.value,
    )
