import math

import pytest

from analysis.errors import MissingMetrics, MissingSpread
from analysis.models import RecentForm
from analysis.outcome import analyze_completed_game, calculate_importance_score
from builders import game, snap


def _home_favorite_covers():
    # home -3, wins by 10
    return game(2, "g", "H", "W", 27, 17, spread=3, favored="H")


def test_push_has_no_correlations():
    g = game(2, "g", "H", "W", 24, 17, spread=7, favored="H")
    a = analyze_completed_game(g, snap(), snap())

    assert a.is_push
    assert a.metric_correlations == []
    assert a.to_json()["metricCorrelations"] == []


def test_half_point_push():
    g = game(2, "g", "H", "W", 20.5, 17, spread=3.5, favored="H")
    assert analyze_completed_game(g, snap(), snap()).is_push


def test_home_favorite_cover():
    a = analyze_completed_game(
        _home_favorite_covers(),
        snap(spread_win_pct=70.0, home_win_pct=80.0),
        snap(spread_win_pct=40.0, away_win_pct=30.0),
    )

    assert not a.is_push
    assert a.correct_pick == "home"
    assert a.winner_team.id == "H"
    assert a.cover_margin == 7

    names = {c.metric for c in a.metric_correlations}
    assert "Favorite Win %" in names
    assert "Underdog Win %" not in names
    assert "Home Win %" in names
    assert len(a.metric_correlations) == 9

    spread_metric = next(c for c in a.metric_correlations if c.metric == "Spread Win %")
    assert spread_metric.predicted_correctly
    assert spread_metric.difference == 30.0


def test_underdog_cover_uses_underdog_and_away_metrics():
    # home -7 wins by 3: road dog covers
    g = game(2, "g", "H", "W", 20, 17, spread=7, favored="H")
    a = analyze_completed_game(g, snap(), snap(underdog_win_pct=75.0))

    assert a.correct_pick == "away"
    assert a.cover_margin == 4
    names = {c.metric for c in a.metric_correlations}
    assert "Underdog Win %" in names
    assert "Favorite Win %" not in names
    assert "Away Win %" in names


def test_supporting_plus_against_equals_evaluated():
    a = analyze_completed_game(
        _home_favorite_covers(),
        snap(spread_win_pct=70.0, avg_points_allowed=17.0, point_differential=4.0),
        snap(spread_win_pct=40.0, avg_points_allowed=20.0, avg_points_scored=30.0),
    )

    assert a.metrics_supporting + a.metrics_against == len(a.metric_correlations)
    mean = sum(c.importance_score for c in a.metric_correlations) / len(a.metric_correlations)
    assert a.avg_importance_score == pytest.approx(mean)


def test_lower_points_allowed_is_better():
    a = analyze_completed_game(
        _home_favorite_covers(),
        snap(avg_points_allowed=17.0),
        snap(avg_points_allowed=24.0),
    )
    allowed = next(c for c in a.metric_correlations if c.metric == "Avg Points Allowed")
    assert allowed.predicted_correctly


def test_correlations_sorted_by_importance():
    a = analyze_completed_game(
        _home_favorite_covers(),
        snap(spread_win_pct=90.0, avg_points_scored=28.0),
        snap(spread_win_pct=10.0),
    )
    scores = [c.importance_score for c in a.metric_correlations]
    assert scores == sorted(scores, reverse=True)


def test_analysis_is_pure():
    g = _home_favorite_covers()
    home, away = snap(spread_win_pct=65.0), snap(spread_win_pct=45.0)

    assert analyze_completed_game(g, home, away) == analyze_completed_game(g, home, away)


def test_missing_inputs_raise():
    g = game(2, "g", "H", "W", 27, 17)
    with pytest.raises(MissingSpread):
        analyze_completed_game(g, snap(), snap())
    with pytest.raises(MissingMetrics):
        analyze_completed_game(_home_favorite_covers(), None, snap())


def test_recent_form_ats_importance():
    a = analyze_completed_game(
        _home_favorite_covers(),
        snap(recent_form=RecentForm(spread_wins=2)),
        snap(recent_form=RecentForm(spread_wins=0)),
    )
    recent = next(c for c in a.metric_correlations if c.metric == "Recent Form (ATS)")
    assert recent.predicted_correctly
    assert recent.importance_score == 30


@pytest.mark.parametrize(
    "strength",
    [0, -25, 0.04, 3.3, 49.9, 1e9, -1e9, math.inf, math.nan],
)
@pytest.mark.parametrize("correct", [True, False])
def test_importance_is_bounded_int(strength, correct):
    score = calculate_importance_score("Spread Win %", strength, correct)
    assert isinstance(score, int)
    assert 0 <= score <= 100


def test_importance_scaling():
    assert calculate_importance_score("Spread Win %", 10, False) == 20
    assert calculate_importance_score("Avg Points Scored", 3, False) == 15
    assert calculate_importance_score("Avg Cover Margin", 2.5, True) == 11
    assert calculate_importance_score("Something Else", 10, False) == 20
    # capped before the boost, clamped after
    assert calculate_importance_score("Recent Form (Pts)", 50, True) == 100
