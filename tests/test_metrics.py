import pytest

from analysis.metrics import (
    classify_cover,
    collect_team_games,
    compute_metrics,
    compute_season_metrics,
    cover_margin,
)
from builders import game, log


def _two_week_log():
    return log(
        # A home, -3 favorite, wins by 7 -> covers by 4
        game(1, "g1", "A", "B", 24, 17, spread=3, favored="A"),
        # A away, +3 underdog, loses by 7 -> misses by 4
        game(2, "g2", "C", "A", 27, 20, spread=3, favored="C"),
    )


def test_favorite_covering_and_underdog_missing():
    assert cover_margin(10, 7, is_favorite=True) == 3
    assert classify_cover(3) == "win"

    assert cover_margin(-10, 7, is_favorite=False) == -3
    assert classify_cover(-3) == "loss"


def test_exact_spread_is_a_push():
    assert classify_cover(cover_margin(3.5, 3.5, is_favorite=True)) == "push"
    assert classify_cover(0.005) == "push"
    assert classify_cover(0.02) == "win"


def test_week_one_has_no_history():
    assert compute_metrics("A", 1, _two_week_log()) is None


def test_target_week_must_be_positive():
    with pytest.raises(ValueError):
        compute_metrics("A", 0, _two_week_log())


def test_point_in_time_snapshot():
    m = compute_metrics("A", 3, _two_week_log())

    assert m.games_played == 2
    assert m.spread_win_pct == 50.0
    assert m.favorite_win_pct == 100.0
    assert m.underdog_win_pct == 0.0
    assert m.home_win_pct == 100.0
    assert m.away_win_pct == 0.0
    assert m.avg_points_scored == 22.0
    assert m.avg_points_allowed == 22.0
    assert m.point_differential == 0.0
    assert m.avg_cover_margin == 0.0
    assert m.season_win_pct == 50.0
    assert m.recent_form.spread_wins == 1
    assert m.recent_form.avg_points == 22.0


def test_no_look_ahead():
    base = _two_week_log()
    before = compute_metrics("A", 3, base)

    later = dict(base)
    later[3] = {"g3": game(3, "g3", "A", "D", 45, 0, spread=1, favored="A")}
    later[4] = {"g4": game(4, "g4", "E", "A", 0, 38, spread=10, favored="E")}

    assert compute_metrics("A", 3, later) == before


def test_only_earlier_weeks_count():
    m = compute_metrics("A", 2, _two_week_log())
    assert m.games_played == 1
    assert m.spread_win_pct == 100.0


def test_games_without_a_line_count_for_points_only():
    game_log = log(
        game(1, "g1", "A", "B", 30, 10),
        game(2, "g2", "A", "C", 20, 10, spread=7, favored="A"),
    )
    m = compute_metrics("A", 3, game_log)

    assert m.games_played == 2
    assert m.avg_points_scored == 25.0
    # only the lined game is an ATS result
    assert m.spread_win_pct == 100.0
    assert m.avg_cover_margin == 3.0


def test_pushes_do_not_count_as_decided():
    game_log = log(
        game(1, "g1", "A", "B", 24, 17, spread=7, favored="A"),
        game(2, "g2", "A", "C", 30, 20, spread=3, favored="A"),
    )
    m = compute_metrics("A", 3, game_log)
    assert m.spread_win_pct == 100.0
    assert m.avg_cover_margin == 7.0


def test_recent_form_uses_last_three_games():
    game_log = log(
        game(1, "g1", "A", "B", 50, 0, spread=3, favored="A"),
        game(2, "g2", "A", "C", 10, 20, spread=3, favored="A"),
        game(3, "g3", "A", "D", 20, 10, spread=3, favored="A"),
        game(4, "g4", "A", "E", 30, 10, spread=3, favored="A"),
    )
    m = compute_metrics("A", 5, game_log)

    assert m.recent_form.avg_points == 20.0
    assert m.recent_form.avg_allowed == pytest.approx(40 / 3)
    assert m.recent_form.spread_wins == 2


def test_season_window_is_inclusive():
    game_log = _two_week_log()

    assert compute_season_metrics("A", game_log, 1, 2) == compute_metrics("A", 3, game_log)
    assert compute_season_metrics("A", game_log, 2, 2).games_played == 1
    assert compute_season_metrics("Z", game_log, 1, 2) is None


def test_collected_games_are_chronological():
    game_log = log(
        game(2, "g2", "C", "A", 27, 20, spread=3, favored="C"),
        game(1, "g1", "A", "B", 24, 17, spread=3, favored="A"),
    )
    weeks = [g.week for g in collect_team_games("A", game_log, 1, 2)]
    assert weeks == [1, 2]
