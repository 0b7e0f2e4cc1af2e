from datetime import datetime, timezone

from analysis.preprocess import calculate_team_analytics, preprocess_all_analytics
from builders import game, log


def _log():
    return log(
        game(1, "g1", "A", "B", 24, 17, spread=3, favored="A"),
        game(2, "g2", "C", "A", 27, 20, spread=3, favored="C"),
        game(2, "g3", "B", "D", 13, 13),
    )


def test_team_records():
    a = calculate_team_analytics("A", _log(), 1, 2)

    assert a["gamesPlayed"] == 2
    assert a["seasonRecord"] == {"wins": 1, "losses": 1, "ties": 0, "formatted": "1-1", "percentage": "50.0"}
    assert a["spreadRecord"] == {"wins": 1, "losses": 1, "pushes": 0, "percentage": "50.0"}
    assert a["favoriteRecord"]["percentage"] == "100.0"
    assert a["underdogRecord"]["losses"] == 1
    assert a["homeRecord"]["wins"] == 1
    assert a["awayRecord"]["losses"] == 1


def test_ties_show_in_formatted_record():
    b = calculate_team_analytics("B", _log(), 1, 2)
    assert b["seasonRecord"]["formatted"] == "0-1-1"
    # untied game had a line, the tie did not
    assert b["spreadRecord"]["losses"] == 1


def test_cover_stats():
    overall = calculate_team_analytics("A", _log(), 1, 2)["coverStats"]["overall"]

    assert overall["mean"] == 0.0
    assert overall["median"] == 0.0
    assert overall["maxCover"] == {"value": 4.0, "week": 1, "opponent": "B", "spread": -3.0, "covered": True}
    assert overall["maxMiss"]["value"] == -4.0
    assert overall["maxMiss"]["opponent"] == "C"
    assert overall["maxMiss"]["spread"] == 3.0


def test_cover_stats_empty_context():
    stats = calculate_team_analytics("D", _log(), 1, 2)["coverStats"]["favorite"]
    assert stats == {"mean": None, "median": None, "maxCover": None, "maxMiss": None}


def test_points_and_timeline():
    a = calculate_team_analytics("A", _log(), 1, 2)
    scored = a["pointsStats"]["scored"]

    assert scored["stats"] == {"mean": 22.0, "median": 22.0, "max": 24.0, "min": 20.0}
    assert scored["home"] == [24.0]
    assert scored["road"] == [20.0]
    assert [w["week"] for w in a["weeklyPerformance"]] == [1, 2]
    assert a["weeklyPerformance"][0]["covered"] is True
    assert a["metrics"]["gamesPlayed"] == 2


def test_range_limits_games():
    a = calculate_team_analytics("A", _log(), 2, 2)
    assert a["gamesPlayed"] == 1
    assert a["seasonRecord"]["formatted"] == "0-1"


def test_preprocess_all_teams():
    now = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)
    out = preprocess_all_analytics(_log(), now=now)

    assert set(out) == {"A", "B", "C", "D"}
    entry = out["A"]
    assert entry["weekRange"] == {"start": 1, "end": 2}
    assert entry["lastUpdated"] == now.isoformat()
    assert entry["metrics"] == entry["analytics"]["metrics"]
    assert "score" not in entry["teamInfo"]
    assert entry["teamInfo"]["abbreviation"] == "A"


def test_preprocess_empty_log():
    assert preprocess_all_analytics({}) == {}
