import logging

import pytest
import requests

from db import SessionLocal
from webapp import create_app
from webapp.services.store import record_game_result
from builders import game, live


@pytest.fixture()
def stored_games(clean_db):
    session = SessionLocal()
    try:
        for g in (
            game(1, "101", "A", "B", 24, 17, spread=3, favored="A"),
            game(1, "102", "C", "D", 20, 23, spread=2.5, favored="C"),
            game(2, "201", "A", "C", 28, 14, spread=4, favored="A"),
            game(2, "202", "B", "D", 17, 24, spread=3, favored="D"),
        ):
            record_game_result(session, g)
        session.commit()
    finally:
        session.close()


# ---------- meta / settings ----------


def test_meta(client, stored_games):
    res = client.get("/api/meta")
    assert res.status_code == 200

    payload = res.json
    assert payload["completedWeeks"] == [1, 2]
    assert payload["teamCount"] == 4
    assert payload["gamesStored"] == 4


def test_settings_round_trip(client, clean_db):
    assert client.get("/api/settings").json["currentWeek"] == 1

    assert client.post("/api/settings", json={"currentWeek": 6}).status_code == 200
    assert client.get("/api/settings").json["currentWeek"] == 6


@pytest.mark.parametrize("body", [{}, {"currentWeek": "x"}, {"currentWeek": 40}])
def test_settings_rejects_bad_week(client, clean_db, body):
    assert client.post("/api/settings", json=body).status_code == 400


# ---------- players ----------


def test_players_crud(client, clean_db):
    res = client.post("/api/players", json={"name": "Sam"})
    assert res.status_code == 201
    assert res.json == {"name": "Sam", "selections": {}}

    res = client.put("/api/players/Sam/selection", json={"gameId": "401", "teamId": "12"})
    assert res.status_code == 200
    assert res.json["selections"] == {"401": "12"}

    players = client.get("/api/players").json["players"]
    assert [p["name"] for p in players] == ["Sam"]

    assert client.delete("/api/players/Sam").status_code == 200
    assert client.get("/api/players").json["players"] == []


def test_players_errors(client, clean_db):
    assert client.post("/api/players", json={"name": "  "}).status_code == 400
    assert client.put("/api/players/Nobody/selection", json={"gameId": "1"}).status_code == 404
    assert client.delete("/api/players/Nobody").status_code == 404


# ---------- spreads ----------


def test_spreads(client, clean_db):
    res = client.post("/api/spreads", json={"week": 3, "gameId": "301", "value": 6.5, "favoredTeam": "A"})
    assert res.status_code == 200

    res = client.get("/api/spreads?week=3")
    assert res.json["spreads"] == {"301": {"value": 6.5, "favoredTeam": "A"}}


def test_negative_spread_rejected(client, clean_db):
    res = client.post("/api/spreads", json={"week": 3, "gameId": "301", "value": -3, "favoredTeam": "A"})
    assert res.status_code == 400
    assert client.post("/api/spreads", json={"gameId": "301"}).status_code == 400


# ---------- backtests ----------


def test_backtest_game_not_found(client, stored_games):
    res = client.get("/api/backtest/game/2/nope")
    assert res.status_code == 404
    assert res.json["gameId"] == "nope"


def test_backtest_game_without_history(client, stored_games):
    res = client.get("/api/backtest/game/1/101")
    assert res.status_code == 200
    assert res.json["error"].startswith("Insufficient")
    assert res.json["week"] == 1


def test_backtest_game(client, stored_games):
    res = client.get("/api/backtest/game/2/201")
    assert res.status_code == 200
    assert res.json["analysis"]["correctPick"] == "home"
    assert res.json["homeMetrics"]["gamesPlayed"] == 1


def test_backtest_range(client, stored_games):
    res = client.get("/api/backtest/range?startWeek=1&endWeek=2")
    assert res.status_code == 200
    assert res.json["gamesAnalyzed"] == 2
    assert res.json["gamesSkipped"] == 2

    assert client.get("/api/backtest/range?startWeek=3&endWeek=1").status_code == 400
    assert client.get("/api/backtest/range?startWeek=abc").status_code == 400


# ---------- analytics + summary ----------


def test_preprocess_then_team_analytics(client, stored_games):
    assert client.get("/api/analytics/team/A").status_code == 404

    res = client.post("/api/analytics/preprocess")
    assert res.status_code == 200
    assert res.json["teamsProcessed"] == 4

    res = client.get("/api/analytics/team/A")
    assert res.status_code == 200
    assert res.json["analytics"]["seasonRecord"]["formatted"] == "2-0"
    assert res.json["metrics"]["gamesPlayed"] == 2


def test_game_analytics(client, stored_games):
    res = client.get("/api/analytics/game/201?homeTeamId=A&awayTeamId=C&startWeek=1&endWeek=1")
    assert res.status_code == 200
    assert res.json["homeTeam"]["gamesPlayed"] == 1
    assert res.json["awayTeam"]["seasonRecord"]["formatted"] == "0-1"

    assert client.get("/api/analytics/game/201?homeTeamId=A").status_code == 400


def test_weekly_summary_without_feed(client, stored_games):
    res = client.get("/api/summary/week/2?live=0")
    assert res.status_code == 200
    assert res.json["completed"]["total"] == 2


def test_weekly_summary_merges_live_games(client, stored_games, monkeypatch):
    monkeypatch.setattr(
        "webapp.routes.analysis.fetch_week_games",
        lambda week, season: [live("301", "A", "D")],
    )
    res = client.get("/api/summary/week/3")
    assert res.status_code == 200
    assert res.json["upcoming"]["noAnalysis"]["count"] == 1


# ---------- live games ----------


def _feed_down(*args, **kwargs):
    raise requests.ConnectionError("feed unreachable")


def test_games_feed_error(client, clean_db, monkeypatch):
    monkeypatch.setattr("webapp.routes.games.fetch_week_games", _feed_down)
    res = client.get("/api/games?week=3")
    assert res.status_code == 502
    assert "feed unreachable" in res.json["details"]


def test_games_attach_spreads(client, clean_db, monkeypatch):
    monkeypatch.setattr(
        "webapp.routes.games.fetch_week_games",
        lambda week, season: [live("301", "A", "D")],
    )
    client.post("/api/spreads", json={"week": 3, "gameId": "301", "value": 2.5, "favoredTeam": "D"})

    res = client.get("/api/games?week=3")
    assert res.status_code == 200
    assert res.json["games"][0]["spread"] == {"value": 2.5, "favoredTeam": "D"}


def test_sync_stores_final_games(client, stored_games, monkeypatch):
    monkeypatch.setattr(
        "webapp.routes.games.fetch_week_games",
        lambda week, season: [
            live("301", "A", "D", status="post", home_score=31, away_score=10),
            live("302", "B", "C", status="in", home_score=7, away_score=0),
        ],
    )
    res = client.post("/api/games/sync", json={"week": 3})
    assert res.status_code == 200
    assert res.json["gamesFinalized"] == 1

    assert client.get("/api/meta").json["completedWeeks"] == [1, 2, 3]


def test_create_app_leaves_root_logger_alone(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda *a, **k: calls.append(k))
    create_app()
    assert calls == []
