from datetime import date

import pytest

from webapp.services.espn_scoreboard import (
    fetch_week_games,
    finalize_completed_games,
    parse_scoreboard,
    week_date_range,
)
from webapp.services.store import get_week_results, set_spread


def _event(event_id, state, home=("1", "KC", "24"), away=("2", "BUF", "20"), week=3):
    def comp(side, values):
        team_id, abbrev, score = values
        return {
            "id": team_id,
            "homeAway": side,
            "score": score,
            "team": {"id": team_id, "displayName": f"Team {abbrev}", "abbreviation": abbrev, "color": "000000"},
            "records": [{"summary": "2-0"}],
        }

    return {
        "id": event_id,
        "name": f"{away[1]} at {home[1]}",
        "date": "2025-09-21T17:00Z",
        "week": {"number": week},
        "competitions": [
            {
                "competitors": [comp("home", home), comp("away", away)],
                "status": {"type": {"state": state, "shortDetail": "Final" if state == "post" else "1:00 PM"}},
            }
        ],
    }


class _FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class _FakeHttp:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return _FakeResponse(self.payload)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 9, 9), ("20250911", "20250915")),   # Tuesday looks ahead
        (date(2025, 9, 10), ("20250911", "20250915")),  # Wednesday
        (date(2025, 9, 11), ("20250911", "20250915")),  # Thursday
        (date(2025, 9, 14), ("20250911", "20250915")),  # Sunday
        (date(2025, 9, 15), ("20250911", "20250915")),  # Monday night
    ],
)
def test_week_date_range(today, expected):
    assert week_date_range(today) == expected


def test_parse_scoreboard():
    games = parse_scoreboard({"events": [_event("401", "post"), {"id": "bad", "competitions": []}]})

    assert len(games) == 1
    g = games[0]
    assert g["id"] == "401"
    assert g["week"] == 3
    assert g["status"] == "post"
    assert g["statusDetail"] == "Final"
    assert g["homeTeam"]["abbreviation"] == "KC"
    assert g["homeTeam"]["score"] == 24.0
    assert g["awayTeam"]["record"] == "2-0"


def test_fetch_week_games_params():
    http = _FakeHttp({"events": [_event("401", "pre", week=None)]})
    games = fetch_week_games(5, 2025, http=http)

    assert http.calls[0]["params"] == {"dates": 2025, "seasontype": 2, "week": 5}
    assert http.calls[0]["timeout"] is not None
    assert games[0]["week"] == 5


def test_finalize_only_stores_final_games(db_session):
    set_spread(db_session, 3, "401", 3.5, "1")
    db_session.flush()
    snapshots = parse_scoreboard({"events": [_event("401", "post"), _event("402", "in")]})

    assert finalize_completed_games(db_session, 3, snapshots) == 1
    db_session.flush()

    stored = get_week_results(db_session, 3)
    assert list(stored) == ["401"]
    assert stored["401"].spread.value == 3.5
    assert stored["401"].spread.favored_team == "1"
    assert stored["401"].home_score == 24.0


def test_finalize_is_append_only(db_session):
    first = parse_scoreboard({"events": [_event("401", "post")]})
    finalize_completed_games(db_session, 3, first)
    db_session.flush()

    corrected = parse_scoreboard({"events": [_event("401", "post", home=("1", "KC", "99"))]})
    assert finalize_completed_games(db_session, 3, corrected) == 0
    db_session.flush()
    assert get_week_results(db_session, 3)["401"].home_score == 24.0


def test_finalize_ignores_spread_for_other_team(db_session):
    set_spread(db_session, 3, "401", 3, "77")
    db_session.flush()
    snapshots = parse_scoreboard({"events": [_event("401", "post")]})

    assert finalize_completed_games(db_session, 3, snapshots) == 1
    db_session.flush()
    assert get_week_results(db_session, 3)["401"].spread is None
