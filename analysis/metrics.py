from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Mapping, Optional, Tuple

from .constants import PUSH_EPSILON, RECENT_FORM_GAMES
from .models import GameResult, RecentForm, TeamMetricsSnapshot, TeamRef

# week -> game id -> GameResult
GameLog = Mapping[int, Mapping[str, GameResult]]


# ---------- ATS primitives ----------


def cover_margin(actual_margin: float, spread_value: float, is_favorite: bool) -> float:
    """
    Margin adjusted by the spread from one team's point of view.
    Favorites give the points, underdogs get them.
    """
    if is_favorite:
        return actual_margin - spread_value
    return actual_margin + spread_value


def classify_cover(margin: float) -> str:
    if abs(margin) < PUSH_EPSILON:
        return "push"
    return "win" if margin > 0 else "loss"


# ---------- Game log views ----------


def week_games(game_log: GameLog, week: int) -> Mapping[str, GameResult]:
    games = game_log.get(week)
    if games is None:
        games = game_log.get(str(week))  # type: ignore[call-overload]
    return games or {}


def iter_week_range(game_log: GameLog, start_week: int, end_week: int) -> Iterator[GameResult]:
    """
    Yields games for weeks start_week..end_week inclusive, week order then game id.
    """
    for week in range(int(start_week), int(end_week) + 1):
        games = week_games(game_log, week)
        for game_id in sorted(games):
            yield games[game_id]


def log_week_bounds(game_log: GameLog) -> Optional[Tuple[int, int]]:
    weeks = [int(w) for w, games in game_log.items() if games]
    if not weeks:
        return None
    return min(weeks), max(weeks)


@dataclass(frozen=True)
class TeamGame:
    """
    A finalized game seen from one team's side.
    """

    week: int
    game_id: str
    date: Optional[str]
    is_home: bool
    team_score: float
    opponent_score: float
    opponent: TeamRef
    spread_value: Optional[float] = None
    is_favorite: bool = False
    cover_margin: Optional[float] = None
    ats_result: Optional[str] = None

    @property
    def actual_margin(self) -> float:
        return self.team_score - self.opponent_score


def team_game_view(game: GameResult, team_id: str) -> TeamGame:
    is_home = game.home_team.id == team_id
    team_score = game.home_score if is_home else game.away_score
    opponent_score = game.away_score if is_home else game.home_score
    opponent = game.away_team if is_home else game.home_team

    spread_value: Optional[float] = None
    is_favorite = False
    margin: Optional[float] = None
    result: Optional[str] = None

    if game.spread is not None:
        spread_value = float(game.spread.value)
        is_favorite = game.spread.favored_team == team_id
        margin = cover_margin(team_score - opponent_score, spread_value, is_favorite)
        result = classify_cover(margin)

    return TeamGame(
        week=int(game.week),
        game_id=game.game_id,
        date=game.date,
        is_home=is_home,
        team_score=team_score,
        opponent_score=opponent_score,
        opponent=opponent,
        spread_value=spread_value,
        is_favorite=is_favorite,
        cover_margin=margin,
        ats_result=result,
    )


def collect_team_games(
    team_id: str,
    game_log: GameLog,
    start_week: int,
    end_week: int,
    inclusive: bool = True,
) -> List[TeamGame]:
    """
    Every game the team played in [start_week, end_week] (inclusive=True)
    or [start_week, end_week) (inclusive=False), in chronological order.
    """
    team_id = str(team_id)
    last_week = int(end_week) if inclusive else int(end_week) - 1

    games: List[TeamGame] = []
    for game in iter_week_range(game_log, start_week, last_week):
        if game.involves(team_id):
            games.append(team_game_view(game, team_id))

    games.sort(key=lambda g: (g.week, g.date or "", g.game_id))
    return games


# ---------- Aggregation ----------


class _Tally:
    __slots__ = ("wins", "losses", "pushes")

    def __init__(self):
        self.wins = 0
        self.losses = 0
        self.pushes = 0

    def record(self, result: str) -> None:
        if result == "win":
            self.wins += 1
        elif result == "loss":
            self.losses += 1
        else:
            self.pushes += 1

    def pct(self) -> float:
        decided = self.wins + self.losses
        return (self.wins / decided) * 100 if decided else 0.0


def _recent_form(games: List[TeamGame]) -> RecentForm:
    recent = games[-RECENT_FORM_GAMES:]
    if not recent:
        return RecentForm()
    return RecentForm(
        avg_points=sum(g.team_score for g in recent) / len(recent),
        avg_allowed=sum(g.opponent_score for g in recent) / len(recent),
        spread_wins=sum(1 for g in recent if g.ats_result == "win"),
    )


def snapshot_from_games(games: List[TeamGame]) -> Optional[TeamMetricsSnapshot]:
    if not games:
        return None

    overall = _Tally()
    favorite = _Tally()
    underdog = _Tally()
    home = _Tally()
    road = _Tally()
    season_wins = 0
    season_losses = 0
    margins: List[float] = []

    for g in games:
        if g.actual_margin > 0:
            season_wins += 1
        elif g.actual_margin < 0:
            season_losses += 1

        if g.ats_result is None:
            continue

        overall.record(g.ats_result)
        (favorite if g.is_favorite else underdog).record(g.ats_result)
        (home if g.is_home else road).record(g.ats_result)

        if g.ats_result != "push":
            margins.append(float(g.cover_margin))

    avg_scored = sum(g.team_score for g in games) / len(games)
    avg_allowed = sum(g.opponent_score for g in games) / len(games)
    decided = season_wins + season_losses

    return TeamMetricsSnapshot(
        games_played=len(games),
        spread_win_pct=overall.pct(),
        favorite_win_pct=favorite.pct(),
        underdog_win_pct=underdog.pct(),
        home_win_pct=home.pct(),
        away_win_pct=road.pct(),
        avg_points_scored=avg_scored,
        avg_points_allowed=avg_allowed,
        point_differential=avg_scored - avg_allowed,
        avg_cover_margin=(sum(margins) / len(margins)) if margins else 0.0,
        season_win_pct=(season_wins / decided) * 100 if decided else 0.0,
        recent_form=_recent_form(games),
    )


# ---------- Public API ----------


def compute_metrics(
    team_id: str,
    target_week: int,
    game_log: GameLog,
) -> Optional[TeamMetricsSnapshot]:
    """
    Point-in-time metrics: only games from weeks strictly before target_week.

    Returns None when the team has no such games yet (week 1, or a bye
    followed by no history). That is an expected state, not an error.
    """
    target_week = int(target_week)
    if target_week < 1:
        raise ValueError(f"target_week must be >= 1, got {target_week}")

    games = collect_team_games(team_id, game_log, 1, target_week, inclusive=False)
    return snapshot_from_games(games)


def compute_season_metrics(
    team_id: str,
    game_log: GameLog,
    start_week: int,
    end_week: int,
) -> Optional[TeamMetricsSnapshot]:
    """
    Same snapshot as compute_metrics but over the closed range [start_week, end_week].
    """
    games = collect_team_games(team_id, game_log, start_week, end_week, inclusive=True)
    return snapshot_from_games(games)

