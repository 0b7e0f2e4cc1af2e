from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _opt_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


# ---------- Game log records ----------


@dataclass(frozen=True)
class TeamRef:
    id: str
    name: str = ""
    abbreviation: str = ""
    score: Optional[float] = None
    # decorative, carried through for the UI only
    color: Optional[str] = None
    alternate_color: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TeamRef":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            abbreviation=data.get("abbreviation") or "",
            score=_opt_float(data.get("score")),
            color=data.get("color"),
            alternate_color=data.get("alternateColor"),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "score": self.score,
            "color": self.color,
            "alternateColor": self.alternate_color,
        }

    def brief(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "score": self.score,
        }


@dataclass(frozen=True)
class Spread:
    value: float
    favored_team: str

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"spread value must be >= 0, got {self.value}")

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> Optional["Spread"]:
        """
        Accepts {value, favoredTeam} or the admin form shape {spread, favoredTeam}.
        Returns None when there is no usable value.
        """
        if not data:
            return None
        raw = data.get("value", data.get("spread"))
        favored = data.get("favoredTeam")
        if raw is None or raw == "" or favored in (None, ""):
            return None
        return cls(value=abs(float(raw)), favored_team=str(favored))

    def to_json(self) -> Dict[str, Any]:
        return {"value": self.value, "favoredTeam": self.favored_team}


@dataclass(frozen=True)
class GameResult:
    game_id: str
    week: int
    home_team: TeamRef
    away_team: TeamRef
    spread: Optional[Spread] = None
    date: Optional[str] = None
    status: str = "post"

    def __post_init__(self):
        if int(self.week) < 1:
            raise ValueError(f"week must be >= 1, got {self.week}")
        if self.spread is not None and self.spread.favored_team not in (
            self.home_team.id,
            self.away_team.id,
        ):
            raise ValueError(
                f"game {self.game_id}: favored team {self.spread.favored_team} "
                f"is neither {self.home_team.id} nor {self.away_team.id}"
            )

    @property
    def home_score(self) -> float:
        return float(self.home_team.score or 0.0)

    @property
    def away_score(self) -> float:
        return float(self.away_team.score or 0.0)

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team.id, self.away_team.id)

    @classmethod
    def from_json(cls, data: Dict[str, Any], week: Optional[int] = None) -> "GameResult":
        return cls(
            game_id=str(data.get("gameId") or data.get("id")),
            week=int(week if week is not None else data["week"]),
            home_team=TeamRef.from_json(data["homeTeam"]),
            away_team=TeamRef.from_json(data["awayTeam"]),
            spread=Spread.from_json(data.get("spread")),
            date=data.get("date"),
            status=data.get("status") or "post",
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "week": self.week,
            "date": self.date,
            "status": self.status,
            "homeTeam": self.home_team.to_json(),
            "awayTeam": self.away_team.to_json(),
            "spread": self.spread.to_json() if self.spread else None,
        }


# ---------- Derived team metrics ----------


@dataclass(frozen=True)
class RecentForm:
    avg_points: float = 0.0
    avg_allowed: float = 0.0
    spread_wins: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "avgPoints": self.avg_points,
            "avgAllowed": self.avg_allowed,
            "spreadWins": self.spread_wins,
        }

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "RecentForm":
        data = data or {}
        return cls(
            avg_points=float(data.get("avgPoints") or 0.0),
            avg_allowed=float(data.get("avgAllowed") or 0.0),
            spread_wins=int(data.get("spreadWins") or 0),
        )


@dataclass(frozen=True)
class TeamMetricsSnapshot:
    games_played: int
    spread_win_pct: float
    favorite_win_pct: float
    underdog_win_pct: float
    home_win_pct: float
    away_win_pct: float
    avg_points_scored: float
    avg_points_allowed: float
    point_differential: float
    avg_cover_margin: float
    season_win_pct: float
    recent_form: RecentForm = field(default_factory=RecentForm)

    def to_json(self) -> Dict[str, Any]:
        return {
            "gamesPlayed": self.games_played,
            "spreadWinPct": self.spread_win_pct,
            "favoriteWinPct": self.favorite_win_pct,
            "underdogWinPct": self.underdog_win_pct,
            "homeWinPct": self.home_win_pct,
            "awayWinPct": self.away_win_pct,
            "avgPointsScored": self.avg_points_scored,
            "avgPointsAllowed": self.avg_points_allowed,
            "pointDifferential": self.point_differential,
            "avgCoverMargin": self.avg_cover_margin,
            "seasonWinPct": self.season_win_pct,
            "recentForm": self.recent_form.to_json(),
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TeamMetricsSnapshot":
        return cls(
            games_played=int(data.get("gamesPlayed") or 0),
            spread_win_pct=float(data.get("spreadWinPct") or 0.0),
            favorite_win_pct=float(data.get("favoriteWinPct") or 0.0),
            underdog_win_pct=float(data.get("underdogWinPct") or 0.0),
            home_win_pct=float(data.get("homeWinPct") or 0.0),
            away_win_pct=float(data.get("awayWinPct") or 0.0),
            avg_points_scored=float(data.get("avgPointsScored") or 0.0),
            avg_points_allowed=float(data.get("avgPointsAllowed") or 0.0),
            point_differential=float(data.get("pointDifferential") or 0.0),
            avg_cover_margin=float(data.get("avgCoverMargin") or 0.0),
            season_win_pct=float(data.get("seasonWinPct") or 0.0),
            recent_form=RecentForm.from_json(data.get("recentForm")),
        )


# ---------- Completed-game analysis ----------


@dataclass(frozen=True)
class MetricCorrelation:
    metric: str
    category: str
    winner_value: float
    loser_value: float
    difference: float
    predicted_correctly: bool
    strength: float
    importance_score: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "metric": self.metric,
            "category": self.category,
            "winnerValue": self.winner_value,
            "loserValue": self.loser_value,
            "difference": self.difference,
            "predictedCorrectly": self.predicted_correctly,
            "strength": self.strength,
            "importanceScore": self.importance_score,
        }


@dataclass(frozen=True)
class GameAnalysis:
    is_push: bool
    spread: float
    actual_margin: float
    correct_pick: Optional[str] = None
    winner_team: Optional[TeamRef] = None
    loser_team: Optional[TeamRef] = None
    cover_margin: Optional[float] = None
    metric_correlations: List[MetricCorrelation] = field(default_factory=list)
    metrics_supporting: int = 0
    metrics_against: int = 0
    avg_importance_score: float = 0.0

    def to_json(self) -> Dict[str, Any]:
        if self.is_push:
            return {
                "isPush": True,
                "spread": self.spread,
                "actualMargin": self.actual_margin,
                "metricCorrelations": [],
            }
        return {
            "isPush": False,
            "correctPick": self.correct_pick,
            "winnerTeam": self.winner_team.brief() if self.winner_team else None,
            "loserTeam": self.loser_team.brief() if self.loser_team else None,
            "spread": self.spread,
            "actualMargin": self.actual_margin,
            "coverMargin": self.cover_margin,
            "metricCorrelations": [m.to_json() for m in self.metric_correlations],
            "metricsSupporting": self.metrics_supporting,
            "metricsAgainst": self.metrics_against,
            "avgImportanceScore": self.avg_importance_score,
        }


@dataclass(frozen=True)
class BacktestResult:
    week: int
    game_id: str
    game: GameResult
    home_metrics: TeamMetricsSnapshot
    away_metrics: TeamMetricsSnapshot
    analysis: GameAnalysis

    def to_json(self) -> Dict[str, Any]:
        return {
            "week": self.week,
            "gameId": self.game_id,
            "game": {
                "homeTeam": self.game.home_team.to_json(),
                "awayTeam": self.game.away_team.to_json(),
                "spread": self.game.spread.to_json() if self.game.spread else None,
                "date": self.game.date,
            },
            "homeMetrics": self.home_metrics.to_json(),
            "awayMetrics": self.away_metrics.to_json(),
            "analysis": self.analysis.to_json(),
        }


@dataclass
class MetricPerformanceAggregate:
    metric: str
    category: str
    times_correct: int = 0
    times_wrong: int = 0
    total_importance: float = 0.0

    @property
    def total_games(self) -> int:
        return self.times_correct + self.times_wrong

    @property
    def accuracy(self) -> float:
        total = self.total_games
        return (self.times_correct / total) * 100 if total else 0.0

    @property
    def avg_importance(self) -> float:
        total = self.total_games
        return self.total_importance / total if total else 0.0

    def to_json(self) -> Dict[str, Any]:
        return {
            "metric": self.metric,
            "category": self.category,
            "timesCorrect": self.times_correct,
            "timesWrong": self.times_wrong,
            "totalImportance": self.total_importance,
            "totalGames": self.total_games,
            "accuracy": self.accuracy,
            "avgImportance": self.avg_importance,
        }


# ---------- Upcoming-game analysis ----------


@dataclass(frozen=True)
class UpcomingGameConfidence:
    game_id: Optional[str]
    confidence: str
    confidence_score: int
    weighted_confidence: float = 0.0
    metrics_alignment: int = 0
    metrics_supporting: int = 0
    metrics_against: int = 0
    suggested_team: Optional[TeamRef] = None
    reason: str = ""
    favored_team: Optional[TeamRef] = None
    underdog_team: Optional[TeamRef] = None
    spread: Optional[float] = None
    analyzed: bool = True

    @property
    def suggested_pick(self) -> Optional[Dict[str, Any]]:
        if not self.analyzed:
            return None
        return {
            "team": self.suggested_team.brief() if self.suggested_team else None,
            "reason": self.reason,
        }

    def to_json(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "confidence": self.confidence,
            "confidenceScore": self.confidence_score,
            "metricsAlignment": self.metrics_alignment,
            "metricsSupporting": self.metrics_supporting,
            "metricsAgainst": self.metrics_against,
            "suggestedPick": self.suggested_pick,
            "reason": self.reason,
            "favoredTeam": self.favored_team.brief() if self.favored_team else None,
            "underdogTeam": self.underdog_team.brief() if self.underdog_team else None,
            "spread": self.spread,
        }


@dataclass(frozen=True)
class BacktestRangeSummary:
    start_week: int
    end_week: int
    results: List[BacktestResult]
    metric_rankings: List[MetricPerformanceAggregate]
    games_skipped: int = 0
    pushes: int = 0

    @property
    def games_analyzed(self) -> int:
        return len(self.results)

    def to_json(self, include_results: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "gamesAnalyzed": self.games_analyzed,
            "gamesSkipped": self.games_skipped,
            "pushes": self.pushes,
            "weekRange": {"start": self.start_week, "end": self.end_week},
            "metricRankings": [m.to_json() for m in self.metric_rankings],
        }
        if include_results:
            payload["results"] = [r.to_json() for r in self.results]
        return payload
