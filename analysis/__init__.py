# analysis/__init__.py

from .constants import PUSH_EPSILON
from .errors import (
    AnalyticsError,
    GameNotFound,
    InsufficientHistory,
    MissingMetrics,
    MissingSpread,
)
from .models import (
    BacktestRangeSummary,
    BacktestResult,
    GameAnalysis,
    GameResult,
    MetricCorrelation,
    MetricPerformanceAggregate,
    Spread,
    TeamMetricsSnapshot,
    TeamRef,
    UpcomingGameConfidence,
)
from .metrics import compute_metrics, compute_season_metrics
from .outcome import analyze_completed_game, calculate_importance_score
from .backtest import backtest_game, backtest_week_range
from .confidence import analyze_upcoming_game, confidence_tier
from .summary import categorize_completed_game, generate_weekly_summary
from .preprocess import calculate_team_analytics, preprocess_all_analytics

__all__ = [
    # constants
    "PUSH_EPSILON",

    # errors
    "AnalyticsError",
    "GameNotFound",
    "InsufficientHistory",
    "MissingMetrics",
    "MissingSpread",

    # records
    "BacktestRangeSummary",
    "BacktestResult",
    "GameAnalysis",
    "GameResult",
    "MetricCorrelation",
    "MetricPerformanceAggregate",
    "Spread",
    "TeamMetricsSnapshot",
    "TeamRef",
    "UpcomingGameConfidence",

    # point-in-time + season metrics
    "compute_metrics",
    "compute_season_metrics",

    # completed games
    "analyze_completed_game",
    "calculate_importance_score",
    "backtest_game",
    "backtest_week_range",

    # upcoming games + weekly report
    "analyze_upcoming_game",
    "confidence_tier",
    "categorize_completed_game",
    "generate_weekly_summary",

    # offline preprocessing
    "calculate_team_analytics",
    "preprocess_all_analytics",
]
