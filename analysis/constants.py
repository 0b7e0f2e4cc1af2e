from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# ---------------------------------------------------------------------------
# Numeric policy
# ---------------------------------------------------------------------------

# Absolute tolerance for treating a cover margin as zero. Spreads are whole or
# half points, so this only absorbs float noise.
PUSH_EPSILON: float = 0.01

# Games per team used for the "recent form" window
RECENT_FORM_GAMES: int = 3

# ---------------------------------------------------------------------------
# Importance scoring (completed-game analysis)
#
# Uncalibrated: these came over from the first version of the pool and should
# be re-fit against real outcome data before being trusted.
# ---------------------------------------------------------------------------

SCALE_WIN_PCT: float = 2.0
SCALE_POINTS: float = 5.0
SCALE_COVER_MARGIN: float = 3.0
SCALE_RECENT_FORM: float = 10.0
SCALE_DEFAULT: float = 2.0

IMPORTANCE_CAP: float = 100.0
CORRECT_PREDICTION_BOOST: float = 1.5

# Range backtest: metrics whose accuracy differs by <= this many percentage
# points are ranked by average importance instead.
RANKING_ACCURACY_TOLERANCE: float = 5.0

# ---------------------------------------------------------------------------
# Weekly summary thresholds
# ---------------------------------------------------------------------------

EASY_SUPPORT_PCT: float = 70.0
EASY_MIN_IMPORTANCE: float = 50.0
UPSET_MAX_SUPPORT_PCT: float = 40.0

HIGH_CONFIDENCE_MIN: float = 70.0
MEDIUM_CONFIDENCE_MIN: float = 50.0
PICK_FAVORITE_MIN: float = 60.0
PICK_UNDERDOG_MAX: float = 40.0

# Feed status for a game that has not kicked off
STATUS_PRE = "pre"


# ---------------------------------------------------------------------------
# Metric tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MetricDefinition:
    """
    One row of a metric table.

    key          attribute on TeamMetricsSnapshot (dotted for nested values,
                 "location" for the home/away win % of each side's actual role)
    applies      None, "winner_favored" or "winner_underdog"
    weight       used by the upcoming-game analyzer only
    """

    name: str
    key: str
    category: str
    scale: float = SCALE_DEFAULT
    higher_is_better: bool = True
    applies: Optional[str] = None
    weight: float = 1.0
    # upcoming games: underdog side reads this attribute instead of `key`
    underdog_key: Optional[str] = None


COMPLETED_GAME_METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition("Spread Win %", "spread_win_pct", "spread", SCALE_WIN_PCT),
    MetricDefinition(
        "Favorite Win %", "favorite_win_pct", "spread", SCALE_WIN_PCT,
        applies="winner_favored",
    ),
    MetricDefinition(
        "Underdog Win %", "underdog_win_pct", "spread", SCALE_WIN_PCT,
        applies="winner_underdog",
    ),
    MetricDefinition("Home Win %", "location", "location", SCALE_WIN_PCT),
    MetricDefinition("Avg Points Scored", "avg_points_scored", "offense", SCALE_POINTS),
    MetricDefinition(
        "Avg Points Allowed", "avg_points_allowed", "defense", SCALE_POINTS,
        higher_is_better=False,
    ),
    MetricDefinition("Point Differential", "point_differential", "overall", SCALE_DEFAULT),
    MetricDefinition("Avg Cover Margin", "avg_cover_margin", "spread", SCALE_COVER_MARGIN),
    MetricDefinition("Recent Form (Pts)", "recent_form.avg_points", "recent", SCALE_RECENT_FORM),
    MetricDefinition("Recent Form (ATS)", "recent_form.spread_wins", "recent", SCALE_RECENT_FORM),
)

UPCOMING_GAME_METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition("Spread Win %", "spread_win_pct", "spread", weight=2.0),
    MetricDefinition(
        "Favorite Win %", "favorite_win_pct", "spread", weight=1.5,
        underdog_key="underdog_win_pct",
    ),
    MetricDefinition("Home/Away Win %", "location", "location", weight=1.2),
    MetricDefinition("Avg Points Scored", "avg_points_scored", "offense", weight=1.0),
    MetricDefinition(
        "Avg Points Allowed", "avg_points_allowed", "defense", weight=1.0,
        higher_is_better=False,
    ),
    MetricDefinition("Point Differential", "point_differential", "overall", weight=1.3),
    MetricDefinition("Recent Form", "recent_form.spread_wins", "recent", weight=1.1),
)

# Location metric label depends on where the ATS winner played
LOCATION_LABELS: Dict[str, str] = {
    "home": "Home Win %",
    "away": "Away Win %",
}
