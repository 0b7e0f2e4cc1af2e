# webapp/config.py

import os
from dotenv import load_dotenv

# Load .env into environment variables
load_dotenv()

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

# NFL season year used when asking the feed for a specific week
SEASON = int(os.getenv("SEASON", "2025"))

# Regular season bounds
MIN_WEEK = int(os.getenv("MIN_WEEK", "1"))
MAX_WEEK = int(os.getenv("MAX_WEEK", "18"))

DEFAULT_CURRENT_WEEK = int(os.getenv("DEFAULT_CURRENT_WEEK", "1"))

ESPN_SCOREBOARD_URL = os.getenv(
    "ESPN_SCOREBOARD_URL",
    "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard",
)
ESPN_TIMEOUT_SECONDS = float(os.getenv("ESPN_TIMEOUT_SECONDS", "10"))

# Threads for range backtests (1 = sequential)
BACKTEST_WORKERS = int(os.getenv("BACKTEST_WORKERS", "1"))

# ---------------------------------------------------------------------------
# Flask Config object (used by create_app)
# ---------------------------------------------------------------------------

class Config:
    SEASON = SEASON
    MIN_WEEK = MIN_WEEK
    MAX_WEEK = MAX_WEEK
    DEFAULT_CURRENT_WEEK = DEFAULT_CURRENT_WEEK

    ESPN_SCOREBOARD_URL = ESPN_SCOREBOARD_URL
    ESPN_TIMEOUT_SECONDS = ESPN_TIMEOUT_SECONDS
    BACKTEST_WORKERS = BACKTEST_WORKERS
