from __future__ import annotations

from typing import Any, Dict, Optional


class AnalyticsError(Exception):
    """
    Base for every "could not compute" outcome of the analytics core.

    None of these are failures of the app; callers branch on them
    (skip the game, mark it inconclusive, show a message).
    """

    def __init__(self, message: str, week: Optional[int] = None, game_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.week = week
        self.game_id = game_id

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.week is not None:
            payload["week"] = self.week
        if self.game_id is not None:
            payload["gameId"] = self.game_id
        return payload


class GameNotFound(AnalyticsError, LookupError):
    pass


class InsufficientHistory(AnalyticsError):
    pass


class MissingSpread(AnalyticsError):
    pass


class MissingMetrics(AnalyticsError):
    pass
