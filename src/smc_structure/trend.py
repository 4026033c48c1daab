"""
Trend state register, one per structure level.

Swing and internal trends must never influence each other, so each level
pipeline owns its own tracker. Only the break classifier calls set().
"""

from .models import BEARISH, BULLISH, NEUTRAL

TREND_STATES = (NEUTRAL, BULLISH, BEARISH)


class TrendStateTracker:
    """Holds the trend of one level. Starts neutral."""

    def __init__(self, level: str):
        self.level = level
        self._state = NEUTRAL

    def get(self) -> str:
        return self._state

    def set(self, state: str) -> None:
        if state not in TREND_STATES:
            raise ValueError(f"Unknown trend state: {state}")
        self._state = state

    def __repr__(self) -> str:
        return f"TrendStateTracker(level={self.level!r}, state={self._state!r})"
