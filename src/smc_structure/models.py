"""
Structure data models - bars, pivots, break events and engine results.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd


# Pivot kinds
HIGH = "high"
LOW = "low"

# Structure levels, in evaluation order
SWING = "swing"
INTERNAL = "internal"
LEVELS = (SWING, INTERNAL)

# Break classifications
BOS = "bos"
CHOCH = "choch"

# Break directions
BULL = "bull"
BEAR = "bear"

# Trend states
NEUTRAL = "neutral"
BULLISH = "bullish"
BEARISH = "bearish"


def make_id(level: str, kind: str, index: int) -> str:
    """Generate the stable ID of a pivot.

    Format: {level}:{kind}:{index}
    A (level, kind, index) triple identifies a pivot uniquely within one run.
    """
    return f"{level}:{kind}:{index}"


def channel_name(level: str, classification: str, direction: str) -> str:
    """Channel key of a break, e.g. ('swing', 'choch', 'bull') -> 'swingChochBull'."""
    return f"{level}{classification.capitalize()}{direction.capitalize()}"


SWING_HIGH_MARKER = "swingHighMarker"
SWING_LOW_MARKER = "swingLowMarker"

# 8 break channels + 2 pivot-marker channels
CHANNEL_NAMES = tuple(
    channel_name(level, cls, direction)
    for level in LEVELS
    for cls in (BOS, CHOCH)
    for direction in (BULL, BEAR)
) + (SWING_HIGH_MARKER, SWING_LOW_MARKER)


# ================================
# Input
# ================================

@dataclass(frozen=True)
class Bar:
    """Single OHLC bar. Immutable, owned by the caller."""
    index: int
    high: float
    low: float
    close: float
    open: Optional[float] = None
    volume: Optional[float] = None


# ================================
# Structures
# ================================

@dataclass(frozen=True)
class Pivot:
    """Local price extreme confirmed under a lookback length."""
    index: int                            # Bar index of the extreme
    price: float                          # bar.high for HIGH, bar.low for LOW
    kind: str                             # "high" / "low"
    level: str                            # "swing" / "internal"

    @property
    def id(self) -> str:
        return make_id(self.level, self.kind, self.index)


@dataclass(frozen=True)
class StructureBreakEvent:
    """Close crossing a live pivot. pivot_index < break_index always."""
    pivot_index: int
    break_index: int
    price: float                          # Broken pivot price
    level: str                            # "swing" / "internal"
    classification: str                   # "bos" / "choch"
    direction: str                        # "bull" / "bear"


@dataclass
class LevelResult:
    """Output of one level pipeline (scan + classify)."""
    level: str
    lookback: int
    pivots: List[Pivot] = field(default_factory=list)
    events: List[StructureBreakEvent] = field(default_factory=list)
    final_trend: str = NEUTRAL


# ================================
# Engine results
# ================================

@dataclass
class EventsResult:
    """Event mode: ordered break events and pivot markers, untouched."""
    events: List[StructureBreakEvent] = field(default_factory=list)
    pivots: List[Pivot] = field(default_factory=list)
    trends: Dict[str, str] = field(default_factory=dict)
    bar_count: int = 0
    stable_horizon: Dict[str, int] = field(default_factory=dict)

    def events_for(self, level: str) -> List[StructureBreakEvent]:
        """Events of one structure level, in production order."""
        return [e for e in self.events if e.level == level]

    def pivots_for(self, level: str, kind: Optional[str] = None) -> List[Pivot]:
        """Pivots of one structure level, optionally of one kind."""
        return [
            p for p in self.pivots
            if p.level == level and (kind is None or p.kind == kind)
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Export break events as DataFrame for analysis."""
        if not self.events:
            return pd.DataFrame(columns=[
                "pivot_index", "break_index", "price",
                "level", "classification", "direction",
            ])
        return pd.DataFrame([asdict(e) for e in self.events])


@dataclass
class ChannelMapResult:
    """Channel mode: sparse bar index -> {channel name: value} map."""
    channels: Dict[int, Dict[str, float]] = field(default_factory=dict)
    bar_count: int = 0
    first_index: int = 0

    def get(self, index: int, channel: str) -> Optional[float]:
        """Value of a channel at a bar, or None when the slot is empty."""
        return self.channels.get(index, {}).get(channel)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per bar, one column per channel, NaN for empty slots."""
        df = pd.DataFrame(
            index=pd.RangeIndex(self.first_index, self.first_index + self.bar_count, name="index"),
            columns=list(CHANNEL_NAMES),
            dtype=float,
        )
        for idx, slots in self.channels.items():
            for name, value in slots.items():
                df.at[idx, name] = value
        return df


# ================================
# Trace log
# ================================

@dataclass
class TraceEvent:
    """Single chronological trace point in the structure event log."""
    bar_index: int                        # Bar at which the trace fired
    event_type: str                       # "PIVOT_CONFIRMED" / "STRUCTURE_BREAK"
    level: str
    kind: Optional[str] = None            # Pivot kind / break direction
    price: Optional[float] = None
    structure_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
