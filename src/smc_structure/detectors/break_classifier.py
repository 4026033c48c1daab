"""
Break classifier.

Walks bars forward and matches each close against the live pivots of one
structure level:

- Bullish break: first live pivot high (FIFO) with index < i and
  price < close[i]. CHoCH if the trend was bearish, BOS otherwise.
- Bearish break: first live pivot low (FIFO) with index < i and
  price > close[i]. CHoCH if the trend was bullish, BOS otherwise.

At most one bullish and one bearish break per bar. A broken pivot is
consumed and never takes part in a later classification.
"""

from typing import List, Optional, Sequence

from ..models import (
    BEAR,
    BEARISH,
    BOS,
    BULL,
    BULLISH,
    CHOCH,
    HIGH,
    LOW,
    Bar,
    Pivot,
    StructureBreakEvent,
)
from ..registry import PivotRegistry
from ..trend import TrendStateTracker


def classify_breaks(
    bars: Sequence[Bar],
    registry: PivotRegistry,
    trend: TrendStateTracker,
    observer=None,
) -> List[StructureBreakEvent]:
    """
    Detect BOS / CHoCH breaks for one structure level.

    Args:
        bars: Validated bars, increasing index
        registry: Live pivots of the level; broken pivots are consumed
        trend: Trend register of the level; updated on every break
        observer: Optional StructureObserver notified per break

    Returns:
        Break events ordered by break index, bull before bear within a bar
    """
    events: List[StructureBreakEvent] = []

    for bar in bars:
        bull = find_break(registry, HIGH, bar)
        if bull is not None:
            events.append(_accept(bull, bar.index, BULL, registry, trend, observer))

        bear = find_break(registry, LOW, bar)
        if bear is not None:
            events.append(_accept(bear, bar.index, BEAR, registry, trend, observer))

    return events


def classify_direction(trend_before: str, direction: str) -> str:
    """
    BOS / CHoCH for a break in `direction` given the trend before it.

    Only a break against an established trend is a CHoCH; a first break
    from neutral is always a BOS.
    """
    if direction == BULL:
        return CHOCH if trend_before == BEARISH else BOS
    return CHOCH if trend_before == BULLISH else BOS


def _accept(
    pivot: Pivot,
    break_index: int,
    direction: str,
    registry: PivotRegistry,
    trend: TrendStateTracker,
    observer,
) -> StructureBreakEvent:
    trend_before = trend.get()
    trend_after = BULLISH if direction == BULL else BEARISH

    event = StructureBreakEvent(
        pivot_index=pivot.index,
        break_index=break_index,
        price=pivot.price,
        level=registry.level,
        classification=classify_direction(trend_before, direction),
        direction=direction,
    )

    registry.consume(pivot.id, break_index)
    trend.set(trend_after)

    if observer is not None:
        observer.on_break(event, trend_before, trend_after)
    return event


def find_break(
    registry: PivotRegistry,
    kind: str,
    bar: Bar,
) -> Optional[Pivot]:
    """First live pivot the close of `bar` breaks, without consuming it."""
    if kind == HIGH:
        return registry.first_active(HIGH, bar.index, lambda p: p.price < bar.close)
    return registry.first_active(LOW, bar.index, lambda p: p.price > bar.close)
