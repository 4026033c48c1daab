"""
Structure Event Log - chronological audit trail of detector trace points.

The detectors never log directly; they notify an observer. StructureEventLog
is the stock observer: append-only during a run, queryable for debugging,
exportable to CSV/DataFrame.
"""

from dataclasses import asdict
from typing import List, Optional

import pandas as pd

from .models import Pivot, StructureBreakEvent, TraceEvent

PIVOT_CONFIRMED = "PIVOT_CONFIRMED"
STRUCTURE_BREAK = "STRUCTURE_BREAK"


class StructureObserver:
    """Trace point interface. Default implementation ignores everything."""

    def on_pivot_confirmed(self, pivot: Pivot, confirmed_at: int) -> None:
        """A pivot at `pivot.index` became known at bar `confirmed_at`."""

    def on_break(self, event: StructureBreakEvent, trend_before: str, trend_after: str) -> None:
        """A break event was emitted and the level trend moved."""


class StructureEventLog(StructureObserver):
    """Chronological audit trail. Append-only during execution.
    Queryable for debugging. Exportable to CSV/DataFrame.
    """

    def __init__(self):
        self.events: List[TraceEvent] = []

    def record(self, event: TraceEvent) -> None:
        """Record a new trace event."""
        self.events.append(event)

    def on_pivot_confirmed(self, pivot: Pivot, confirmed_at: int) -> None:
        self.record(TraceEvent(
            bar_index=confirmed_at,
            event_type=PIVOT_CONFIRMED,
            level=pivot.level,
            kind=pivot.kind,
            price=pivot.price,
            structure_id=pivot.id,
            details={"pivot_index": pivot.index},
        ))

    def on_break(self, event: StructureBreakEvent, trend_before: str, trend_after: str) -> None:
        self.record(TraceEvent(
            bar_index=event.break_index,
            event_type=STRUCTURE_BREAK,
            level=event.level,
            kind=event.direction,
            price=event.price,
            details={
                "pivot_index": event.pivot_index,
                "classification": event.classification,
                "trend_before": trend_before,
                "trend_after": trend_after,
            },
        ))

    def get_events(
        self,
        event_type: Optional[str] = None,
        level: Optional[str] = None,
        after: Optional[int] = None,
        before: Optional[int] = None,
    ) -> List[TraceEvent]:
        """Query trace events with filters (bar bounds: after inclusive, before exclusive)."""
        result = self.events
        if event_type:
            result = [e for e in result if e.event_type == event_type]
        if level:
            result = [e for e in result if e.level == level]
        if after is not None:
            result = [e for e in result if e.bar_index >= after]
        if before is not None:
            result = [e for e in result if e.bar_index < before]
        return result

    def to_dataframe(self) -> pd.DataFrame:
        """Export as DataFrame."""
        if not self.events:
            return pd.DataFrame()
        return pd.DataFrame([asdict(e) for e in self.events])

    def to_csv(self, path: str) -> None:
        """Export to CSV file."""
        self.to_dataframe().to_csv(path, index=False)

    def clear(self) -> None:
        """Clear all events."""
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
