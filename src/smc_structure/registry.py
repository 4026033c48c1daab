"""
Pivot Registry - arena of detected pivots with a live (unconsumed) view.

Pivots are stored once by stable ID and never removed; consuming a pivot
flips it out of the per-kind live view. Live views keep insertion order,
which is the FIFO order used to pick the pivot a close breaks.
"""

from dataclasses import asdict
from typing import Callable, Dict, Iterable, List, Optional

import pandas as pd

from .models import HIGH, LOW, Pivot


class PivotRegistry:
    """In-memory registry of the pivots of one structure level.

    Supports:
    - Add pivots in scan order
    - Query live pivots by kind
    - First-match lookup in FIFO order
    - Consume a pivot exactly once
    """

    PIVOT_KINDS = (HIGH, LOW)

    def __init__(self, level: str, pivots: Optional[Iterable[Pivot]] = None):
        self.level = level
        self._arena: Dict[str, Pivot] = {}
        self._consumed: Dict[str, int] = {}
        self._last_index: Dict[str, int] = {}
        # dict keeps insertion order and gives O(1) removal
        self._live: Dict[str, Dict[str, Pivot]] = {kind: {} for kind in self.PIVOT_KINDS}
        for pivot in pivots or ():
            self.add(pivot)

    def add(self, pivot: Pivot) -> None:
        """Add a pivot to the arena and its live view."""
        if pivot.kind not in self._live:
            raise ValueError(f"Unknown pivot kind: {pivot.kind}")
        if pivot.level != self.level:
            raise ValueError(f"Pivot level {pivot.level} does not match registry level {self.level}")
        if pivot.id in self._arena:
            raise ValueError(f"Duplicate pivot: {pivot.id}")
        last = self._last_index.get(pivot.kind)
        if last is not None and pivot.index < last:
            raise ValueError(f"Pivots must be added in index order: {pivot.id} after index {last}")
        self._last_index[pivot.kind] = pivot.index
        self._arena[pivot.id] = pivot
        self._live[pivot.kind][pivot.id] = pivot

    def get_by_id(self, pivot_id: str) -> Optional[Pivot]:
        """Get pivot by ID, live or consumed."""
        return self._arena.get(pivot_id)

    def get_active(self, kind: str) -> List[Pivot]:
        """Live pivots of one kind, in insertion order."""
        return list(self._live[kind].values())

    def first_active(
        self,
        kind: str,
        before: int,
        predicate: Callable[[Pivot], bool],
    ) -> Optional[Pivot]:
        """First live pivot (FIFO) with index < `before` satisfying `predicate`.

        Not the nearest, highest or lowest one: insertion order decides.
        """
        for pivot in self._live[kind].values():
            if pivot.index >= before:
                # add() enforces index order per kind
                break
            if predicate(pivot):
                return pivot
        return None

    def consume(self, pivot_id: str, break_index: int) -> Pivot:
        """Retire a live pivot. Raises KeyError if unknown or already consumed."""
        pivot = self._arena.get(pivot_id)
        if pivot is None:
            raise KeyError(f"Unknown pivot: {pivot_id}")
        if pivot_id in self._consumed:
            raise KeyError(f"Pivot already consumed: {pivot_id}")
        del self._live[pivot.kind][pivot_id]
        self._consumed[pivot_id] = break_index
        return pivot

    def is_consumed(self, pivot_id: str) -> bool:
        return pivot_id in self._consumed

    def count(self, kind: Optional[str] = None, live_only: bool = False) -> int:
        """Count pivots in registry."""
        if live_only:
            if kind:
                return len(self._live[kind])
            return sum(len(v) for v in self._live.values())
        if kind:
            return sum(1 for p in self._arena.values() if p.kind == kind)
        return len(self._arena)

    def to_dataframe(self) -> pd.DataFrame:
        """Export all pivots with their consumption state."""
        records = []
        for pid, pivot in self._arena.items():
            rec = asdict(pivot)
            rec["id"] = pid
            rec["consumed"] = pid in self._consumed
            rec["break_index"] = self._consumed.get(pid, -1)
            records.append(rec)
        if not records:
            return pd.DataFrame()
        return pd.DataFrame(records)
