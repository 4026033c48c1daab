"""Tests for the Pivot Registry and Structure Event Log."""
import pytest

from smc_structure.event_log import (
    PIVOT_CONFIRMED, STRUCTURE_BREAK, StructureEventLog, StructureObserver,
)
from smc_structure.models import (
    BOS, BULL, BULLISH, HIGH, INTERNAL, LOW, NEUTRAL, SWING, Pivot, StructureBreakEvent,
)
from smc_structure.registry import PivotRegistry


def _pivot(index, price=100.0, kind=HIGH, level=SWING):
    return Pivot(index, price, kind, level)


# ==========================================
# PivotRegistry Tests
# ==========================================


class TestPivotRegistry:
    """Test PivotRegistry operations."""

    def test_add_and_get_by_id(self):
        """Add pivot and retrieve by stable ID."""
        reg = PivotRegistry(SWING)
        pivot = _pivot(3)
        reg.add(pivot)
        assert reg.get_by_id("swing:high:3") is pivot

    def test_get_by_id_not_found(self):
        """Non-existent ID returns None."""
        assert PivotRegistry(SWING).get_by_id("swing:high:99") is None

    def test_duplicate_raises(self):
        """Same (level, kind, index) twice -> ValueError."""
        reg = PivotRegistry(SWING, [_pivot(1)])
        with pytest.raises(ValueError, match="Duplicate pivot"):
            reg.add(_pivot(1, price=50.0))

    def test_level_mismatch_raises(self):
        """Internal pivot in a swing registry -> ValueError."""
        with pytest.raises(ValueError, match="does not match"):
            PivotRegistry(SWING, [_pivot(1, level=INTERNAL)])

    def test_out_of_order_raises(self):
        """Pivots of one kind arrive in index order."""
        reg = PivotRegistry(SWING, [_pivot(5)])
        with pytest.raises(ValueError, match="index order"):
            reg.add(_pivot(2))

    def test_kinds_ordered_independently(self):
        """A low may follow a later-indexed high."""
        reg = PivotRegistry(SWING, [_pivot(5, kind=HIGH), _pivot(2, kind=LOW)])
        assert reg.count() == 2

    def test_get_active_keeps_insertion_order(self):
        """Live view is FIFO."""
        reg = PivotRegistry(SWING, [_pivot(1), _pivot(4), _pivot(9)])
        assert [p.index for p in reg.get_active(HIGH)] == [1, 4, 9]
        assert reg.get_active(LOW) == []

    def test_first_active_fifo_with_bound(self):
        """First matching pivot with index < before."""
        reg = PivotRegistry(SWING, [_pivot(1, 10.0), _pivot(4, 5.0), _pivot(9, 1.0)])
        assert reg.first_active(HIGH, 9, lambda p: p.price < 6).index == 4
        assert reg.first_active(HIGH, 4, lambda p: p.price < 6) is None
        assert reg.first_active(HIGH, 20, lambda p: p.price < 20).index == 1

    def test_consume_removes_from_live_view(self):
        """Consumed pivot stays in arena, leaves live view."""
        reg = PivotRegistry(SWING, [_pivot(1), _pivot(4)])
        reg.consume("swing:high:1", break_index=7)

        assert reg.is_consumed("swing:high:1")
        assert reg.get_by_id("swing:high:1") is not None
        assert [p.index for p in reg.get_active(HIGH)] == [4]
        assert reg.count() == 2
        assert reg.count(live_only=True) == 1

    def test_consume_twice_raises(self):
        """A pivot is consumed exactly once."""
        reg = PivotRegistry(SWING, [_pivot(1)])
        reg.consume("swing:high:1", break_index=3)
        with pytest.raises(KeyError, match="already consumed"):
            reg.consume("swing:high:1", break_index=4)

    def test_consume_unknown_raises(self):
        """Unknown ID -> KeyError."""
        with pytest.raises(KeyError, match="Unknown pivot"):
            PivotRegistry(SWING).consume("swing:low:1", break_index=2)

    def test_count_by_kind(self):
        """Count per kind, all or live only."""
        reg = PivotRegistry(SWING, [_pivot(1), _pivot(2, kind=LOW), _pivot(3)])
        reg.consume("swing:high:3", break_index=5)
        assert reg.count(HIGH) == 2
        assert reg.count(HIGH, live_only=True) == 1
        assert reg.count(LOW) == 1

    def test_to_dataframe(self):
        """Export carries consumption state."""
        reg = PivotRegistry(SWING, [_pivot(1), _pivot(2, kind=LOW)])
        reg.consume("swing:low:2", break_index=6)
        df = reg.to_dataframe()

        assert len(df) == 2
        row = df[df["id"] == "swing:low:2"].iloc[0]
        assert bool(row["consumed"]) is True
        assert row["break_index"] == 6

    def test_to_dataframe_empty(self):
        """Empty registry -> empty DataFrame."""
        assert PivotRegistry(SWING).to_dataframe().empty


# ==========================================
# StructureEventLog Tests
# ==========================================


class TestStructureEventLog:
    """Test StructureEventLog operations."""

    def _break(self, break_index=7):
        return StructureBreakEvent(2, break_index, 5.0, SWING, BOS, BULL)

    def test_default_observer_is_silent(self):
        """Base observer accepts trace points and does nothing."""
        observer = StructureObserver()
        observer.on_pivot_confirmed(_pivot(1), 3)
        observer.on_break(self._break(), NEUTRAL, BULLISH)

    def test_records_pivot_confirmation(self):
        """Pivot trace keeps pivot and confirmation bar."""
        log = StructureEventLog()
        log.on_pivot_confirmed(_pivot(2, 5.0), confirmed_at=4)

        assert len(log) == 1
        event = log.events[0]
        assert event.event_type == PIVOT_CONFIRMED
        assert event.bar_index == 4
        assert event.structure_id == "swing:high:2"
        assert event.details["pivot_index"] == 2

    def test_records_break_with_trend_move(self):
        """Break trace keeps classification and trend transition."""
        log = StructureEventLog()
        log.on_break(self._break(), NEUTRAL, BULLISH)

        event = log.events[0]
        assert event.event_type == STRUCTURE_BREAK
        assert event.bar_index == 7
        assert event.kind == BULL
        assert event.details == {
            "pivot_index": 2,
            "classification": BOS,
            "trend_before": NEUTRAL,
            "trend_after": BULLISH,
        }

    def test_get_events_filters(self):
        """Filter by type, level and bar range."""
        log = StructureEventLog()
        log.on_pivot_confirmed(_pivot(1), 3)
        log.on_pivot_confirmed(_pivot(2, level=INTERNAL), 4)
        log.on_break(self._break(break_index=10), NEUTRAL, BULLISH)

        assert len(log.get_events(event_type=PIVOT_CONFIRMED)) == 2
        assert len(log.get_events(level=INTERNAL)) == 1
        assert len(log.get_events(after=4)) == 2
        assert len(log.get_events(before=4)) == 1

    def test_to_dataframe_and_clear(self):
        """Export then clear."""
        log = StructureEventLog()
        assert log.to_dataframe().empty
        log.on_pivot_confirmed(_pivot(1), 3)
        df = log.to_dataframe()
        assert list(df["event_type"]) == [PIVOT_CONFIRMED]
        log.clear()
        assert len(log) == 0

    def test_to_csv(self, tmp_path):
        """CSV export writes one row per event."""
        log = StructureEventLog()
        log.on_pivot_confirmed(_pivot(1), 3)
        path = tmp_path / "trace.csv"
        log.to_csv(str(path))
        assert len(path.read_text().strip().splitlines()) == 2
