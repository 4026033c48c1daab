"""
Result assembler - turns per-level detector output into engine results.

Two consumption modes:
- events: ordered break events + pivot markers, no further processing
- channels: sparse per-bar map of named values for consumers that draw a
  line by repeating the same value over consecutive bars
"""

from typing import Dict, List, Sequence, Union

from .errors import ConfigError
from .models import (
    HIGH,
    LEVELS,
    SWING,
    SWING_HIGH_MARKER,
    SWING_LOW_MARKER,
    ChannelMapResult,
    EventsResult,
    LevelResult,
    channel_name,
)

_LEVEL_ORDER = {level: n for n, level in enumerate(LEVELS)}


def assemble_events(level_results: Sequence[LevelResult], bar_count: int) -> EventsResult:
    """
    Merge level results into one EventsResult.

    Events are ordered by break index; within a bar the swing level comes
    before the internal level and production order (bull before bear) is
    kept. Pivots are ordered by index, swing level first.
    """
    ordered = sorted(level_results, key=lambda r: _LEVEL_ORDER.get(r.level, len(LEVELS)))

    events = [e for r in ordered for e in r.events]
    events.sort(key=lambda e: e.break_index)  # stable

    pivots = [p for r in ordered for p in r.pivots]
    pivots.sort(key=lambda p: p.index)

    return EventsResult(
        events=events,
        pivots=pivots,
        trends={r.level: r.final_trend for r in ordered},
        bar_count=bar_count,
        stable_horizon={r.level: bar_count - r.lookback for r in ordered},
    )


def write_range(
    slots: Dict[int, float],
    start: int,
    end: int,
    price: float,
    first_index: int,
    last_index: int,
) -> None:
    """
    Write `price` over [start, end] of one channel, last write wins.

    If a contiguous run of values already reaches `start - 1` and continues
    into or past `start`, the part of that run from `start` onwards is
    cleared first, so an older level never bleeds past a newer one on the
    same channel.
    """
    run_start = None
    k = max(first_index, start - 1)
    while k >= first_index and k in slots:
        run_start = k
        k -= 1

    if run_start is not None:
        run_end = run_start
        while run_end + 1 <= last_index and (run_end + 1) in slots:
            run_end += 1
        if run_end >= start:
            for m in range(start, run_end + 1):
                slots.pop(m, None)

    for j in range(start, min(end, last_index) + 1):
        slots[j] = price


def assemble_channels(
    level_results: Sequence[LevelResult],
    bar_count: int,
    first_index: int = 0,
) -> ChannelMapResult:
    """
    Build the per-bar channel map.

    Swing pivots are written as point markers at their own index. Every
    break writes its price over [pivot_index, break_index] on the channel
    keyed by (level, classification, direction), in production order.
    Channels never collide across levels.
    """
    last_index = first_index + bar_count - 1
    by_channel: Dict[str, Dict[int, float]] = {}

    for result in level_results:
        if result.level == SWING:
            for pivot in result.pivots:
                name = SWING_HIGH_MARKER if pivot.kind == HIGH else SWING_LOW_MARKER
                by_channel.setdefault(name, {})[pivot.index] = pivot.price

        for event in result.events:
            name = channel_name(event.level, event.classification, event.direction)
            write_range(
                by_channel.setdefault(name, {}),
                event.pivot_index,
                event.break_index,
                event.price,
                first_index,
                last_index,
            )

    channels: Dict[int, Dict[str, float]] = {}
    for name, slots in by_channel.items():
        for idx, value in slots.items():
            channels.setdefault(idx, {})[name] = value

    return ChannelMapResult(
        channels=dict(sorted(channels.items())),
        bar_count=bar_count,
        first_index=first_index,
    )


def assemble(
    level_results: List[LevelResult],
    bar_count: int,
    mode: str = "events",
    first_index: int = 0,
) -> Union[EventsResult, ChannelMapResult]:
    """Assemble level results in the requested consumption mode."""
    if mode == "events":
        return assemble_events(level_results, bar_count)
    if mode == "channels":
        return assemble_channels(level_results, bar_count, first_index)
    raise ConfigError(f"Unknown output mode: {mode}", param="mode", value=mode)
