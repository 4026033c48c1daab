"""
Rendering collaborator interface.

The engine does not draw. A host renderer receives one segment per break
(pivot index -> break index at the pivot price) and one marker per swing
pivot, keyed by channel name for styling. Colors, stroke widths and the
index/price -> pixel transform belong to the host.
"""

from typing import Protocol

from .models import HIGH, SWING, SWING_HIGH_MARKER, SWING_LOW_MARKER, EventsResult, channel_name


class StructureRenderer(Protocol):
    def draw_segment(self, channel: str, start_index: int, end_index: int, price: float) -> None: ...

    def draw_marker(self, channel: str, index: int, price: float) -> None: ...


def render_structure(result: EventsResult, renderer: StructureRenderer) -> int:
    """
    Hand every break segment and swing pivot marker to `renderer`.

    Returns:
        Number of draw calls made
    """
    calls = 0
    for event in result.events:
        renderer.draw_segment(
            channel_name(event.level, event.classification, event.direction),
            event.pivot_index,
            event.break_index,
            event.price,
        )
        calls += 1

    for pivot in result.pivots_for(SWING):
        channel = SWING_HIGH_MARKER if pivot.kind == HIGH else SWING_LOW_MARKER
        renderer.draw_marker(channel, pivot.index, pivot.price)
        calls += 1

    return calls
