"""
Pivot scanner.

Detects pivot highs and lows at one lookback length. Two strategies:

- offset (canonical): candidate p = i - L is compared against the forward
  window (p, i]. A pivot is emitted only when the Top/Bottom state toggles,
  so consecutive qualifying bars produce a single pivot. Causal: a pivot
  at p is known once bar p + L exists.
- symmetric: bar i is a pivot when its high (low) is strictly above
  (below) every other bar in [i - L, i + L].

The two strategies give different pivot timing and counts and are never
mixed within one run.
"""

from collections import deque
from typing import Deque, List, Optional, Sequence

import numpy as np

from ..config import PIVOT_STRATEGIES, validate_lookback
from ..errors import ConfigError
from ..models import HIGH, LOW, Bar, Pivot

# Offset strategy state register
_TOP = 0
_BOTTOM = 1


def scan_pivots(
    bars: Sequence[Bar],
    lookback: int,
    level: str,
    strategy: str = "offset",
    observer=None,
) -> List[Pivot]:
    """
    Scan bars for pivots at one lookback length.

    Args:
        bars: Validated bars (see load_bars)
        lookback: Lookback length L > 0
        level: "swing" / "internal", stamped on every pivot
        strategy: "offset" / "symmetric"
        observer: Optional StructureObserver notified per confirmed pivot

    Returns:
        Pivots ordered by bar index (emission order)

    Raises:
        ConfigError: non-positive lookback or unknown strategy
    """
    validate_lookback(lookback)
    if strategy not in PIVOT_STRATEGIES:
        raise ConfigError(f"Unknown pivot strategy: {strategy}", param="strategy", value=strategy)

    highs = np.fromiter((b.high for b in bars), dtype=float, count=len(bars))
    lows = np.fromiter((b.low for b in bars), dtype=float, count=len(bars))
    base = bars[0].index if len(bars) else 0

    if strategy == "offset":
        pivots = _scan_offset(highs, lows, lookback, level, base, observer)
    else:
        pivots = _scan_symmetric(highs, lows, lookback, level, base, observer)
    return pivots


def _scan_offset(
    highs: np.ndarray,
    lows: np.ndarray,
    lookback: int,
    level: str,
    base: int,
    observer,
) -> List[Pivot]:
    """
    Offset confirmation with state toggle, O(n).

    Window max/min over (p, i] is kept in monotonic deques of positions:
    max_q holds decreasing highs, min_q increasing lows.
    """
    n = len(highs)
    pivots: List[Pivot] = []
    max_q: Deque[int] = deque()
    min_q: Deque[int] = deque()
    state: Optional[int] = None

    for i in range(1, n):
        while max_q and highs[max_q[-1]] <= highs[i]:
            max_q.pop()
        max_q.append(i)
        while min_q and lows[min_q[-1]] >= lows[i]:
            min_q.pop()
        min_q.append(i)

        if i < lookback:
            continue

        p = i - lookback
        while max_q[0] <= p:
            max_q.popleft()
        while min_q[0] <= p:
            min_q.popleft()

        max_high = highs[max_q[0]]
        min_low = lows[min_q[0]]

        current = state
        if highs[p] > max_high:
            current = _TOP
        elif lows[p] < min_low:
            current = _BOTTOM

        if current == _TOP and state != _TOP:
            pivots.append(_emit(Pivot(base + p, float(highs[p]), HIGH, level), base + i, observer))
        elif current == _BOTTOM and state != _BOTTOM:
            pivots.append(_emit(Pivot(base + p, float(lows[p]), LOW, level), base + i, observer))

        state = current

    return pivots


def _scan_symmetric(
    highs: np.ndarray,
    lows: np.ndarray,
    lookback: int,
    level: str,
    base: int,
    observer,
) -> List[Pivot]:
    """
    Symmetric window: strict extreme over [i - L, i + L].

    Needs L bars on both sides, so only i in [L, n - L) can qualify.
    A single bar can be both a pivot high and a pivot low.
    """
    n = len(highs)
    pivots: List[Pivot] = []

    for i in range(lookback, n - lookback):
        window = slice(i - lookback, i + lookback + 1)
        confirmed_at = base + i + lookback

        # Strict: the centre must be the only bar holding the extreme
        window_highs = highs[window]
        if highs[i] == window_highs.max() and np.count_nonzero(window_highs == highs[i]) == 1:
            pivots.append(_emit(Pivot(base + i, float(highs[i]), HIGH, level), confirmed_at, observer))

        window_lows = lows[window]
        if lows[i] == window_lows.min() and np.count_nonzero(window_lows == lows[i]) == 1:
            pivots.append(_emit(Pivot(base + i, float(lows[i]), LOW, level), confirmed_at, observer))

    return pivots


def _emit(pivot: Pivot, confirmed_at: int, observer) -> Pivot:
    if observer is not None:
        observer.on_pivot_confirmed(pivot, confirmed_at)
    return pivot
