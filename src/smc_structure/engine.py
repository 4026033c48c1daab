"""
Structure Engine - orchestrator for market structure analysis.

Responsibilities:
- Validate bar input
- Run the swing and internal level pipelines (scan -> registry -> classify)
- Assemble events or the per-bar channel map

Each run builds fresh registries and trend trackers, so the result is a
pure function of the bars and the config.
"""

import logging
from typing import List, Optional, Sequence, Union

from .assembler import assemble
from .bars import BarInput, load_bars
from .config import OUTPUT_MODES, StructureConfig
from .detectors.break_classifier import classify_breaks
from .detectors.pivot_scanner import scan_pivots
from .errors import ConfigError
from .event_log import StructureObserver
from .models import LEVELS, Bar, ChannelMapResult, EventsResult, LevelResult
from .registry import PivotRegistry
from .trend import TrendStateTracker

logger = logging.getLogger(__name__)


class StructureEngine:
    """
    Main market structure engine.

    Runs one pipeline per structure level. The levels share no mutable
    state and only meet in the assembler.
    """

    def __init__(
        self,
        config: Optional[StructureConfig] = None,
        observer: Optional[StructureObserver] = None,
    ):
        self.config = config or StructureConfig()
        self.observer = observer

    def analyze_level(self, bars: Sequence[Bar], level: str) -> LevelResult:
        """
        Scan and classify one structure level.

        Args:
            bars: Validated bars (see load_bars)
            level: "swing" / "internal"

        Returns:
            LevelResult with pivots, break events and final trend
        """
        lookback = self.config.lookback_for(level)

        pivots = scan_pivots(
            bars,
            lookback,
            level,
            strategy=self.config.pivot_strategy,
            observer=self.observer,
        )

        registry = PivotRegistry(level, pivots)
        trend = TrendStateTracker(level)
        events = classify_breaks(bars, registry, trend, observer=self.observer)

        logger.debug(
            f"[{level}] L={lookback}: {len(pivots)} pivots, {len(events)} breaks, "
            f"{registry.count(live_only=True)} live, trend={trend.get()}"
        )

        return LevelResult(
            level=level,
            lookback=lookback,
            pivots=pivots,
            events=events,
            final_trend=trend.get(),
        )

    def run(
        self,
        data: BarInput,
        mode: Optional[str] = None,
    ) -> Union[EventsResult, ChannelMapResult]:
        """
        Analyze a bar sequence.

        Args:
            data: DataFrame or iterable of bars (see load_bars)
            mode: "events" / "channels"; defaults to config.output_mode

        Returns:
            EventsResult or ChannelMapResult

        Raises:
            DataError: malformed bars
            ConfigError: unknown mode
        """
        mode = mode or self.config.output_mode
        if mode not in OUTPUT_MODES:
            raise ConfigError(f"Unknown output mode: {mode}", param="mode", value=mode)

        bars = load_bars(data)
        level_results: List[LevelResult] = [self.analyze_level(bars, level) for level in LEVELS]

        logger.info(
            f"Structure analysis: {len(bars)} bars, "
            + ", ".join(f"{r.level} {len(r.events)} breaks" for r in level_results)
        )

        first_index = bars[0].index if bars else 0
        return assemble(level_results, len(bars), mode=mode, first_index=first_index)
