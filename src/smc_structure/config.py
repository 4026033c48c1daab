"""
Structure engine configuration - lookback lengths and output policy.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping

from .errors import ConfigError

logger = logging.getLogger(__name__)

PIVOT_STRATEGIES = ("offset", "symmetric")
OUTPUT_MODES = ("events", "channels")


def validate_lookback(value: Any, param: str = "lookback") -> int:
    """Return `value` if it is a positive integer, otherwise raise ConfigError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{param} must be an integer, got {value!r}", param=param, value=value)
    if value <= 0:
        raise ConfigError(f"{param} must be > 0, got {value}", param=param, value=value)
    return value


@dataclass
class StructureConfig:
    """Configuration for the structure engine. One per analysed series."""

    swing_length: int = 50                # Major structure lookback
    internal_length: int = 5              # Minor structure lookback

    # "offset" = confirmation after L bars with state toggle (causal)
    # "symmetric" = strict extreme in [i-L, i+L]
    pivot_strategy: str = "offset"

    # "events" = ordered event/pivot lists, "channels" = per-bar channel map
    output_mode: str = "events"

    def __post_init__(self):
        validate_lookback(self.swing_length, "swing_length")
        validate_lookback(self.internal_length, "internal_length")

        if self.pivot_strategy not in PIVOT_STRATEGIES:
            raise ConfigError(
                f"Unknown pivot strategy: {self.pivot_strategy}",
                param="pivot_strategy",
                value=self.pivot_strategy,
            )
        if self.output_mode not in OUTPUT_MODES:
            raise ConfigError(
                f"Unknown output mode: {self.output_mode}",
                param="output_mode",
                value=self.output_mode,
            )

        if self.swing_length <= self.internal_length:
            logger.warning(
                f"swing_length ({self.swing_length}) <= internal_length "
                f"({self.internal_length}); swing structure will be finer than internal"
            )

    def lookback_for(self, level: str) -> int:
        """Lookback length for a structure level."""
        if level == "swing":
            return self.swing_length
        if level == "internal":
            return self.internal_length
        raise ConfigError(f"Unknown structure level: {level}", param="level", value=level)

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "StructureConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in params.items() if k in known})
