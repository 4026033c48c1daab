"""
Bar ingestion - validates OHLC input before it reaches the detectors.

Accepts a DataFrame or an iterable of mappings / Bar objects and returns
an immutable list of Bar. Invalid values are rejected with DataError
instead of being coerced into NaN comparisons.
"""

import logging
import math
import numbers
from typing import Any, Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .errors import DataError
from .models import Bar

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("high", "low", "close")
OPTIONAL_FIELDS = ("open", "volume")

BarInput = Union[pd.DataFrame, Iterable[Union[Bar, Mapping[str, Any]]]]


def _to_number(value: Any, index: int, name: str, required: bool = True) -> Optional[float]:
    """Validate a single OHLC field. Returns a float, or None for an absent optional field."""
    if value is None or (not required and _is_missing(value)):
        if required:
            raise DataError(f"Bar {index}: missing '{name}'", index=index, field=name)
        return None

    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise DataError(
            f"Bar {index}: non-numeric '{name}' ({value!r})", index=index, field=name
        )

    number = float(value)
    if not math.isfinite(number):
        raise DataError(
            f"Bar {index}: non-finite '{name}' ({value!r})", index=index, field=name
        )
    return number


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _check_index(raw: Any, position: int, previous: Optional[int]) -> int:
    """Validate a caller-supplied bar index: integer, >= 0, contiguous."""
    if isinstance(raw, (bool, np.bool_)) or not isinstance(raw, numbers.Integral):
        raise DataError(f"Bar at position {position}: index must be an integer, got {raw!r}",
                        index=position, field="index")
    idx = int(raw)
    if idx < 0:
        raise DataError(f"Bar at position {position}: negative index {idx}",
                        index=idx, field="index")
    if previous is not None and idx != previous + 1:
        raise DataError(
            f"Bar indices must be contiguous and increasing: {previous} followed by {idx}",
            index=idx,
            field="index",
        )
    return idx


def _records_from_dataframe(df: pd.DataFrame) -> List[Mapping[str, Any]]:
    df = df.copy()
    df.columns = [str(c).lower().strip() for c in df.columns]

    missing = [c for c in REQUIRED_FIELDS if c not in df.columns]
    if missing:
        raise DataError(f"Missing columns: {missing}", field=missing[0])

    keep = [c for c in ("index",) + REQUIRED_FIELDS + OPTIONAL_FIELDS if c in df.columns]
    # object dtype keeps numpy scalars out of the way of the isinstance checks
    return df[keep].astype(object).to_dict("records")


def _as_mapping(item: Union[Bar, Mapping[str, Any]], position: int) -> Mapping[str, Any]:
    if isinstance(item, Bar):
        return {
            "index": item.index,
            "open": item.open,
            "high": item.high,
            "low": item.low,
            "close": item.close,
            "volume": item.volume,
        }
    if isinstance(item, Mapping):
        return {str(k).lower().strip(): v for k, v in item.items()}
    raise DataError(f"Bar at position {position}: unsupported record type {type(item).__name__}",
                    index=position)


def load_bars(data: BarInput) -> List[Bar]:
    """
    Validate OHLC input and convert it to a list of Bar.

    Args:
        data: DataFrame with [open, high, low, close] (+ optional index, volume)
              or iterable of mappings / Bar objects

    Returns:
        List of Bar with contiguous indices

    Raises:
        DataError: missing column/field, non-numeric or non-finite value,
                   non-contiguous indices
    """
    if isinstance(data, pd.DataFrame):
        records = _records_from_dataframe(data)
    else:
        records = [_as_mapping(item, pos) for pos, item in enumerate(data)]

    bars: List[Bar] = []
    previous: Optional[int] = None
    for position, rec in enumerate(records):
        raw_index = rec.get("index")
        if raw_index is None or _is_missing(raw_index):
            idx = position if previous is None else previous + 1
        else:
            idx = _check_index(raw_index, position, previous)

        bars.append(Bar(
            index=idx,
            high=_to_number(rec.get("high"), idx, "high"),
            low=_to_number(rec.get("low"), idx, "low"),
            close=_to_number(rec.get("close"), idx, "close"),
            open=_to_number(rec.get("open"), idx, "open", required=False),
            volume=_to_number(rec.get("volume"), idx, "volume", required=False),
        ))
        previous = idx

    logger.debug(f"Loaded {len(bars)} bars")
    return bars

