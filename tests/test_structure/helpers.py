"""Shared bar builders for structure tests."""
import numpy as np
import pandas as pd

from smc_structure.bars import load_bars


def make_bars(highs, lows=None, closes=None, start_index=0):
    """Bars from price lists; lows and closes default to the highs."""
    lows = highs if lows is None else lows
    closes = highs if closes is None else closes
    df = pd.DataFrame({
        "index": range(start_index, start_index + len(highs)),
        "open": closes,
        "high": highs,
        "low": lows,
        "close": closes,
    })
    return load_bars(df)


def make_random_data(periods=300, base_price=100.0, seed=42):
    """Random-walk OHLC DataFrame with some structure."""
    np.random.seed(seed)

    prices = [base_price]
    for _ in range(periods - 1):
        prices.append(prices[-1] + np.random.normal(0, 0.5))

    return pd.DataFrame({
        "open": prices,
        "high": [p + abs(np.random.normal(0, 0.3)) for p in prices],
        "low": [p - abs(np.random.normal(0, 0.3)) for p in prices],
        "close": [p + np.random.normal(0, 0.2) for p in prices],
    })


def triangle_wave(periods, half_period=4, base=10.0):
    """Mid prices rising half_period bars then falling half_period bars."""
    mids = []
    for t in range(periods):
        phase = t % (2 * half_period)
        mids.append(base + (phase if phase <= half_period else 2 * half_period - phase))
    return mids
