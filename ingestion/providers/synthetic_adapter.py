"""
Synthetic adapter - generate demo kline rows when the live API is unavailable.
No network IO. Rows use the Binance kline shape so one normalizer serves both sources.
"""

import numpy as np
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional


class SyntheticDataError(Exception):
    """Raised when synthetic data generation fails."""
    pass


def generate_klines(
    days: int = 30,
    end_date: Optional[date] = None,
    base_price: float = 50000.0,
    seed: Optional[int] = None
) -> List[List[Any]]:
    """
    Generate daily kline rows ending on end_date.

    Per day:
    - open: base price moved by up to +/-5%
    - high / low: open +/- a 1-9% swing
    - close: uniform between low and high
    - volume: uniform between 10,000 and 60,000

    Args:
        days: Number of consecutive calendar days
        end_date: Last day generated (defaults to today)
        base_price: Price the opens scatter around (BTCUSDT-like by default)
        seed: Random seed for reproducible output

    Returns:
        List of kline rows, oldest first, with string prices like the live API

    Raises:
        SyntheticDataError: If parameters are invalid
    """
    if not isinstance(days, int) or days < 1:
        raise SyntheticDataError(f"days must be a positive integer, got {days}")

    if base_price <= 0:
        raise SyntheticDataError(f"base_price must be positive, got {base_price}")

    if end_date is None:
        end_date = date.today()

    rng = np.random.default_rng(seed)

    rows = []
    for offset in range(days - 1, -1, -1):
        day = end_date - timedelta(days=offset)

        open_price = base_price * (0.95 + rng.random() * 0.1)
        swing_pct = 1 + rng.random() * 8
        high = open_price * (1 + swing_pct / 100)
        low = open_price * (1 - swing_pct / 100)
        close = low + rng.random() * (high - low)
        volume = 10000 + rng.random() * 50000

        open_time = datetime.combine(day, time.min, tzinfo=timezone.utc)
        open_time_ms = int(open_time.timestamp() * 1000)
        close_time_ms = open_time_ms + 24 * 60 * 60 * 1000 - 1

        rows.append([
            open_time_ms,
            f"{open_price:.8f}",
            f"{high:.8f}",
            f"{low:.8f}",
            f"{close:.8f}",
            f"{volume:.8f}",
            close_time_ms,
            f"{volume * close:.8f}",
            int(rng.integers(1000, 100000)),
            f"{volume / 2:.8f}",
            f"{volume * close / 2:.8f}",
            "0",
        ])

    return rows
