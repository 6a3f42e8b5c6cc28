"""
Normalizers for transforming provider data to canonical shape.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

from datetime import datetime, timezone
from typing import Dict, Any, List

from analysis.calculations.percentages import percent_change, percent_of


class NormalizationError(Exception):
    """Raised when a provider row cannot be mapped to canonical shape."""
    pass


def normalize_klines(
    raw_rows: List[List[Any]],
    *,
    symbol: str,
    source: str,
    ingested_at: datetime
) -> List[Dict[str, Any]]:
    """
    Transform kline rows to canonical daily rows.

    Minimal normalization:
    - Open time (ms since epoch, UTC) to date object
    - String prices and volume to floats
    - Derived volatility, performance and liquidity fields
    - Deduplication by date (keep last to handle corrections)

    Args:
        raw_rows: Kline rows [open_time_ms, open, high, low, close, volume, ...]
        symbol: Trading pair symbol
        source: Data provider name ('binance' or 'synthetic')
        ingested_at: Pipeline processing timestamp

    Returns:
        List of canonical daily row dictionaries

    Raises:
        NormalizationError: If a row is too short or not numeric
    """
    if not raw_rows:
        return []

    symbol = symbol.upper()
    seen_dates = {}  # For deduplication

    for raw in raw_rows:
        if len(raw) < 6:
            raise NormalizationError(f"Kline row too short ({len(raw)} fields): {raw}")

        try:
            open_time_ms = int(raw[0])
            open_price = float(raw[1])
            high = float(raw[2])
            low = float(raw[3])
            close = float(raw[4])
            volume = float(raw[5])
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"Non-numeric kline row {raw}: {e}") from e

        row_date = datetime.fromtimestamp(open_time_ms / 1000, tz=timezone.utc).date()

        canonical = {
            'symbol': symbol,
            'date': row_date,
            'open': open_price,
            'high': high,
            'low': low,
            'close': close,
            'volume': volume,
            'volatility': percent_of(high - low, open_price),
            'performance': percent_change(open_price, close),
            'liquidity': volume,
            'source': source,
            'ingested_at': ingested_at,
        }

        # Deduplication by primary key (symbol, date)
        seen_dates[(symbol, row_date)] = canonical

    return list(seen_dates.values())


def normalize_ticker(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Transform a 24hr ticker payload to canonical shape.

    Binance reports the last price as 'lastPrice'; older payloads use 'price'.

    Args:
        raw: Raw ticker dictionary

    Returns:
        Canonical ticker dictionary with float values
    """
    try:
        return {
            'symbol': raw['symbol'],
            'price': float(raw.get('lastPrice', raw.get('price', 0))),
            'price_change': float(raw.get('priceChange', 0)),
            'price_change_percent': float(raw.get('priceChangePercent', 0)),
            'high_price': float(raw.get('highPrice', 0)),
            'low_price': float(raw.get('lowPrice', 0)),
            'volume': float(raw.get('volume', 0)),
            'count': int(raw.get('count', 0)),
        }
    except (KeyError, TypeError, ValueError) as e:
        raise NormalizationError(f"Invalid ticker payload: {e}") from e


def normalize_order_book(raw: Dict[str, Any], *, symbol: str, fetched_at: datetime) -> Dict[str, Any]:
    """
    Transform a depth payload to canonical shape.

    Args:
        raw: Raw depth dictionary with 'bids' and 'asks'
        symbol: Trading pair symbol
        fetched_at: Fetch timestamp

    Returns:
        Canonical order book with (price, quantity) float tuples per side
    """
    try:
        bids = [(float(price), float(qty)) for price, qty in raw.get('bids', [])]
        asks = [(float(price), float(qty)) for price, qty in raw.get('asks', [])]
    except (TypeError, ValueError) as e:
        raise NormalizationError(f"Invalid order book payload for {symbol}: {e}") from e

    return {
        'symbol': symbol.upper(),
        'bids': bids,
        'asks': asks,
        'timestamp': fetched_at,
    }
