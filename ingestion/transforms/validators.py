"""
Core validators for canonical data rows.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import date, datetime
from typing import Dict, Any, List


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_daily_row(row: Dict[str, Any]) -> None:
    """
    Validate a canonical daily row.

    Args:
        row: Dictionary containing daily market data

    Raises:
        ValidationError: If validation fails
    """
    # Required keys
    required_keys = {
        'symbol', 'date', 'open', 'high', 'low', 'close', 'volume',
        'volatility', 'performance', 'liquidity', 'source', 'ingested_at'
    }

    # Check for missing keys
    missing = required_keys - set(row.keys())
    if missing:
        raise ValidationError(f"Missing required keys: {missing}")

    # Type validations
    if not isinstance(row['symbol'], str) or not row['symbol']:
        raise ValidationError(f"symbol must be non-empty string, got {row['symbol']!r}")

    if not isinstance(row['date'], date) or isinstance(row['date'], datetime):
        raise ValidationError(f"date must be date, got {type(row['date'])}")

    if not isinstance(row['ingested_at'], datetime):
        raise ValidationError(f"ingested_at must be datetime, got {type(row['ingested_at'])}")

    if not isinstance(row['source'], str):
        raise ValidationError(f"source must be string, got {type(row['source'])}")

    # Numeric validations for prices
    for field in ['open', 'high', 'low', 'close']:
        value = _check_finite(row, field)
        if value <= 0:
            raise ValidationError(f"{field} must be positive, got {value}")

    # Volume validation
    volume = _check_finite(row, 'volume')
    if volume < 0:
        raise ValidationError(f"volume must be non-negative, got {volume}")

    # Derived fields
    _check_finite(row, 'volatility')
    _check_finite(row, 'performance')
    _check_finite(row, 'liquidity')

    # Price logic validations
    high = row['high']
    low = row['low']
    open_price = row['open']
    close = row['close']

    if high < low:
        raise ValidationError(f"high ({high}) must be >= low ({low})")

    if high < open_price:
        raise ValidationError(f"high ({high}) must be >= open ({open_price})")

    if high < close:
        raise ValidationError(f"high ({high}) must be >= close ({close})")

    if low > open_price:
        raise ValidationError(f"low ({low}) must be <= open ({open_price})")

    if low > close:
        raise ValidationError(f"low ({low}) must be <= close ({close})")


def check_date_monotonicity(rows: List[Dict[str, Any]]) -> None:
    """
    Check that dates are strictly increasing for each symbol.

    Args:
        rows: List of daily rows with 'symbol' and 'date' fields

    Raises:
        ValidationError: If dates are not monotonic or have duplicates
    """
    if not rows:
        return

    # Group by symbol
    symbol_dates: Dict[str, List[date]] = {}
    for row in rows:
        symbol_dates.setdefault(row.get('symbol'), []).append(row.get('date'))

    # Check each symbol's dates
    for symbol, dates in symbol_dates.items():
        if len(dates) != len(set(dates)):
            raise ValidationError(f"Duplicate date found for symbol {symbol}")

        for i in range(1, len(dates)):
            if dates[i] <= dates[i-1]:
                raise ValidationError(
                    f"Symbol {symbol} dates not monotonic: "
                    f"{dates[i-1]} >= {dates[i]}"
                )


def _check_finite(row: Dict[str, Any], field: str) -> float:
    """Return row[field] after checking it is a finite number."""
    value = row[field]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be numeric, got {type(value)}")

    if not math.isfinite(value):
        raise ValidationError(f"{field} must be finite, got {value}")

    return value
