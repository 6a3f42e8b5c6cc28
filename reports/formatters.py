"""
Display formatters for calendar cells and detail views.
Deterministic string formatting for percentages, prices, volumes, and dates.
"""

import math
import numbers
from datetime import datetime, date
from typing import Optional, Union


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def format_percentage(value: Optional[float], decimal_places: int = 2, signed: bool = False) -> str:
    """
    Format a value that is already a percentage.

    Args:
        value: Percentage value (8.45 = 8.45%)
        decimal_places: Number of decimal places (default: 2)
        signed: Prefix positive values with '+'

    Returns:
        Formatted percentage string (e.g., "8.45%", "+1.20%"), or "n/a" for
        non-finite values
    """
    if value is None:
        return "Not available"

    value = _check_numeric(value, "Percentage")
    if not math.isfinite(value):
        return "n/a"

    sign = "+" if signed and value > 0 else ""
    return f"{sign}{value:.{decimal_places}f}%"


def format_price(value: Optional[float]) -> str:
    """
    Format a price with thousands separators.

    Prices under 1 keep 6 decimals so small-cap pairs stay readable.

    Returns:
        Formatted price string (e.g., "$50,123.45", "$0.000123")
    """
    if value is None:
        return "Not available"

    value = _check_numeric(value, "Price")
    if not math.isfinite(value):
        return "n/a"

    if 0 < abs(value) < 1:
        return f"${value:.6f}"
    return f"${value:,.2f}"


def format_volume(value: Optional[float]) -> str:
    """
    Format a volume with an appropriate scale (B/M/K).

    Returns:
        Formatted volume string (e.g., "1.2M", "45.3K", "950")
    """
    if value is None:
        return "Not available"

    value = _check_numeric(value, "Volume")
    if not math.isfinite(value):
        return "n/a"

    abs_value = abs(value)
    sign = "-" if value < 0 else ""

    if abs_value >= 1e9:
        return f"{sign}{abs_value/1e9:.1f}B"
    elif abs_value >= 1e6:
        return f"{sign}{abs_value/1e6:.1f}M"
    elif abs_value >= 1e3:
        return f"{sign}{abs_value/1e3:.1f}K"
    else:
        return f"{sign}{abs_value:.0f}"


def format_date_display(date_input: Union[str, date, datetime]) -> str:
    """
    Format date as "Month DD, YYYY".

    Args:
        date_input: Date as string, date object, or datetime object

    Returns:
        Formatted date string (e.g., "July 15, 2025")
    """
    if date_input is None:
        return "Not available"

    # Convert to date object
    if isinstance(date_input, str):
        try:
            if 'T' in date_input:
                # ISO datetime string
                date_obj = datetime.fromisoformat(date_input.replace('Z', '+00:00')).date()
            else:
                date_obj = date.fromisoformat(date_input)
        except ValueError:
            raise FormatterError(f"Invalid date string: {date_input}")
    elif isinstance(date_input, datetime):
        date_obj = date_input.date()
    elif isinstance(date_input, date):
        date_obj = date_input
    else:
        raise FormatterError(f"Date must be string, date, or datetime, got {type(date_input)}")

    return date_obj.strftime("%B %d, %Y")


def format_period_range(period_start: date, period_end: date) -> str:
    """Format an inclusive period as "Mon DD - Mon DD, YYYY"."""
    if period_start.year == period_end.year:
        return f"{period_start.strftime('%b %d')} - {period_end.strftime('%b %d, %Y')}"
    return f"{period_start.strftime('%b %d, %Y')} - {period_end.strftime('%b %d, %Y')}"


def _check_numeric(value, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise FormatterError(f"{label} value must be numeric, got {type(value)}")
    return float(value)
