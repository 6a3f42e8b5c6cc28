"""
Calendar period utilities.
Pure functions for week and month bounds - no dependency on data presence.
"""

import calendar
from datetime import date, timedelta
from typing import List, Tuple

# Python weekday numbering (Monday = 0), matching the calendar module constants
SUNDAY = calendar.SUNDAY
MONDAY = calendar.MONDAY


class InvalidRangeError(ValueError):
    """Raised when a requested period range cannot be materialized."""
    pass


def start_of_week(day: date, week_start: int = SUNDAY) -> date:
    """
    First day of the week containing day.

    Args:
        day: Any date inside the week
        week_start: Weekday the week begins on (calendar.MONDAY..calendar.SUNDAY)

    Returns:
        Date of the week's first day
    """
    offset = (day.weekday() - week_start) % 7
    return day - timedelta(days=offset)


def end_of_week(day: date, week_start: int = SUNDAY) -> date:
    """Last day of the week containing day."""
    return start_of_week(day, week_start) + timedelta(days=6)


def start_of_month(year: int, month: int) -> date:
    """First day of a month (month is 0-based: 0 = January)."""
    _validate_year_month(year, month)
    return date(year, month + 1, 1)


def end_of_month(year: int, month: int) -> date:
    """Last day of a month (month is 0-based: 0 = January)."""
    _validate_year_month(year, month)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, last_day)


def weeks_in_month(year: int, month: int, week_start: int = SUNDAY) -> List[Tuple[date, date]]:
    """
    Every calendar week overlapping a month.

    The first week may begin in the previous month and the last week may end
    in the next one. A month always yields 4 to 6 weeks.

    Args:
        year: Calendar year
        month: 0-based month (0 = January)
        week_start: Weekday the weeks begin on

    Returns:
        List of inclusive (week_start, week_end) tuples in chronological order

    Raises:
        InvalidRangeError: If the month is invalid or its weeks fall outside
            the representable date range
    """
    _validate_week_start(week_start)

    month_start = start_of_month(year, month)
    month_end = end_of_month(year, month)

    weeks = []
    try:
        current = start_of_week(month_start, week_start)
        while current <= month_end:
            weeks.append((current, current + timedelta(days=6)))
            current += timedelta(days=7)
    except OverflowError as e:
        raise InvalidRangeError(
            f"Weeks of {year}-{month + 1:02d} fall outside the supported date range"
        ) from e

    return weeks


def months_in_year(year: int) -> List[Tuple[date, date]]:
    """
    All twelve calendar months of a year.

    Returns:
        List of inclusive (month_start, month_end) tuples, January first
    """
    return [(start_of_month(year, m), end_of_month(year, m)) for m in range(12)]


def _validate_year_month(year: int, month: int) -> None:
    """
    Validate a (year, 0-based month) pair.

    Raises:
        InvalidRangeError: If year or month cannot form a date
    """
    if not isinstance(year, int) or isinstance(year, bool):
        raise InvalidRangeError(f"year must be integer, got {type(year)}")

    if not isinstance(month, int) or isinstance(month, bool):
        raise InvalidRangeError(f"month must be integer, got {type(month)}")

    if not date.min.year <= year <= date.max.year:
        raise InvalidRangeError(
            f"year must be between {date.min.year} and {date.max.year}, got {year}"
        )

    if not 0 <= month <= 11:
        raise InvalidRangeError(f"month must be 0-based (0-11), got {month}")


def _validate_week_start(week_start: int) -> None:
    if week_start not in range(7):
        raise InvalidRangeError(f"week_start must be a weekday 0-6, got {week_start}")
