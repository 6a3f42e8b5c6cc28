"""
Period aggregation utilities.
Pure functions rolling a daily series into calendar-aligned week and month summaries.

Aggregate fields per period:
    open              first record's open
    close             last record's close
    high / low        max high / min low
    volume            sum of volumes (liquidity and total_volume alias it)
    volatility        MEAN of daily volatilities
    performance       (close - open) / open * 100 over the whole period

volatility and performance deliberately use different operators. Replacing
performance with the mean of daily performances changes its meaning.
"""

import numpy as np
from datetime import date
from typing import List, Sequence

from analysis.records import DailyRecord, PeriodKind, PeriodSummary
from analysis.calculations.percentages import percent_change
from analysis.calculations.periods import (
    SUNDAY,
    months_in_year,
    weeks_in_month,
)


class AggregationError(Exception):
    """Raised when period aggregation fails."""
    pass


class PreconditionViolation(AggregationError, ValueError):
    """Raised when input records are not strictly ascending by date."""
    pass


def aggregate_by_week(
    records: Sequence[DailyRecord],
    year: int,
    month: int,
    week_start: int = SUNDAY
) -> List[PeriodSummary]:
    """
    Summarize records for every calendar week overlapping a month.

    Weeks with no records produce the sentinel summary, so the output always
    has one entry per week (4 to 6) whatever the data coverage.

    Args:
        records: Daily records in ascending date order (not re-sorted)
        year: Calendar year
        month: 0-based month (0 = January)
        week_start: Weekday the weeks begin on (Sunday by default)

    Returns:
        List of week PeriodSummary in chronological order

    Raises:
        InvalidRangeError: If the month cannot be materialized
        PreconditionViolation: If records are not strictly ascending by date
    """
    check_record_order(records)

    return [
        _summarize(records, PeriodKind.WEEK, start, end)
        for start, end in weeks_in_month(year, month, week_start)
    ]


def aggregate_by_month(records: Sequence[DailyRecord], year: int) -> List[PeriodSummary]:
    """
    Summarize records for each of the twelve months of a year.

    Month summaries also carry volatility_trend: last volatility minus first
    volatility when the month has more than one record.

    Args:
        records: Daily records in ascending date order (not re-sorted)
        year: Calendar year

    Returns:
        List of twelve month PeriodSummary, January first

    Raises:
        InvalidRangeError: If the year cannot be materialized
        PreconditionViolation: If records are not strictly ascending by date
    """
    check_record_order(records)

    return [
        _summarize(records, PeriodKind.MONTH, start, end)
        for start, end in months_in_year(year)
    ]


def check_record_order(records: Sequence[DailyRecord]) -> None:
    """
    Check that record dates are strictly ascending.

    Raises:
        PreconditionViolation: On a duplicate or out-of-order date
    """
    for i in range(1, len(records)):
        previous = records[i - 1].date
        current = records[i].date
        if current <= previous:
            raise PreconditionViolation(
                f"Records must be strictly ascending by date: "
                f"{previous.isoformat()} is followed by {current.isoformat()} at index {i}"
            )


def _summarize(
    records: Sequence[DailyRecord],
    period: PeriodKind,
    period_start: date,
    period_end: date
) -> PeriodSummary:
    """Aggregate the records inside [period_start, period_end]."""
    period_records = [r for r in records if period_start <= r.date <= period_end]

    if not period_records:
        return PeriodSummary.empty(period, period_start, period_end)

    first_day = period_records[0]
    last_day = period_records[-1]

    total_volume = sum(r.volume for r in period_records)
    average_volatility = float(np.mean([r.volatility for r in period_records]))

    volatility_trend = 0.0
    if period == PeriodKind.MONTH and len(period_records) > 1:
        volatility_trend = last_day.volatility - first_day.volatility

    return PeriodSummary(
        period=period,
        period_start=period_start,
        period_end=period_end,
        symbol=first_day.symbol,
        open=first_day.open,
        high=max(r.high for r in period_records),
        low=min(r.low for r in period_records),
        close=last_day.close,
        volume=total_volume,
        volatility=average_volatility,
        performance=percent_change(first_day.open, last_day.close),
        trading_days=len(period_records),
        volatility_trend=volatility_trend,
    )
