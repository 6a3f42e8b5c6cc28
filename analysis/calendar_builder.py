"""
Calendar builder - keys daily records and period summaries by date for display.
Pure functions; pandas is used only for tabular rendering.
"""

import pandas as pd
from typing import Dict, List, Sequence, Union

from analysis.records import DailyRecord, PeriodSummary

CalendarItem = Union[DailyRecord, PeriodSummary]

VIEW_MODES = ('volatility', 'liquidity', 'performance', 'all')

# Columns shown per view mode, in display order
_VIEW_COLUMNS = {
    'volatility': ['symbol', 'open', 'high', 'low', 'close', 'volatility'],
    'liquidity': ['symbol', 'volume', 'liquidity'],
    'performance': ['symbol', 'open', 'close', 'performance'],
    'all': ['symbol', 'open', 'high', 'low', 'close', 'volume', 'volatility', 'performance', 'liquidity'],
}


class CalendarBuilderError(Exception):
    """Raised when calendar data cannot be built."""
    pass


def calendar_key(item: CalendarItem) -> str:
    """ISO date string a calendar cell is keyed by (period start for summaries)."""
    return item.date.isoformat()


def build_calendar_data(items: Sequence[CalendarItem]) -> Dict[str, CalendarItem]:
    """
    Key records or summaries by ISO date string.

    Items sharing a key replace earlier ones, so the last occurrence wins.

    Args:
        items: Daily records or period summaries

    Returns:
        Dictionary mapping 'YYYY-MM-DD' to item, in input order
    """
    calendar_data = {}
    for item in items:
        calendar_data[calendar_key(item)] = item
    return calendar_data


def calendar_to_frame(items: Sequence[CalendarItem], view_mode: str = 'all') -> pd.DataFrame:
    """
    Tabulate calendar items for display.

    Period summaries add period_end and trading_days columns.

    Args:
        items: Daily records or period summaries
        view_mode: One of VIEW_MODES

    Returns:
        DataFrame indexed by date string

    Raises:
        CalendarBuilderError: If view_mode is unknown
    """
    if view_mode not in _VIEW_COLUMNS:
        raise CalendarBuilderError(
            f"Unknown view mode: {view_mode} (expected one of {', '.join(VIEW_MODES)})"
        )

    columns = list(_VIEW_COLUMNS[view_mode])
    has_summaries = any(isinstance(item, PeriodSummary) for item in items)
    if has_summaries:
        columns = ['period_end'] + columns + ['trading_days']

    rows: List[Dict[str, object]] = []
    for item in items:
        row = {'date': calendar_key(item)}
        for column in columns:
            value = getattr(item, column, None)
            row[column] = value.isoformat() if column == 'period_end' and value is not None else value
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=columns, index=pd.Index([], name='date'))

    return pd.DataFrame(rows, columns=['date'] + columns).set_index('date')
