"""
Calendar DAG - orchestrates the market calendar pipeline.
Composes: Provider → Transform → Validate → Aggregate → Key by date.
"""

import os
import logging
from datetime import date, datetime
from typing import Dict, Any, Optional, List, Sequence, Tuple
from dataclasses import dataclass
from dotenv import load_dotenv

# Import all pipeline components
from ingestion.providers.binance_adapter import fetch_klines, BinanceError
from ingestion.providers.synthetic_adapter import generate_klines
from ingestion.transforms.normalizers import normalize_klines
from ingestion.transforms.validators import (
    validate_daily_row,
    check_date_monotonicity,
    ValidationError
)
from analysis.records import DailyRecord, PeriodSummary
from analysis.calculations.aggregation import aggregate_by_week, aggregate_by_month
from analysis.calculations.detail_metrics import derive_metrics
from analysis.calendar_builder import build_calendar_data, VIEW_MODES

# Load environment variables
load_dotenv()

# Set up logger
logger = logging.getLogger(__name__)

TIME_FRAMES = ('daily', 'weekly', 'monthly')
DATA_SOURCES = ('auto', 'binance', 'synthetic')

# One kline per UTC calendar day
KLINE_INTERVAL = '1d'

# Daily records shown alongside a detail view
RECENT_HISTORY_DAYS = 7


class PipelineError(Exception):
    """Raised when pipeline execution fails."""
    pass


def _default_days() -> int:
    return int(os.getenv('CALENDAR_HISTORY_DAYS', '90'))


@dataclass
class CalendarConfig:
    """Configuration for the calendar pipeline."""
    symbol: str
    time_frame: str = 'daily'
    year: Optional[int] = None
    month: Optional[int] = None  # 0-based (0 = January)
    days: Optional[int] = None
    source: str = 'auto'
    view_mode: str = 'all'

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.symbol or not isinstance(self.symbol, str):
            raise ValueError("symbol must be non-empty string")
        self.symbol = self.symbol.upper()

        if self.time_frame not in TIME_FRAMES:
            raise ValueError(f"time_frame must be one of {TIME_FRAMES}, got {self.time_frame}")

        if self.source not in DATA_SOURCES:
            raise ValueError(f"source must be one of {DATA_SOURCES}, got {self.source}")

        if self.view_mode not in VIEW_MODES:
            raise ValueError(f"view_mode must be one of {VIEW_MODES}, got {self.view_mode}")

        # Default calendar position is the current month
        today = date.today()
        if self.year is None:
            self.year = today.year
        if self.month is None:
            self.month = today.month - 1

        if not 0 <= self.month <= 11:
            raise ValueError(f"month must be 0-based (0-11), got {self.month}")

        if self.days is None:
            self.days = _default_days()

        if not 1 <= self.days <= 1000:
            raise ValueError(f"days must be between 1 and 1000, got {self.days}")


def run_calendar(config: CalendarConfig) -> Dict[str, Any]:
    """
    Run the complete calendar pipeline.

    Pipeline stages:
    1. Fetch raw klines (live, synthetic, or live with synthetic fallback)
    2. Normalize to canonical rows
    3. Validate each row
    4. Aggregate by the configured time frame
    5. Key the output by date string

    Args:
        config: Pipeline configuration

    Returns:
        Dictionary with run results, the calendar items and the keyed calendar
    """
    start_time = datetime.now()

    result = {
        'symbol': config.symbol,
        'time_frame': config.time_frame,
        'year': config.year,
        'month': config.month,
        'status': 'running',
        'source': None,
        'rows_fetched': 0,
        'rows_valid': 0,
        'validation_warnings': 0,
        'periods': 0,
        'records': [],
        'items': [],
        'calendar': {},
        'error_message': None
    }

    try:
        # Stage 1: Fetch raw data
        raw_data, source = _fetch_raw_klines(config)
        result['source'] = source
        result['rows_fetched'] = len(raw_data)

        # Stage 2: Normalize to canonical format
        normalized_data = normalize_klines(
            raw_rows=raw_data,
            symbol=config.symbol,
            source=source,
            ingested_at=datetime.now()
        )

        # Stage 3: Validate each row
        valid_rows = _validate_rows(normalized_data, config.symbol)
        result['validation_warnings'] = len(normalized_data) - len(valid_rows)
        result['rows_valid'] = len(valid_rows)

        if normalized_data and not valid_rows:
            raise PipelineError(f"All {len(normalized_data)} rows failed validation")

        check_date_monotonicity(valid_rows)
        records = [DailyRecord.from_row(row) for row in valid_rows]
        result['records'] = records

        # Stage 4: Aggregate by time frame
        items = aggregate_records(records, config.time_frame, config.year, config.month)

        # Stage 5: Key by date
        result['items'] = items
        result['calendar'] = build_calendar_data(items)
        result['periods'] = len(items)
        result['status'] = 'completed'

    except Exception as e:
        logger.error(f"Calendar pipeline failed for {config.symbol}: {e}")
        result['status'] = 'failed'
        result['error_message'] = str(e)

    result['duration_seconds'] = (datetime.now() - start_time).total_seconds()
    return result


def aggregate_records(
    records: List[DailyRecord],
    time_frame: str,
    year: int,
    month: int
) -> List[Any]:
    """
    Select the calendar items for a time frame.

    daily returns the records themselves; weekly aggregates the weeks of
    (year, month); monthly aggregates the months of year.

    Raises:
        PipelineError: If time_frame is unknown
    """
    if time_frame == 'daily':
        return list(records)
    if time_frame == 'weekly':
        return aggregate_by_week(records, year, month)
    if time_frame == 'monthly':
        return aggregate_by_month(records, year)
    raise PipelineError(f"Unknown time frame: {time_frame}")


def describe_day(
    calendar: Dict[str, Any],
    date_key: str,
    records: Sequence[DailyRecord] = ()
) -> Optional[Dict[str, Any]]:
    """
    Detail view for one calendar cell.

    The history lists the last RECENT_HISTORY_DAYS daily records up to the
    cell (its period end for week and month summaries).

    Args:
        calendar: Calendar data keyed by ISO date
        date_key: Selected date ('YYYY-MM-DD')
        records: Daily records behind the calendar, ascending by date

    Returns:
        Dictionary with the item, its derived metrics and recent history,
        or None if the date has no cell
    """
    item = calendar.get(date_key)
    if item is None:
        return None

    last_day = item.period_end if isinstance(item, PeriodSummary) else item.date
    recent = [r for r in records if r.date <= last_day][-RECENT_HISTORY_DAYS:]

    return {
        'date': date_key,
        'item': item.to_dict(),
        'metrics': derive_metrics(item).to_dict(),
        'history': [
            {
                'date': r.date.isoformat(),
                'close': r.close,
                'volume': r.volume,
                'volatility': r.volatility,
            }
            for r in recent
        ]
    }


def _fetch_raw_klines(config: CalendarConfig) -> Tuple[List[List[Any]], str]:
    """
    Fetch raw klines from the configured source.

    Returns:
        Tuple of (raw kline rows, source name)
    """
    if config.source == 'synthetic':
        return generate_klines(days=config.days), 'synthetic'

    try:
        raw = fetch_klines(config.symbol, interval=KLINE_INTERVAL, limit=config.days)
        return raw, 'binance'
    except BinanceError as e:
        if config.source == 'binance':
            raise
        logger.warning(f"API unavailable, using synthetic data for {config.symbol}: {e}")
        return generate_klines(days=config.days), 'synthetic'


def _validate_rows(rows: List[Dict[str, Any]], symbol: str) -> List[Dict[str, Any]]:
    """Keep rows that pass validation, logging the rest."""
    valid_rows = []
    for row in rows:
        try:
            validate_daily_row(row)
            valid_rows.append(row)
        except ValidationError as e:
            # Log validation warning but continue processing
            logger.warning(f"Validation warning for {symbol} {row.get('date', 'unknown')}: {e}")
    return valid_rows
