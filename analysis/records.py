"""
Record types for the market calendar.
Immutable containers - daily input rows, period summaries and per-day detail metrics.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Any, Optional

from analysis.calculations.percentages import percent_change, percent_of


class PeriodKind(str, Enum):
    """Calendar granularity of a period summary."""
    WEEK = 'week'
    MONTH = 'month'


class VolumeIntensity(str, Enum):
    """Coarse three-tier classification of trading volume."""
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'


class VolatilityLevel(str, Enum):
    """Three-tier classification of a day's volatility percentage."""
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'


class PerformanceTrend(str, Enum):
    """Direction of a performance percentage beyond a small dead band."""
    UP = 'up'
    DOWN = 'down'
    FLAT = 'flat'


@dataclass(frozen=True)
class DailyRecord:
    """
    One trading day for one symbol.

    volatility and performance are percentages derived upstream from the
    day's prices; liquidity equals volume by convention.
    """
    date: date
    symbol: str
    open: float
    high: float
    low: float
    close: float
    volume: float
    volatility: float
    performance: float
    liquidity: float

    @classmethod
    def from_ohlcv(
        cls,
        day: date,
        symbol: str,
        open: float,
        high: float,
        low: float,
        close: float,
        volume: float
    ) -> 'DailyRecord':
        """
        Build a record from raw OHLCV, deriving the percentage fields.

        Formulas:
            volatility = (high - low) / open * 100
            performance = (close - open) / open * 100
            liquidity = volume
        """
        return cls(
            date=day,
            symbol=symbol,
            open=open,
            high=high,
            low=low,
            close=close,
            volume=volume,
            volatility=percent_of(high - low, open),
            performance=percent_change(open, close),
            liquidity=volume,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'DailyRecord':
        """Build a record from a canonical ingestion row."""
        row_date = row['date']
        if isinstance(row_date, str):
            row_date = date.fromisoformat(row_date)

        return cls(
            date=row_date,
            symbol=row['symbol'],
            open=float(row['open']),
            high=float(row['high']),
            low=float(row['low']),
            close=float(row['close']),
            volume=float(row['volume']),
            volatility=float(row['volatility']),
            performance=float(row['performance']),
            liquidity=float(row.get('liquidity', row['volume'])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'symbol': self.symbol,
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume,
            'volatility': self.volatility,
            'performance': self.performance,
            'liquidity': self.liquidity,
        }


@dataclass(frozen=True)
class PeriodSummary:
    """
    Aggregate over the daily records falling inside one calendar period.

    Bounds come from the calendar, not from the data, so a period with no
    trading still exists: it is the sentinel summary with trading_days == 0,
    an empty symbol and every numeric field zero.

    volatility is the MEAN of daily volatilities while performance is the
    change from the first open to the last close. The operators differ on
    purpose; performance is not the mean of daily performances.
    """
    period: PeriodKind
    period_start: date
    period_end: date
    symbol: str
    open: float
    high: float
    low: float
    close: float
    volume: float
    volatility: float
    performance: float
    trading_days: int
    volatility_trend: float = 0.0

    @classmethod
    def empty(cls, period: PeriodKind, period_start: date, period_end: date) -> 'PeriodSummary':
        """Sentinel summary for a period with no records."""
        return cls(
            period=period,
            period_start=period_start,
            period_end=period_end,
            symbol='',
            open=0.0,
            high=0.0,
            low=0.0,
            close=0.0,
            volume=0.0,
            volatility=0.0,
            performance=0.0,
            trading_days=0,
            volatility_trend=0.0,
        )

    @property
    def date(self) -> date:
        """Calendar key of the period."""
        return self.period_start

    @property
    def is_empty(self) -> bool:
        return self.trading_days == 0

    @property
    def liquidity(self) -> float:
        return self.volume

    @property
    def total_volume(self) -> float:
        return self.volume

    @property
    def average_volatility(self) -> float:
        return self.volatility

    @property
    def weekly_performance(self) -> Optional[float]:
        return self.performance if self.period == PeriodKind.WEEK else None

    @property
    def monthly_performance(self) -> Optional[float]:
        return self.performance if self.period == PeriodKind.MONTH else None

    def to_dict(self) -> Dict[str, Any]:
        """
        Render the summary with its alias fields expanded.

        Week summaries carry weekly_performance, month summaries carry
        monthly_performance and volatility_trend.
        """
        result = {
            'date': self.period_start.isoformat(),
            'period': self.period.value,
            'period_start': self.period_start.isoformat(),
            'period_end': self.period_end.isoformat(),
            'symbol': self.symbol,
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume,
            'volatility': self.volatility,
            'performance': self.performance,
            'liquidity': self.liquidity,
            'trading_days': self.trading_days,
            'average_volatility': self.average_volatility,
            'total_volume': self.total_volume,
        }

        if self.period == PeriodKind.WEEK:
            result['weekly_performance'] = self.weekly_performance
        else:
            result['monthly_performance'] = self.monthly_performance
            result['volatility_trend'] = self.volatility_trend

        return result


@dataclass(frozen=True)
class DetailedMetrics:
    """Derived single-record statistics for the per-day detail view."""
    intraday_range: float
    intraday_range_percent: float
    price_change_percent: float
    volume_intensity: VolumeIntensity
    liquidity_score: float
    volatility_level: VolatilityLevel
    performance_trend: PerformanceTrend

    def to_dict(self) -> Dict[str, Any]:
        return {
            'intraday_range': self.intraday_range,
            'intraday_range_percent': self.intraday_range_percent,
            'price_change_percent': self.price_change_percent,
            'volume_intensity': self.volume_intensity.value,
            'liquidity_score': self.liquidity_score,
            'volatility_level': self.volatility_level.value,
            'performance_trend': self.performance_trend.value,
        }
