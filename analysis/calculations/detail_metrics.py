"""
Detail metrics utilities.
Pure functions deriving single-record statistics for the per-day detail view.
"""

from typing import Union

from analysis.records import (
    DailyRecord,
    DetailedMetrics,
    PerformanceTrend,
    PeriodSummary,
    VolatilityLevel,
    VolumeIntensity
)
from analysis.calculations.percentages import percent_change, percent_of

# Volume thresholds for the intensity tiers (strict comparisons)
LOW_VOLUME_THRESHOLD = 10000
HIGH_VOLUME_THRESHOLD = 50000

# Volume at which the liquidity score saturates at 100
FULL_LIQUIDITY_VOLUME = 100000

# Volatility percentage tiers (strict upper bounds)
LOW_VOLATILITY_THRESHOLD = 2
HIGH_VOLATILITY_THRESHOLD = 5

# Performance inside +/-0.5% counts as flat
PERFORMANCE_TREND_THRESHOLD = 0.5


def classify_volume_intensity(volume: float) -> VolumeIntensity:
    """
    Classify volume into Low / Medium / High.

    Low below 10,000, High above 50,000, Medium otherwise (both bounds
    inclusive).
    """
    if volume < LOW_VOLUME_THRESHOLD:
        return VolumeIntensity.LOW
    if volume > HIGH_VOLUME_THRESHOLD:
        return VolumeIntensity.HIGH
    return VolumeIntensity.MEDIUM


def classify_volatility_level(volatility: float) -> VolatilityLevel:
    """
    Classify a volatility percentage into Low / Medium / High.

    Low below 2%, Medium below 5%, High otherwise (non-finite values
    included).
    """
    if volatility < LOW_VOLATILITY_THRESHOLD:
        return VolatilityLevel.LOW
    if volatility < HIGH_VOLATILITY_THRESHOLD:
        return VolatilityLevel.MEDIUM
    return VolatilityLevel.HIGH


def classify_performance_trend(performance: float) -> PerformanceTrend:
    """Up above +0.5%, down below -0.5%, flat otherwise (nan included)."""
    if performance > PERFORMANCE_TREND_THRESHOLD:
        return PerformanceTrend.UP
    if performance < -PERFORMANCE_TREND_THRESHOLD:
        return PerformanceTrend.DOWN
    return PerformanceTrend.FLAT


def liquidity_score(volume: float) -> float:
    """
    Liquidity score on a 0-100 scale.

    Formula: min(volume / 100,000, 1) * 100
    """
    return min(volume / FULL_LIQUIDITY_VOLUME, 1) * 100


def derive_metrics(record: Union[DailyRecord, PeriodSummary]) -> DetailedMetrics:
    """
    Derive detail metrics for one record.

    A zero open gives non-finite percentage fields instead of raising.

    Args:
        record: Daily record (or period summary) with open/high/low/close/volume

    Returns:
        DetailedMetrics for the record
    """
    intraday_range = record.high - record.low

    return DetailedMetrics(
        intraday_range=intraday_range,
        intraday_range_percent=percent_of(intraday_range, record.open),
        price_change_percent=percent_change(record.open, record.close),
        volume_intensity=classify_volume_intensity(record.volume),
        liquidity_score=liquidity_score(record.volume),
        volatility_level=classify_volatility_level(record.volatility),
        performance_trend=classify_performance_trend(record.performance),
    )
