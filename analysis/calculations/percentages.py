"""
Percentage helpers shared by the record, aggregation and detail calculations.
Pure functions with IEEE-754 division semantics.
"""

import numpy as np


def ieee_divide(numerator: float, denominator: float) -> float:
    """
    Divide like IEEE-754 floats instead of raising ZeroDivisionError.

    x / 0 returns +/-inf (sign from both operands), 0 / 0 and nan / 0
    return nan. Non-zero denominators use ordinary float division.

    Args:
        numerator: Dividend
        denominator: Divisor

    Returns:
        Quotient as float (possibly non-finite)
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


def percent_of(value: float, base: float) -> float:
    """Express value as a percentage of base: value / base * 100."""
    return ieee_divide(value, base) * 100


def percent_change(start: float, end: float) -> float:
    """
    Percent change from start to end.

    Formula: (end - start) / start * 100

    A zero start yields a non-finite result rather than an exception.
    """
    return percent_of(end - start, start)
