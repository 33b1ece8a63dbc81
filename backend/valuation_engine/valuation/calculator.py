"""
calculator.py — Valuation range from adjusted EBITDA and a multiple.

mid = adjusted EBITDA x multiple, low = mid x 0.8, high = mid x 1.2.

Nothing is clamped: a negative adjusted EBITDA yields a negative range with
the ordering flipped (low >= mid >= high, low closest to zero). Framing that
case is left to the report layer.
"""

from __future__ import annotations

from dataclasses import dataclass

LOW_FACTOR = 0.8
HIGH_FACTOR = 1.2


@dataclass(frozen=True)
class ValuationRange:
    low: float
    mid: float
    high: float


def compute_range(adjusted_ebitda: float, multiple: float) -> ValuationRange:
    """
    Compute the low/mid/high valuation estimates.

    Args:
        adjusted_ebitda: Adjusted EBITDA (any sign)
        multiple: Resolved EBITDA multiple

    Returns:
        ValuationRange
    """
    mid = adjusted_ebitda * multiple
    return ValuationRange(low=mid * LOW_FACTOR, mid=mid, high=mid * HIGH_FACTOR)
