"""Null-safe period-over-period percentage change."""

import math
from collections.abc import Mapping

from .models import MetricMap


def percent_change(current: float | None, previous: float | None) -> float | None:
    """Percentage change from previous to current.

    Formula: ((current - previous) / previous) * 100

    Returns:
        Finite percentage, or None when either side is missing, previous
        is zero, or the result would not be finite.
    """
    if current is None or previous is None or previous == 0:
        return None
    change = ((current - previous) / previous) * 100
    return change if math.isfinite(change) else None


def calculate_change(
    current: Mapping[str, float | None], previous: Mapping[str, float | None]
) -> MetricMap:
    """Change for every key of ``current``; keys only in ``previous`` are ignored."""
    return {key: percent_change(value, previous.get(key)) for key, value in current.items()}
