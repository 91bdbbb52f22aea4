"""Metric value cleaning: lenient coercion for aggregates, strict for row statistics."""

import logging
import math
import numbers
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Formatting characters stripped from numeric strings ("₩1,200", "3.5%")
STRIP_CHARS = (",", "₩", "$", "%")


def coerce_metric_value(value: Any) -> float | None:
    """Convert a snapshot leaf to a finite float, or None.

    Numbers pass through, numeric strings are parsed after stripping
    thousands separators and currency/percent symbols. Booleans, nested
    structures, unparseable strings, NaN and infinities become None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value
        for char in STRIP_CHARS:
            cleaned = cleaned.replace(char, "")
        cleaned = cleaned.strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            logger.debug(f"Ignoring non-numeric metric value {value!r}")
            return None
    else:
        logger.debug(f"Ignoring metric value of type {type(value).__name__}")
        return None

    return number if math.isfinite(number) else None


def finite_number(value: Any) -> float | None:
    """Strict variant for row-level statistics: real numbers only, no strings."""
    if value is None or isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def clean_metric_map(data: Mapping[str, Any]) -> dict[str, float | None]:
    """Coerce every leaf of a snapshot payload."""
    return {key: coerce_metric_value(value) for key, value in data.items()}

