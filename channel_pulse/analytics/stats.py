"""Bivariate statistics: Pearson correlation and least-squares regression."""

import numpy as np
from scipy import stats

# Lower |r| bound of each strength band, strongest first
CORRELATION_BANDS: tuple[tuple[float, str], ...] = (
    (0.8, "very strong"),
    (0.6, "strong"),
    (0.4, "moderate"),
    (0.2, "weak"),
)


def pearson_r(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson correlation coefficient.

    Args:
        x: First series
        y: Second series, same length as x

    Returns:
        r in [-1, 1]; 0.0 when fewer than two pairs or either series has
        zero variance.
    """
    if len(x) < 2 or len(x) != len(y):
        return 0.0

    # Handle edge case of zero variance
    if np.sum((x - x.mean()) ** 2) == 0 or np.sum((y - y.mean()) ** 2) == 0:
        return 0.0

    r, _ = stats.pearsonr(x, y)
    return float(r) if np.isfinite(r) else 0.0


def linear_regression(x: np.ndarray, y: np.ndarray) -> tuple[float, float]:
    """Least-squares fit of y = slope * x + intercept.

    Formula:
        slope = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)
        intercept = (Σy - slope·Σx) / n

    Returns:
        (slope, intercept). (0, 0) for fewer than two pairs; (0, mean(y))
        when all x are equal.
    """
    n = len(x)
    if n < 2 or n != len(y):
        return 0.0, 0.0

    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))

    denominator = n * sum_x2 - sum_x**2
    if denominator == 0:
        return 0.0, sum_y / n

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def correlation_strength(r: float) -> str:
    """Band name for |r|: "very strong", "strong", "moderate", "weak" or "none"."""
    magnitude = abs(r)
    for lower_bound, name in CORRELATION_BANDS:
        if magnitude >= lower_bound:
            return name
    return "none"


def interpret_correlation(r: float) -> str:
    """Sign-aware description, e.g. "very strong positive" or "none"."""
    strength = correlation_strength(r)
    if strength == "none":
        return strength
    return f"{strength} {'positive' if r > 0 else 'negative'}"
