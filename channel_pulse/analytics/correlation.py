"""Correlation engine over row-level metric data."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import polars as pl

from ..ingestion.cleaner import finite_number
from .models import CorrelationResult, TrendLine
from .stats import correlation_strength, interpret_correlation, linear_regression, pearson_r

logger = logging.getLogger(__name__)

Rows = Sequence[Mapping[str, Any]] | pl.DataFrame


class CorrelationEngine:
    """Pearson correlation and regression for one pair of metric columns.

    Stateless; every call recomputes from the rows given.

    Usage:
        engine = CorrelationEngine()
        result = engine.correlate(frame, "reach", "revenue")
        result.interpretation  # "strong positive"
    """

    def correlate(self, rows: Rows, x_key: str, y_key: str) -> CorrelationResult:
        """Correlate ``y_key`` against ``x_key``.

        Only rows where both values are finite numbers take part; strings,
        booleans, nulls, NaN and infinities are dropped.

        Args:
            rows: List of row dicts, or a frame from build_metric_frame
            x_key: Metric on the x axis
            y_key: Metric on the y axis

        Returns:
            CorrelationResult. Degenerate samples give r = 0 and no trend line.
        """
        x, y = self.extract_pairs(rows, x_key, y_key)
        n = len(x)

        r = pearson_r(x, y)
        slope, intercept = linear_regression(x, y)

        trend_line = None
        if n >= 2:
            x_min, x_max = float(x.min()), float(x.max())
            trend_line = TrendLine(
                x1=x_min,
                y1=slope * x_min + intercept,
                x2=x_max,
                y2=slope * x_max + intercept,
            )

        logger.debug(f"Correlated {y_key} on {x_key}: n={n}, r={r:.4f}")

        return CorrelationResult(
            r=r,
            r_squared=r * r,
            n=n,
            slope=slope,
            intercept=intercept,
            interpretation=interpret_correlation(r),
            strength=correlation_strength(r),
            trend_line=trend_line,
        )

    def extract_pairs(self, rows: Rows, x_key: str, y_key: str) -> tuple[np.ndarray, np.ndarray]:
        """Paired finite values of the two metrics as float arrays."""
        if isinstance(rows, pl.DataFrame):
            return self._pairs_from_frame(rows, x_key, y_key)

        xs: list[float] = []
        ys: list[float] = []
        for row in rows:
            x_value = finite_number(row.get(x_key))
            y_value = finite_number(row.get(y_key))
            if x_value is None or y_value is None:
                continue
            xs.append(x_value)
            ys.append(y_value)
        return np.array(xs, dtype=float), np.array(ys, dtype=float)

    def _pairs_from_frame(
        self, frame: pl.DataFrame, x_key: str, y_key: str
    ) -> tuple[np.ndarray, np.ndarray]:
        empty = np.array([], dtype=float)
        for key in (x_key, y_key):
            if key not in frame.columns or not frame.schema[key].is_numeric():
                return empty, empty

        valid = (
            frame.select(
                pl.col(x_key).cast(pl.Float64).alias("x"),
                pl.col(y_key).cast(pl.Float64).alias("y"),
            )
            .drop_nulls()
            .filter(pl.col("x").is_finite() & pl.col("y").is_finite())
        )
        return valid["x"].to_numpy(), valid["y"].to_numpy()
