"""Tests for the correlation engine and its statistics helpers."""

import numpy as np
import polars as pl
import pytest

from channel_pulse.analytics import CorrelationEngine
from channel_pulse.analytics.stats import (
    correlation_strength,
    interpret_correlation,
    linear_regression,
    pearson_r,
)


@pytest.fixture
def engine() -> CorrelationEngine:
    return CorrelationEngine()


def rows_from(xs: list, ys: list) -> list[dict]:
    return [{"date": f"2024-03-{i + 1:02d}", "x": x, "y": y} for i, (x, y) in enumerate(zip(xs, ys))]


class TestCorrelate:
    """Tests for CorrelationEngine.correlate()."""

    def test_perfect_linear(self, engine) -> None:
        """y = 2x gives r = 1, slope 2, intercept 0."""
        result = engine.correlate(rows_from([1, 2, 3, 4, 5], [2, 4, 6, 8, 10]), "x", "y")
        assert result.r == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.slope == pytest.approx(2.0)
        assert result.intercept == pytest.approx(0.0)
        assert result.n == 5
        assert result.interpretation == "very strong positive"

    def test_r_symmetric_regression_not(self, engine) -> None:
        """Swapping axes keeps r but changes slope and intercept."""
        rows = rows_from([1, 2, 3, 4, 6], [3, 5, 4, 9, 12])
        xy = engine.correlate(rows, "x", "y")
        yx = engine.correlate(rows, "y", "x")

        assert xy.r == pytest.approx(yx.r)
        assert xy.slope != pytest.approx(yx.slope)
        assert xy.intercept != pytest.approx(yx.intercept)

    @pytest.mark.parametrize(
        "xs, ys",
        [
            ([], []),
            ([1], [2]),
            ([3, 3, 3], [1, 2, 3]),
            ([1, 2, 3], [5, 5, 5]),
        ],
    )
    def test_degenerate_samples(self, engine, xs, ys) -> None:
        """n < 2 or zero variance gives r = 0 without raising."""
        result = engine.correlate(rows_from(xs, ys), "x", "y")
        assert result.r == 0
        assert result.r_squared == 0
        assert result.interpretation == "none"

    def test_filters_non_finite_and_non_numeric(self, engine) -> None:
        """Strings, booleans, None, NaN and inf rows are dropped."""
        rows = rows_from(
            [1, 2, "3", True, None, float("nan"), 5, float("inf")],
            [2, 4, 6, 8, 10, 12, 10, 1],
        )
        result = engine.correlate(rows, "x", "y")
        assert result.n == 3

    def test_missing_key(self, engine) -> None:
        result = engine.correlate(rows_from([1, 2], [3, 4]), "x", "revenue")
        assert result.n == 0
        assert result.trend_line is None

    def test_accepts_frame(self, engine) -> None:
        """A Polars frame works like the equivalent row list."""
        frame = pl.DataFrame({"x": [1.0, 2.0, None, 4.0], "y": [1.0, 3.0, 7.0, 7.0]})
        result = engine.correlate(frame, "x", "y")
        assert result.n == 3
        assert result.slope == pytest.approx(2.0)
        assert result.intercept == pytest.approx(-1.0)

    def test_trend_line_spans_x_range(self, engine) -> None:
        result = engine.correlate(rows_from([5, 1, 3], [10, 2, 6]), "x", "y")
        assert result.trend_line.x1 == 1
        assert result.trend_line.x2 == 5
        assert result.trend_line.y1 == pytest.approx(2.0)
        assert result.trend_line.y2 == pytest.approx(10.0)

    def test_to_dict_keys(self, engine) -> None:
        payload = engine.correlate(rows_from([1, 2, 3], [1, 2, 4]), "x", "y").to_dict()
        assert set(payload) == {
            "r", "rSquared", "n", "slope", "intercept", "interpretation", "strength", "trendLine"
        }


class TestStats:
    """Tests for the statistics helpers."""

    def test_regression_vertical_x(self) -> None:
        """All-equal x gives slope 0 and intercept mean(y)."""
        slope, intercept = linear_regression(np.array([2.0, 2.0]), np.array([1.0, 5.0]))
        assert slope == 0
        assert intercept == pytest.approx(3.0)

    def test_regression_single_point(self) -> None:
        assert linear_regression(np.array([2.0]), np.array([7.0])) == (0.0, 0.0)

    def test_pearson_negative(self) -> None:
        r = pearson_r(np.array([1.0, 2.0, 3.0]), np.array([3.0, 2.0, 1.0]))
        assert r == pytest.approx(-1.0)

    @pytest.mark.parametrize(
        "r, expected",
        [
            (0.8, "very strong positive"),
            (-0.65, "strong negative"),
            (0.4, "moderate positive"),
            (-0.25, "weak negative"),
            (0.19, "none"),
            (0.0, "none"),
        ],
    )
    def test_interpretation_bands(self, r, expected) -> None:
        assert interpret_correlation(r) == expected

    def test_strength_is_unsigned(self) -> None:
        assert correlation_strength(-0.9) == "very strong"
