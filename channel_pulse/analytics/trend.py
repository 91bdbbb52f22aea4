"""Multi-period trend series."""

from collections.abc import Mapping, Sequence

from ..config.registry import MetricRegistry
from ..ingestion.cleaner import clean_metric_map
from ..models.snapshot import MetricSnapshot, PeriodType
from .aggregator import first_present
from .models import ChannelTrendPoint, PeriodWindow, TrendPeriod, TrendSeries
from .periods import select_snapshots


def period_label(window: PeriodWindow) -> str:
    """Display label: "2024-W11" for weeks, "2024-03" for months."""
    if window.period_type is PeriodType.WEEKLY:
        year, week, _ = window.start.isocalendar()
        return f"{year}-W{week:02d}"
    return window.start.strftime("%Y-%m")


def _sum_fields(
    snapshots: Sequence[MetricSnapshot], fields: Mapping[str, Sequence[str]]
) -> dict[str, float]:
    totals = {name: 0.0 for name in fields}
    for snapshot in snapshots:
        data = clean_metric_map(snapshot.data)
        for name, keys in fields.items():
            totals[name] += first_present(data, keys) or 0.0
    return totals


class TrendBuilder:
    """Headline totals and per-channel series over consecutive windows.

    Totals read the registry's ``trend_totals`` field set; channel series
    come from its ``trend_channels`` table.

    Usage:
        windows = trailing_windows(today, "WEEKLY", 8)
        series = TrendBuilder(registry).build(windows, snapshots)
    """

    def __init__(self, registry: MetricRegistry):
        self.registry = registry

    def build(
        self,
        windows: Sequence[PeriodWindow],
        snapshots: Sequence[MetricSnapshot],
        channels: Sequence[str] | None = None,
    ) -> TrendSeries:
        """Build the series, oldest window first.

        Args:
            windows: Consecutive windows of one period type, oldest first
            snapshots: Snapshots covering every window
            channels: Optional provider filter

        Returns:
            TrendSeries. A channel series is only included when at least
            one of its points is non-zero.
        """
        if channels:
            snapshots = [s for s in snapshots if s.provider in channels]

        periods: list[TrendPeriod] = []
        totals = self.registry.field_set("trend_totals")
        channel_series = self.registry.trend_channels
        series: dict[str, list[ChannelTrendPoint]] = {name: [] for name in channel_series}

        for window in windows:
            label = period_label(window)
            selected = select_snapshots(snapshots, window.period_type, window.start, window.end)

            periods.append(
                TrendPeriod(
                    period=label,
                    period_start=window.start.date(),
                    period_end=window.end.date(),
                    values=_sum_fields(selected, totals),
                )
            )

            for name, spec in channel_series.items():
                provider_snapshots = [s for s in selected if s.provider == spec.provider]
                series[name].append(
                    ChannelTrendPoint(
                        period=label, values=_sum_fields(provider_snapshots, spec.series)
                    )
                )

        channel_metrics = {
            name: points
            for name, points in series.items()
            if any(value > 0 for point in points for value in point.values.values())
        }

        period_type = windows[0].period_type if windows else PeriodType.WEEKLY
        return TrendSeries(period_type=period_type, periods=periods, channel_metrics=channel_metrics)
