"""Row-level metric table: one row per snapshot, one column per metric."""

from collections.abc import Iterable, Sequence

import polars as pl

from ..config.registry import MetricRegistry
from ..models.snapshot import MetricSnapshot
from .cleaner import finite_number

BASE_COLUMNS = ["date", "periodStart", "periodEnd", "channel", "channelName"]

UNKNOWN_CHANNEL = "UNKNOWN"


def available_metrics(
    snapshots: Iterable[MetricSnapshot], registry: MetricRegistry
) -> dict[str, dict[str, str]]:
    """Metric keys present in any snapshot, in first-seen order.

    Returns:
        ``{key: {"label": ..., "channel": ...}}`` where label falls back to the
        raw key and channel is the first provider the key was seen on.
    """
    seen: dict[str, dict[str, str]] = {}
    for snapshot in snapshots:
        provider = snapshot.provider or UNKNOWN_CHANNEL
        for key in snapshot.data:
            if key not in seen:
                seen[key] = {"label": registry.label_for(key) or key, "channel": provider}
    return seen


def build_metric_frame(
    snapshots: Sequence[MetricSnapshot],
    registry: MetricRegistry,
    metrics: Sequence[str] | None = None,
    channels: Sequence[str] | None = None,
) -> pl.DataFrame:
    """Flatten snapshots into a typed Polars frame.

    Metric cells go through the same numeric rule as row-level correlation:
    only real, finite numbers survive, strings and nested values become null.

    Args:
        snapshots: Snapshots already scoped to the requested range
        registry: Supplies fallback channel display names
        metrics: Metric columns to include (default: every key seen)
        channels: Optional provider filter

    Returns:
        DataFrame sorted by period start then provider, metric columns Float64.
    """
    selected = [
        s for s in snapshots if not channels or (s.provider or UNKNOWN_CHANNEL) in channels
    ]
    selected.sort(key=lambda s: (s.period_start.isoformat(), s.provider or ""))

    requested = metrics if metrics is not None else list(available_metrics(selected, registry))
    metric_keys = [key for key in dict.fromkeys(requested) if key not in BASE_COLUMNS]

    columns: dict[str, list] = {name: [] for name in BASE_COLUMNS + metric_keys}
    for snapshot in selected:
        provider = snapshot.provider or UNKNOWN_CHANNEL
        columns["date"].append(snapshot.period_start.date().isoformat())
        columns["periodStart"].append(snapshot.period_start.isoformat())
        columns["periodEnd"].append(snapshot.period_end.isoformat())
        columns["channel"].append(provider)
        columns["channelName"].append(snapshot.account_name or registry.channel_label(provider))
        for key in metric_keys:
            columns[key].append(finite_number(snapshot.data.get(key)))

    schema = {name: pl.Utf8 for name in BASE_COLUMNS}
    schema.update({key: pl.Float64 for key in metric_keys})
    return pl.DataFrame(columns, schema=schema)


def export_rows_csv(frame: pl.DataFrame) -> str:
    """Serialize a metric frame to CSV text."""
    return frame.write_csv()
