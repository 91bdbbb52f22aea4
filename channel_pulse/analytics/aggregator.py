"""Snapshot aggregation: many metric bags in one window to one metric map."""

from collections.abc import Iterable, Mapping, Sequence

from ..config.registry import MetricRegistry
from ..ingestion.cleaner import clean_metric_map
from ..models.snapshot import MetricSnapshot
from .models import MetricMap


def first_present(data: Mapping[str, float | None], keys: Sequence[str]) -> float | None:
    """Value of the first key in ``keys`` that holds a non-null value."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


class SnapshotAggregator:
    """Fold snapshots into canonical metric maps using registry reducers.

    Usage:
        aggregator = SnapshotAggregator(load_registry())
        overview = aggregator.aggregate(current_snapshots)
        per_channel = aggregator.accumulate(youtube_snapshots)
    """

    def __init__(self, registry: MetricRegistry):
        self.registry = registry

    def aggregate(self, snapshots: Iterable[MetricSnapshot]) -> MetricMap:
        """Overview map for one window.

        Each overview metric takes the first non-null spelling of every
        snapshot (``revenue`` before ``sales``), so a snapshot carrying both
        is counted once. Keys that are not an overview spelling pass
        through under their own name. Null contributes nothing; a key that
        only ever saw nulls ends at 0, and overview metrics are always present.

        Args:
            snapshots: Snapshots already selected for the window

        Returns:
            MetricMap with no None values.
        """
        overview = self.registry.overview_metrics
        consumed = self.registry.consumed_keys
        totals: dict[str, float | None] = {d.key: None for d in overview}

        for snapshot in snapshots:
            data = clean_metric_map(snapshot.data)

            for descriptor in overview:
                value = first_present(data, descriptor.synonyms)
                if value is not None:
                    totals[descriptor.key] = descriptor.reducer.combine(
                        totals[descriptor.key], value
                    )

            for key, value in data.items():
                if key in consumed:
                    continue
                totals.setdefault(key, None)
                if value is not None:
                    totals[key] = self.registry.reducer_for(key).combine(totals[key], value)

        return {key: 0.0 if value is None else value for key, value in totals.items()}

    def accumulate(self, snapshots: Iterable[MetricSnapshot]) -> MetricMap:
        """Per-key reduction keeping raw keys, without synonym folding.

        Used for per-channel maps, where e.g. Instagram reports ``reach``
        and ``impressions`` as distinct figures. Keys with only null
        values are left out.
        """
        totals: dict[str, float] = {}
        for snapshot in snapshots:
            for key, value in clean_metric_map(snapshot.data).items():
                if value is None:
                    continue
                totals[key] = self.registry.reducer_for(key).combine(totals.get(key), value)
        return totals
