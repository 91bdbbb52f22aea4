"""Per-provider grouping of current and previous window snapshots."""

from collections import defaultdict
from collections.abc import Iterable, Sequence

from ..config.registry import MetricRegistry
from ..ingestion.cleaner import clean_metric_map
from ..models.snapshot import MetricSnapshot
from .aggregator import SnapshotAggregator, first_present
from .deltas import calculate_change
from .models import ChannelAggregate, TrafficSummary


def group_by_provider(
    snapshots: Iterable[MetricSnapshot],
) -> dict[str, list[MetricSnapshot]]:
    """Bucket snapshots by provider, preserving input order; untagged ones are dropped."""
    buckets: dict[str, list[MetricSnapshot]] = defaultdict(list)
    for snapshot in snapshots:
        if snapshot.provider:
            buckets[snapshot.provider].append(snapshot)
    return dict(buckets)


class ChannelGrouper:
    """Build ChannelAggregate rows for one channel group.

    Usage:
        grouper = ChannelGrouper(registry)
        sns = grouper.group(current, previous, registry.group("SNS"))
    """

    def __init__(self, registry: MetricRegistry, aggregator: SnapshotAggregator | None = None):
        self.registry = registry
        self.aggregator = aggregator or SnapshotAggregator(registry)

    def group(
        self,
        current: Iterable[MetricSnapshot],
        previous: Iterable[MetricSnapshot],
        providers: Sequence[str],
    ) -> list[ChannelAggregate]:
        """Aggregate each in-scope provider that has current-window data.

        Args:
            current: Snapshots selected for the current window
            previous: Snapshots selected for the previous window
            providers: Allow-list for this group, in output order

        Returns:
            One ChannelAggregate per provider with current snapshots. A
            provider without previous snapshots gets an empty previous map,
            so its changes come out as None rather than -100%.
        """
        current_by_provider = group_by_provider(current)
        previous_by_provider = group_by_provider(previous)

        channels: list[ChannelAggregate] = []
        for provider in providers:
            snapshots = current_by_provider.get(provider)
            if not snapshots:
                continue

            current_map = self.aggregator.accumulate(snapshots)
            previous_map = self.aggregator.accumulate(previous_by_provider.get(provider, []))

            channels.append(
                ChannelAggregate(
                    channel=provider,
                    channel_name=self.channel_name(provider, snapshots),
                    current=current_map,
                    previous=previous_map,
                    change=calculate_change(current_map, previous_map),
                )
            )

        return channels

    def channel_name(self, provider: str, snapshots: Sequence[MetricSnapshot]) -> str:
        """First configured account name, else the registry label for the provider."""
        for snapshot in snapshots:
            if snapshot.account_name:
                return snapshot.account_name
        return self.registry.channel_label(provider)


# TrafficSummary fields filled from the registry "traffic" field set
TRAFFIC_SUMMARY_FIELDS = ("sessions", "users", "dau", "wau", "conversion_rate")


def extract_traffic(
    current: Iterable[MetricSnapshot],
    previous: Iterable[MetricSnapshot],
    registry: MetricRegistry,
) -> TrafficSummary:
    """Traffic figures from the first TRAFFIC-group snapshot of each window.

    The providers come from the registry's TRAFFIC channel group and the
    key chains from its ``traffic`` field set.
    """
    providers = registry.channel_groups.get("TRAFFIC", ())
    traffic_fields = registry.field_set("traffic")

    def first_traffic(snapshots: Iterable[MetricSnapshot]) -> dict[str, float | None]:
        for snapshot in snapshots:
            if snapshot.provider in providers:
                return clean_metric_map(snapshot.data)
        return {}

    current_data = first_traffic(current)
    previous_data = first_traffic(previous)

    values: dict[str, float | None] = {}
    for field_name in TRAFFIC_SUMMARY_FIELDS:
        keys = traffic_fields.get(field_name, ())
        values[field_name] = first_present(current_data, keys)
        values[f"previous_{field_name}"] = first_present(previous_data, keys)
    return TrafficSummary(**values)
