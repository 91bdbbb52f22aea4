"""Per-provider channel details with derived metrics.

Each provider has a strategy that derives its fields from an aggregated
metric map. The shared contract derives both windows first and computes
``change`` on the derived values, so e.g. YouTube engagement change is the
change of (likes + comments + shares), not a blend of per-field changes.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence

from ..models.snapshot import ContentItem, MetricSnapshot, Provider
from .aggregator import SnapshotAggregator, first_present
from .channels import group_by_provider
from .content import rank_top_posts
from .deltas import percent_change
from .models import (
    ChannelDetail,
    FacebookDetail,
    InstagramDetail,
    MetricMap,
    StoreDetail,
    TopPost,
    YouTubeDetail,
)

Derived = dict[str, float | None]


def _sum_present(values: Iterable[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    return sum(present) if present else None


class DetailStrategy(ABC):
    """Derivation contract for one provider's detail view."""

    # Derived fields that get a period-over-period change, keyed as in output
    change_fields: tuple[str, ...] = ()

    @abstractmethod
    def derive(self, data: MetricMap) -> Derived:
        """Compute the detail fields from one window's aggregated map."""

    @abstractmethod
    def shape(
        self, values: Derived, change: MetricMap, top_content: list[TopPost]
    ) -> ChannelDetail:
        """Assemble the output model."""

    def derive_detail(
        self,
        current: MetricMap,
        previous: MetricMap,
        top_content: list[TopPost] | None = None,
    ) -> ChannelDetail:
        values = self.derive(current)
        previous_values = self.derive(previous)
        change = {
            name: percent_change(values.get(name), previous_values.get(name))
            for name in self.change_fields
        }
        return self.shape(values, change, top_content or [])


class YouTubeStrategy(DetailStrategy):
    change_fields = ("views", "estimatedMinutesWatched", "subscribers", "engagement")

    def derive(self, data: MetricMap) -> Derived:
        likes = data.get("likes")
        comments = data.get("comments")
        shares = data.get("shares")
        return {
            "views": data.get("views"),
            "estimatedMinutesWatched": data.get("estimatedMinutesWatched"),
            "subscribers": first_present(data, ("followers", "subscriberCount")),
            "subscriberGained": data.get("subscriberGained"),
            "engagement": _sum_present((likes, comments, shares)),
            "likes": likes,
            "comments": comments,
            "shares": shares,
        }

    def shape(self, values, change, top_content):
        return YouTubeDetail(
            views=values["views"],
            estimated_minutes_watched=values["estimatedMinutesWatched"],
            subscribers=values["subscribers"],
            subscriber_gained=values["subscriberGained"],
            engagement=values["engagement"],
            likes=values["likes"],
            comments=values["comments"],
            shares=values["shares"],
            change=change,
            top_videos=top_content,
        )


class InstagramStrategy(DetailStrategy):
    change_fields = ("reach", "impressions", "engagement", "followers")

    def derive(self, data: MetricMap) -> Derived:
        reach = data.get("reach")
        engagement = first_present(data, ("engagements", "engagement"))
        # Current-window ratio only; no change is reported for it
        rate = (engagement or 0.0) / reach * 100 if reach is not None and reach > 0 else None
        return {
            "reach": reach,
            "impressions": data.get("impressions"),
            "engagement": engagement,
            "engagementRate": rate,
            "followers": data.get("followers"),
        }

    def shape(self, values, change, top_content):
        return InstagramDetail(
            reach=values["reach"],
            impressions=values["impressions"],
            engagement=values["engagement"],
            engagement_rate=values["engagementRate"],
            followers=values["followers"],
            change=change,
        )


class FacebookStrategy(DetailStrategy):
    change_fields = ("reach", "impressions", "engagement", "followers")

    def derive(self, data: MetricMap) -> Derived:
        return {
            "reach": data.get("reach"),
            "impressions": data.get("impressions"),
            "engagement": first_present(data, ("engagement", "engagements")),
            "followers": data.get("followers"),
        }

    def shape(self, values, change, top_content):
        return FacebookDetail(
            reach=values["reach"],
            impressions=values["impressions"],
            engagement=values["engagement"],
            followers=values["followers"],
            change=change,
        )


class StoreStrategy(DetailStrategy):
    # avgOrderValue is intentionally absent
    change_fields = ("revenue", "orders", "conversionRate")

    def derive(self, data: MetricMap) -> Derived:
        revenue = first_present(data, ("revenue", "sales"))
        orders = data.get("orders")
        return {
            "revenue": revenue,
            "orders": orders,
            "conversionRate": data.get("conversionRate"),
            "avgOrderValue": (
                revenue / orders if revenue is not None and orders is not None and orders > 0 else None
            ),
        }

    def shape(self, values, change, top_content):
        return StoreDetail(
            revenue=values["revenue"],
            orders=values["orders"],
            conversion_rate=values["conversionRate"],
            avg_order_value=values["avgOrderValue"],
            change=change,
        )


DEFAULT_STRATEGIES: Mapping[str, DetailStrategy] = {
    Provider.YOUTUBE.value: YouTubeStrategy(),
    Provider.META_INSTAGRAM.value: InstagramStrategy(),
    Provider.META_FACEBOOK.value: FacebookStrategy(),
    Provider.SMARTSTORE.value: StoreStrategy(),
    Provider.COUPANG.value: StoreStrategy(),
}

# Providers whose detail view lists top content
CONTENT_PROVIDERS = (Provider.YOUTUBE.value,)


class ChannelDetailBuilder:
    """Build detail views for every provider with a registered strategy.

    Usage:
        builder = ChannelDetailBuilder(aggregator)
        details = builder.build(current, previous, content)
        details["YOUTUBE"].engagement
    """

    def __init__(
        self,
        aggregator: SnapshotAggregator,
        strategies: Mapping[str, DetailStrategy] | None = None,
    ):
        self.aggregator = aggregator
        self.strategies = dict(strategies if strategies is not None else DEFAULT_STRATEGIES)

    def build(
        self,
        current: Iterable[MetricSnapshot],
        previous: Iterable[MetricSnapshot],
        content: Sequence[ContentItem] = (),
    ) -> dict[str, ChannelDetail]:
        """Details keyed by provider; providers without current snapshots are omitted."""
        current_by_provider = group_by_provider(current)
        previous_by_provider = group_by_provider(previous)

        details: dict[str, ChannelDetail] = {}
        for provider, strategy in self.strategies.items():
            detail = self.build_one(
                provider,
                strategy,
                current_by_provider.get(provider, []),
                previous_by_provider.get(provider, []),
                content,
            )
            if detail is not None:
                details[provider] = detail
        return details

    def build_one(
        self,
        provider: str,
        strategy: DetailStrategy,
        current: Sequence[MetricSnapshot],
        previous: Sequence[MetricSnapshot],
        content: Sequence[ContentItem] = (),
    ) -> ChannelDetail | None:
        if not current:
            return None

        top_content = (
            rank_top_posts(content, channels=(provider,)) if provider in CONTENT_PROVIDERS else []
        )
        return strategy.derive_detail(
            self.aggregator.accumulate(current),
            self.aggregator.accumulate(previous),
            top_content,
        )
