"""DashboardMetrics - consolidated period comparison output."""

import json
from dataclasses import dataclass, field
from typing import Any

from ..analytics.highlights import Highlight, Severity
from ..analytics.models import (
    ChannelAggregate,
    ChannelDetail,
    MetricMap,
    PeriodWindow,
    TopPost,
    TrafficSummary,
)


@dataclass
class DashboardMetrics:
    """Everything the dashboard renders for one period.

    All data is pre-computed and JSON-serializable via to_dict().
    """

    # Metadata
    window: PeriodWindow

    # Workspace-wide aggregates
    overview: MetricMap
    previous: MetricMap

    # Channel groups
    sns_channels: list[ChannelAggregate] = field(default_factory=list)
    top_posts: list[TopPost] = field(default_factory=list)
    traffic: TrafficSummary = field(default_factory=TrafficSummary)
    store_channels: list[ChannelAggregate] = field(default_factory=list)

    # What changed
    highlights: list[Highlight] = field(default_factory=list)
    channel_details: dict[str, ChannelDetail] = field(default_factory=dict)

    @property
    def channels(self) -> list[ChannelAggregate]:
        """SNS and store channels in display order."""
        return self.sns_channels + self.store_channels

    def negative_highlights(self) -> list[Highlight]:
        """Highlights flagged as bad news, for risk callouts."""
        return [h for h in self.highlights if h.severity is Severity.NEGATIVE]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "periodType": self.window.period_type.value,
            "periodStart": self.window.start.isoformat(),
            "periodEnd": self.window.end.isoformat(),
            "overview": dict(self.overview),
            "previous": dict(self.previous),
            "sns": {
                "channels": [c.to_dict() for c in self.sns_channels],
                "topPosts": [p.to_dict() for p in self.top_posts],
            },
            "store": {
                "traffic": self.traffic.to_dict(),
                "channels": [c.to_dict() for c in self.store_channels],
            },
            "highlights": [h.to_dict() for h in self.highlights],
            "channelDetails": {
                provider: detail.to_dict() for provider, detail in self.channel_details.items()
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
