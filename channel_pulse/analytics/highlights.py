"""Ranked "what changed" highlights across channel deltas."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config.registry import HighlightSettings, MetricRegistry, Polarity
from .models import ChannelAggregate


class Severity(str, Enum):
    """Whether a highlighted change is good news."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"  # Metric has no registered polarity


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Highlight:
    """Single significant period-over-period change."""

    channel: str  # Channel display name
    metric: str  # Metric display label
    change: float  # Percentage, rounded to 1 decimal
    direction: Direction
    severity: Severity
    metric_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "metric": self.metric,
            "change": self.change,
            "direction": self.direction.value,
            "severity": self.severity.value,
            "metricKey": self.metric_key,
        }


@dataclass
class HighlightThresholds:
    """Configurable highlight thresholds.

    Percentage values are expressed in points (10.0 = 10%).
    """

    # Minimum |change| for a metric to be highlighted
    significance_threshold: float = 10.0

    # Highlights kept after sorting
    max_highlights: int = 5

    @classmethod
    def from_settings(cls, settings: HighlightSettings) -> "HighlightThresholds":
        return cls(
            significance_threshold=settings.significance_threshold,
            max_highlights=settings.max_highlights,
        )


def classify_severity(polarity: Polarity, change: float) -> Severity:
    """Severity of a change given the metric's polarity."""
    if polarity is Polarity.GOOD_UP:
        return Severity.POSITIVE if change > 0 else Severity.NEGATIVE
    if polarity is Polarity.GOOD_DOWN:
        return Severity.NEGATIVE if change > 0 else Severity.POSITIVE
    return Severity.NEUTRAL


class HighlightRanker:
    """Scan channel deltas and keep the most significant labelled changes.

    Only metrics with a registered label are eligible; the label table
    doubles as the highlight whitelist.

    Usage:
        ranker = HighlightRanker(registry)
        highlights = ranker.rank(sns_channels + store_channels)
    """

    def __init__(
        self,
        registry: MetricRegistry,
        thresholds: HighlightThresholds | None = None,
    ):
        self.registry = registry
        self.thresholds = thresholds or HighlightThresholds.from_settings(
            registry.highlight_settings
        )

    def rank(self, channels: list[ChannelAggregate]) -> list[Highlight]:
        """Return at most ``max_highlights`` highlights, largest |change| first.

        Ties keep input order (channel order, then metric order).
        """
        candidates: list[tuple[float, Highlight]] = []

        for channel in channels:
            for key, change in channel.change.items():
                if change is None:
                    continue
                # Both the raw and the reported (rounded) change must clear the threshold
                rounded = round(change, 1)
                threshold = self.thresholds.significance_threshold
                if abs(change) < threshold or abs(rounded) < threshold:
                    continue

                label = self.registry.label_for(key)
                if label is None:
                    continue

                highlight = Highlight(
                    channel=channel.channel_name,
                    metric=label,
                    change=rounded,
                    direction=Direction.UP if change > 0 else Direction.DOWN,
                    severity=classify_severity(self.registry.polarity_for(key), change),
                    metric_key=key,
                )
                candidates.append((abs(change), highlight))

        candidates.sort(key=lambda item: item[0], reverse=True)
        return [highlight for _, highlight in candidates[: self.thresholds.max_highlights]]
