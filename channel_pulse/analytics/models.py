"""Output models for analytics calculations."""

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any

from ..models.snapshot import PeriodType

# Bag of named numeric facts for one window; None means "not computable"
MetricMap = dict[str, float | None]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _serialize(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class CamelDictMixin:
    """to_dict() with camelCase keys, the shape the HTTP layer serializes."""

    def to_dict(self) -> dict[str, Any]:
        return {_camel(f.name): _serialize(getattr(self, f.name)) for f in fields(self)}


# =============================================================================
# PERIODS
# =============================================================================


@dataclass(frozen=True)
class DateRange:
    """Inclusive datetime range."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime | date) -> bool:
        """Whether ``moment`` falls inside the range.

        Bare dates are treated as midnight. When only one side carries
        tzinfo, the naive side is read as wall-clock time in the other's
        zone; no conversion between zones happens.
        """
        if not isinstance(moment, datetime):
            moment = datetime.combine(moment, datetime.min.time())
        start, end = self.start, self.end
        if start.tzinfo is None and moment.tzinfo is not None:
            moment = moment.replace(tzinfo=None)
        elif start.tzinfo is not None and moment.tzinfo is None:
            moment = moment.replace(tzinfo=start.tzinfo)
        return start <= moment <= end


@dataclass(frozen=True)
class PeriodWindow(CamelDictMixin):
    """Current and previous windows for one dashboard period."""

    period_type: PeriodType
    start: datetime
    end: datetime
    prev_start: datetime
    prev_end: datetime

    @property
    def current(self) -> DateRange:
        return DateRange(self.start, self.end)

    @property
    def previous(self) -> DateRange:
        return DateRange(self.prev_start, self.prev_end)


# =============================================================================
# CHANNEL AGGREGATES
# =============================================================================


@dataclass(frozen=True)
class ChannelAggregate(CamelDictMixin):
    """Per-provider current/previous maps and their percentage change."""

    channel: str
    channel_name: str
    current: MetricMap
    previous: MetricMap
    change: MetricMap


@dataclass(frozen=True)
class TrafficSummary:
    """Traffic figures for the current and previous windows."""

    sessions: float | None = None
    users: float | None = None
    dau: float | None = None
    wau: float | None = None
    conversion_rate: float | None = None
    previous_sessions: float | None = None
    previous_users: float | None = None
    previous_dau: float | None = None
    previous_wau: float | None = None
    previous_conversion_rate: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TopPost(CamelDictMixin):
    """Content item ranked by views."""

    id: str
    channel: str
    content_type: str
    title: str | None
    url: str
    published_at: datetime
    views: float | None
    engagement: float | None


# =============================================================================
# CHANNEL DETAILS
# =============================================================================


@dataclass(frozen=True)
class YouTubeDetail(CamelDictMixin):
    """YouTube view; engagement is likes + comments + shares."""

    views: float | None
    estimated_minutes_watched: float | None
    subscribers: float | None
    subscriber_gained: float | None
    engagement: float | None
    likes: float | None
    comments: float | None
    shares: float | None
    change: MetricMap
    top_videos: list[TopPost] = field(default_factory=list)


@dataclass(frozen=True)
class InstagramDetail(CamelDictMixin):
    """Instagram view; engagement_rate is current-period engagement over reach."""

    reach: float | None
    impressions: float | None
    engagement: float | None
    engagement_rate: float | None
    followers: float | None
    change: MetricMap


@dataclass(frozen=True)
class FacebookDetail(CamelDictMixin):
    """Facebook view; passthrough fields only."""

    reach: float | None
    impressions: float | None
    engagement: float | None
    followers: float | None
    change: MetricMap


@dataclass(frozen=True)
class StoreDetail(CamelDictMixin):
    """SmartStore / Coupang view; avg_order_value is revenue over orders."""

    revenue: float | None
    orders: float | None
    conversion_rate: float | None
    avg_order_value: float | None
    change: MetricMap


ChannelDetail = YouTubeDetail | InstagramDetail | FacebookDetail | StoreDetail


# =============================================================================
# CORRELATION
# =============================================================================


@dataclass(frozen=True)
class TrendLine(CamelDictMixin):
    """Regression line endpoints over the observed x range."""

    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class CorrelationResult:
    """Bivariate statistics for one axis pair."""

    r: float
    r_squared: float
    n: int
    slope: float
    intercept: float
    interpretation: str  # e.g. "very strong positive", "none"
    strength: str  # "very strong" | "strong" | "moderate" | "weak" | "none"
    trend_line: TrendLine | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "r": self.r,
            "rSquared": self.r_squared,
            "n": self.n,
            "slope": self.slope,
            "intercept": self.intercept,
            "interpretation": self.interpretation,
            "strength": self.strength,
            "trendLine": self.trend_line.to_dict() if self.trend_line else None,
        }


# =============================================================================
# TRENDS
# =============================================================================


@dataclass(frozen=True)
class TrendPeriod:
    """Headline totals for one period of a trend series."""

    period: str  # Display label, e.g. "2024-W11" or "2024-03"
    period_start: date
    period_end: date
    values: dict[str, float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            **self.values,
        }


@dataclass(frozen=True)
class ChannelTrendPoint:
    """Per-channel values for one period of a trend series."""

    period: str
    values: dict[str, float]

    def to_dict(self) -> dict[str, Any]:
        return {"period": self.period, **self.values}


@dataclass(frozen=True)
class TrendSeries(CamelDictMixin):
    """Trend output: oldest period first."""

    period_type: PeriodType
    periods: list[TrendPeriod]
    channel_metrics: dict[str, list[ChannelTrendPoint]]
