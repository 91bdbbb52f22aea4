"""Analytics module for channel metric aggregation and comparison."""

from .aggregator import SnapshotAggregator, first_present
from .channels import ChannelGrouper, extract_traffic, group_by_provider
from .content import rank_top_posts
from .correlation import CorrelationEngine
from .deltas import calculate_change, percent_change
from .details import ChannelDetailBuilder, DetailStrategy
from .highlights import (
    Direction,
    Highlight,
    HighlightRanker,
    HighlightThresholds,
    Severity,
)
from .models import (
    ChannelAggregate,
    ChannelTrendPoint,
    CorrelationResult,
    DateRange,
    FacebookDetail,
    InstagramDetail,
    MetricMap,
    PeriodWindow,
    StoreDetail,
    TopPost,
    TrafficSummary,
    TrendLine,
    TrendPeriod,
    TrendSeries,
    YouTubeDetail,
)
from .periods import resolve_period, select_snapshots, trailing_windows
from .trend import TrendBuilder

__all__ = [
    "ChannelAggregate",
    "ChannelDetailBuilder",
    "ChannelGrouper",
    "ChannelTrendPoint",
    "CorrelationEngine",
    "CorrelationResult",
    "DateRange",
    "DetailStrategy",
    "Direction",
    "FacebookDetail",
    "Highlight",
    "HighlightRanker",
    "HighlightThresholds",
    "InstagramDetail",
    "MetricMap",
    "PeriodWindow",
    "Severity",
    "SnapshotAggregator",
    "StoreDetail",
    "TopPost",
    "TrafficSummary",
    "TrendBuilder",
    "TrendLine",
    "TrendPeriod",
    "TrendSeries",
    "YouTubeDetail",
    "calculate_change",
    "extract_traffic",
    "first_present",
    "group_by_provider",
    "percent_change",
    "rank_top_posts",
    "resolve_period",
    "select_snapshots",
    "trailing_windows",
]
