"""Input and output models for the metrics engine."""

from .query import PeriodQuery, RawRowsQuery, TrendQuery, parse_query
from .snapshot import Connection, ContentItem, MetricSnapshot, PeriodType, Provider

__all__ = [
    "Connection",
    "ContentItem",
    "MetricSnapshot",
    "PeriodQuery",
    "PeriodType",
    "Provider",
    "RawRowsQuery",
    "TrendQuery",
    "parse_query",
]
