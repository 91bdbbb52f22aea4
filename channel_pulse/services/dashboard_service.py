"""Dashboard service - orchestrates snapshot loading and analytics."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Protocol
from zoneinfo import ZoneInfo

import polars as pl

from ..analytics import (
    ChannelDetailBuilder,
    ChannelGrouper,
    CorrelationEngine,
    CorrelationResult,
    HighlightRanker,
    HighlightThresholds,
    SnapshotAggregator,
    TrendBuilder,
    TrendSeries,
    extract_traffic,
    rank_top_posts,
    resolve_period,
    select_snapshots,
    trailing_windows,
)
from ..analytics.periods import WINDOW_PERIOD_TYPES, coerce_period_type
from ..config.registry import MetricRegistry, load_registry
from ..ingestion import SnapshotLoader, available_metrics, build_metric_frame, export_rows_csv
from ..models.dashboard import DashboardMetrics
from ..models.query import PeriodQuery, RawRowsQuery, TrendQuery, parse_query
from ..models.snapshot import ContentItem, MetricSnapshot, PeriodType

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    """Persistence collaborator that supplies snapshot records.

    Implementations may also define ``fetch_content(workspace_id, start, end)``
    returning content item records; without it, top posts stay empty.
    """

    def fetch_snapshots(
        self,
        workspace_id: str,
        period_types: Sequence[PeriodType],
        start: datetime,
        end: datetime,
    ) -> Sequence[MetricSnapshot | Mapping[str, Any]]:
        """Snapshots of the given types whose period_start lies in [start, end]."""
        ...


@dataclass
class RawRows:
    """Row-level metric table with truncation metadata."""

    start: datetime
    end: datetime
    period_type: PeriodType
    frame: pl.DataFrame
    total_rows: int
    available_metrics: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def returned_rows(self) -> int:
        return len(self.frame)

    @property
    def truncated(self) -> bool:
        return self.total_rows > self.returned_rows

    def to_csv(self) -> str:
        return export_rows_csv(self.frame)

    def to_dict(self) -> dict[str, Any]:
        return {
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
            "periodType": self.period_type.value,
            "totalRows": self.total_rows,
            "returnedRows": self.returned_rows,
            "truncated": self.truncated,
            "availableMetrics": self.available_metrics,
            "rows": self.frame.to_dicts(),
        }


class DashboardService:
    """Service computing dashboard, trend and exploratory views for a workspace.

    Orchestrates:
    1. Resolving the period windows
    2. Fetching and validating snapshots from the source
    3. Aggregating, grouping and ranking
    4. Returning consolidated output

    Usage:
        service = DashboardService(source)
        metrics = service.get_dashboard("ws-1", "WEEKLY", date(2024, 3, 14))
        payload = metrics.to_dict()
    """

    def __init__(
        self,
        source: SnapshotSource,
        registry_path: Path | None = None,
        thresholds: HighlightThresholds | None = None,
        timezone: str | None = None,
        strict: bool = False,
    ):
        """Initialize service with registry configuration.

        Args:
            source: Snapshot persistence collaborator
            registry_path: Path to registry.yaml. Defaults to bundled config.
            thresholds: Workspace highlight thresholds; registry defaults otherwise
            timezone: IANA zone for period boundaries; overrides the registry's
            strict: Raise on malformed snapshot records instead of skipping them
        """
        self.source = source
        self.registry: MetricRegistry = load_registry(registry_path)
        self.timezone = timezone or self.registry.timezone

        self.loader = SnapshotLoader(strict=strict)
        self.aggregator = SnapshotAggregator(self.registry)
        self.grouper = ChannelGrouper(self.registry, self.aggregator)
        self.ranker = HighlightRanker(self.registry, thresholds)
        self.detail_builder = ChannelDetailBuilder(self.aggregator)
        self.correlation_engine = CorrelationEngine()
        self.trend_builder = TrendBuilder(self.registry)

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def get_dashboard(
        self,
        workspace_id: str,
        period_type: PeriodType | str,
        anchor: date | datetime,
        channels: Sequence[str] | None = None,
    ) -> DashboardMetrics:
        """Compute current vs previous period metrics.

        Args:
            workspace_id: Workspace whose snapshots are read
            period_type: WEEKLY or MONTHLY
            anchor: Any date inside the wanted period
            channels: Optional provider filter

        Returns:
            DashboardMetrics for the anchor's period

        Raises:
            InvalidPeriodTypeError: If period_type is not WEEKLY or MONTHLY
        """
        window = resolve_period(anchor, period_type, self.timezone)
        snapshots = self._fetch(
            workspace_id, window.period_type, window.prev_start, window.end, channels
        )

        current = select_snapshots(snapshots, window.period_type, window.start, window.end)
        previous = select_snapshots(
            snapshots, window.period_type, window.prev_start, window.prev_end
        )

        content = [
            item
            for item in self._fetch_content(workspace_id, window.start, window.end)
            if window.current.contains(item.published_at)
            and (not channels or item.channel in channels)
        ]

        groups = self.registry.channel_groups
        sns_channels = self.grouper.group(current, previous, groups.get("SNS", ()))
        store_channels = self.grouper.group(current, previous, groups.get("STORE", ()))

        metrics = DashboardMetrics(
            window=window,
            overview=self.aggregator.aggregate(current),
            previous=self.aggregator.aggregate(previous),
            sns_channels=sns_channels,
            top_posts=rank_top_posts(content),
            traffic=extract_traffic(current, previous, self.registry),
            store_channels=store_channels,
            highlights=self.ranker.rank(sns_channels + store_channels),
            channel_details=self.detail_builder.build(current, previous, content),
        )

        logger.info(
            f"Dashboard {workspace_id} {window.period_type.value} {window.start.date()}: "
            f"{len(current)} current / {len(previous)} previous snapshots, "
            f"{len(metrics.highlights)} highlights"
        )
        return metrics

    def get_dashboard_for_query(
        self, workspace_id: str, params: Mapping[str, Any]
    ) -> DashboardMetrics:
        """get_dashboard from raw request parameters (periodType, periodStart, channels).

        Raises:
            InputValidationError: If the parameters are malformed
        """
        query = parse_query(PeriodQuery, params)
        return self.get_dashboard(
            workspace_id, query.period_type, query.period_start, query.channels
        )

    # =========================================================================
    # TREND
    # =========================================================================

    def get_trend(
        self,
        workspace_id: str,
        period_type: PeriodType | str,
        period_count: int = 8,
        anchor: date | datetime | None = None,
        channels: Sequence[str] | None = None,
    ) -> TrendSeries:
        """Trend over the last ``period_count`` periods ending with the anchor's.

        Args:
            workspace_id: Workspace whose snapshots are read
            period_type: WEEKLY or MONTHLY
            period_count: Number of periods, including the anchor's
            anchor: Defaults to now in the configured timezone
            channels: Optional provider filter
        """
        period_type = coerce_period_type(period_type, WINDOW_PERIOD_TYPES)
        if anchor is None:
            anchor = datetime.now(ZoneInfo(self.timezone) if self.timezone else None)

        windows = trailing_windows(anchor, period_type, period_count, self.timezone)
        if not windows:
            return TrendSeries(period_type=period_type, periods=[], channel_metrics={})

        snapshots = self._fetch(
            workspace_id, period_type, windows[0].start, windows[-1].end, channels
        )
        series = self.trend_builder.build(windows, snapshots, channels)

        logger.info(
            f"Trend {workspace_id} {period_type.value} x{len(windows)}: "
            f"{len(snapshots)} snapshots"
        )
        return series

    def get_trend_for_query(self, workspace_id: str, params: Mapping[str, Any]) -> TrendSeries:
        """get_trend from raw request parameters (periodType, periodCount, channels).

        Raises:
            InputValidationError: If the parameters are malformed
        """
        query = parse_query(TrendQuery, params)
        return self.get_trend(
            workspace_id, query.period_type, query.period_count, channels=query.channels
        )

    # =========================================================================
    # ROW-LEVEL DATA
    # =========================================================================

    def get_raw_rows(
        self,
        workspace_id: str,
        start_date: date,
        end_date: date,
        period_type: PeriodType | str = PeriodType.DAILY,
        channels: Sequence[str] | None = None,
        metrics: Sequence[str] | None = None,
        max_rows: int | None = 1000,
    ) -> RawRows:
        """Row-level metric table, one row per snapshot, without aggregation.

        Only snapshots of exactly ``period_type`` are included. ``max_rows``
        caps the returned frame; None returns every row.
        """
        period_type = coerce_period_type(period_type)
        tzinfo = ZoneInfo(self.timezone) if self.timezone else None
        start = datetime.combine(start_date, time.min, tzinfo)
        end = datetime.combine(end_date, time.max, tzinfo)

        raw = self.source.fetch_snapshots(workspace_id, [period_type], start, end)
        snapshots = [s for s in self.loader.load(raw) if s.period_type is period_type]

        frame = build_metric_frame(snapshots, self.registry, metrics=metrics, channels=channels)
        return RawRows(
            start=start,
            end=end,
            period_type=period_type,
            frame=frame if max_rows is None else frame.head(max_rows),
            total_rows=len(frame),
            available_metrics=available_metrics(snapshots, self.registry),
        )

    def get_raw_rows_for_query(self, workspace_id: str, params: Mapping[str, Any]) -> RawRows:
        """get_raw_rows from raw request parameters.

        Raises:
            InputValidationError: If the parameters are malformed
        """
        query = parse_query(RawRowsQuery, params)
        return self.get_raw_rows(
            workspace_id,
            query.start_date,
            query.end_date,
            query.period_type,
            query.channels,
            query.metrics,
            query.max_rows,
        )

    def get_correlation(
        self,
        workspace_id: str,
        x_key: str,
        y_key: str,
        start_date: date,
        end_date: date,
        period_type: PeriodType | str = PeriodType.DAILY,
        channels: Sequence[str] | None = None,
    ) -> CorrelationResult:
        """Correlate two metrics over the row-level table for a date range."""
        rows = self.get_raw_rows(
            workspace_id,
            start_date,
            end_date,
            period_type,
            channels,
            metrics=[x_key, y_key],
            max_rows=None,
        )
        return self.correlation_engine.correlate(rows.frame, x_key, y_key)

    # =========================================================================
    # SOURCE ACCESS
    # =========================================================================

    def _fetch(
        self,
        workspace_id: str,
        period_type: PeriodType,
        start: datetime,
        end: datetime,
        channels: Sequence[str] | None,
    ) -> list[MetricSnapshot]:
        raw = self.source.fetch_snapshots(
            workspace_id, [period_type, PeriodType.DAILY], start, end
        )
        snapshots = self.loader.load(raw)
        if channels:
            snapshots = [s for s in snapshots if s.provider in channels]
        return snapshots

    def _fetch_content(
        self, workspace_id: str, start: datetime, end: datetime
    ) -> list[ContentItem]:
        fetch_content = getattr(self.source, "fetch_content", None)
        if fetch_content is None:
            return []
        return self.loader.load_content(fetch_content(workspace_id, start, end))
