"""Shared fixtures: registry, snapshot factory and an in-memory snapshot source."""

from collections.abc import Callable, Sequence
from datetime import date, datetime
from typing import Any

import pytest

from channel_pulse.config import MetricRegistry, load_registry
from channel_pulse.models import MetricSnapshot, PeriodType

SnapshotFactory = Callable[..., MetricSnapshot]


class InMemorySource:
    """SnapshotSource backed by lists of raw records."""

    def __init__(
        self,
        records: Sequence[dict[str, Any]] = (),
        content: Sequence[dict[str, Any]] | None = None,
    ):
        self.records = list(records)
        self.content = content
        self.calls: list[tuple[str, tuple[str, ...], datetime, datetime]] = []

    def fetch_snapshots(
        self,
        workspace_id: str,
        period_types: Sequence[PeriodType],
        start: datetime,
        end: datetime,
    ) -> list[dict[str, Any]]:
        types = tuple(PeriodType(p).value for p in period_types)
        self.calls.append((workspace_id, types, start, end))
        selected = []
        for record in self.records:
            moment = datetime.fromisoformat(record["periodStart"])
            if record["periodType"] in types and start <= moment <= end:
                selected.append(record)
        return selected

    def fetch_content(self, workspace_id: str, start: datetime, end: datetime) -> list[dict]:
        return list(self.content or [])


def snapshot_record(
    provider: str | None,
    period_start: date,
    data: dict[str, Any],
    period_type: str = "WEEKLY",
    period_end: date | None = None,
    account_name: str | None = None,
    connection_id: str | None = None,
) -> dict[str, Any]:
    """Raw camelCase record as the persistence layer returns it."""
    connection = None
    if provider is not None:
        connection = {"id": connection_id, "provider": provider, "accountName": account_name}
    return {
        "periodType": period_type,
        "periodStart": period_start.isoformat(),
        "periodEnd": (period_end or period_start).isoformat(),
        "data": data,
        "connection": connection,
    }


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def registry() -> MetricRegistry:
    """Bundled metric registry."""
    return load_registry()


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    """Factory building raw snapshot records."""
    return snapshot_record


@pytest.fixture
def make_snapshot() -> SnapshotFactory:
    """Factory building validated MetricSnapshot models."""

    def _make(
        provider: str | None,
        data: dict[str, Any],
        period_start: date = date(2024, 3, 11),
        period_type: str = "WEEKLY",
        account_name: str | None = None,
        connection_id: str | None = None,
    ) -> MetricSnapshot:
        return MetricSnapshot.model_validate(
            snapshot_record(
                provider,
                period_start,
                data,
                period_type=period_type,
                account_name=account_name,
                connection_id=connection_id,
            )
        )

    return _make


@pytest.fixture
def make_source() -> Callable[..., InMemorySource]:
    """Factory building in-memory sources from raw records."""
    return InMemorySource


@pytest.fixture
def dashboard_records() -> list[dict[str, Any]]:
    """Two weeks of data: 2024-03-04 (previous) and 2024-03-11 (current)."""
    prev, cur = date(2024, 3, 4), date(2024, 3, 11)
    return [
        # YouTube: followers are summed, engagement derived from likes/comments/shares
        snapshot_record("YOUTUBE", prev, {"views": 1000, "followers": 200, "likes": 40,
                                          "comments": 5, "shares": 5}, account_name="My Channel"),
        snapshot_record("YOUTUBE", cur, {"views": 1500, "followers": 500, "likes": 60,
                                         "comments": 10, "shares": 5}, account_name="My Channel"),
        snapshot_record("YOUTUBE", cur, {"views": 500, "followers": 300, "likes": 20,
                                         "comments": 0, "shares": 0}, account_name="My Channel"),
        # Instagram: no previous week
        snapshot_record("META_INSTAGRAM", cur, {"reach": 2000, "impressions": 3000,
                                                "engagements": 100, "followers": 50}),
        # SmartStore
        snapshot_record("SMARTSTORE", prev, {"revenue": 100000, "orders": 10, "cancels": 2}),
        snapshot_record("SMARTSTORE", cur, {"revenue": 120000, "orders": 12, "cancels": 4}),
        # GA4 traffic
        snapshot_record("GA4", prev, {"sessions": 800, "totalUsers": 500, "dau": 70,
                                      "wau": 400, "conversionRate": 2.0}),
        snapshot_record("GA4", cur, {"sessions": 1000, "totalUsers": 600, "dau": 80,
                                     "wau": 450, "conversionRate": 2.5}),
    ]


@pytest.fixture
def content_records() -> list[dict[str, Any]]:
    """Content published during the week of 2024-03-11."""
    return [
        {"id": "v1", "channel": "YOUTUBE", "contentType": "VIDEO", "title": "Launch",
         "url": "https://example.com/v1", "publishedAt": "2024-03-12T10:00:00",
         "metrics": {"views": 900, "likes": 30}},
        {"id": "p1", "channel": "META_INSTAGRAM", "contentType": "POST", "title": None,
         "url": "https://example.com/p1", "publishedAt": "2024-03-13T10:00:00",
         "metrics": {"impressions": 1200, "engagements": 80}},
        {"id": "v0", "channel": "YOUTUBE", "contentType": "VIDEO", "title": "Old",
         "url": "https://example.com/v0", "publishedAt": "2024-03-01T10:00:00",
         "metrics": {"views": 5000}},
    ]


@pytest.fixture
def source(
    dashboard_records: list[dict[str, Any]], content_records: list[dict[str, Any]]
) -> InMemorySource:
    return InMemorySource(dashboard_records, content_records)
