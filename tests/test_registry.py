"""Tests for the metric registry and request query models."""

import pytest

from channel_pulse.config import MetricRegistry, Polarity, Reducer, load_registry
from channel_pulse.exceptions import InputValidationError, RegistryLoadError
from channel_pulse.models import PeriodQuery, RawRowsQuery, TrendQuery, parse_query


class TestMetricRegistry:
    """Tests for the bundled registry and its lookups."""

    def test_cached(self) -> None:
        assert load_registry() is load_registry()

    def test_overview_metrics(self, registry: MetricRegistry) -> None:
        keys = [d.key for d in registry.overview_metrics]
        assert keys == [
            "revenue", "dau", "wau", "mau", "signups", "reach", "engagement", "followers", "uploads"
        ]

    def test_synonyms_start_with_key(self, registry: MetricRegistry) -> None:
        assert registry.get("revenue").synonyms == ("revenue", "sales")
        assert registry.get("wau").synonyms == ("wau",)

    def test_reducers(self, registry: MetricRegistry) -> None:
        """Own entry first, then synonym owner, then SUM."""
        assert registry.reducer_for("revenue") is Reducer.SUM
        assert registry.reducer_for("dau") is Reducer.MAX
        assert registry.reducer_for("totalUsers") is Reducer.MAX
        assert registry.reducer_for("posts") is Reducer.SUM
        assert registry.reducer_for("somethingNew") is Reducer.SUM

    def test_reducer_combine(self) -> None:
        assert Reducer.SUM.combine(None, 5) == 5
        assert Reducer.SUM.combine(2, 5) == 7
        assert Reducer.MAX.combine(9, 5) == 9

    def test_polarity(self, registry: MetricRegistry) -> None:
        assert registry.polarity_for("revenue") is Polarity.GOOD_UP
        assert registry.polarity_for("refunds") is Polarity.GOOD_DOWN
        assert registry.polarity_for("likes") is Polarity.NEUTRAL
        assert registry.polarity_for("unknown") is Polarity.NEUTRAL

    def test_consumed_keys(self, registry: MetricRegistry) -> None:
        assert {"sales", "totalUsers", "impressions", "posts"} <= registry.consumed_keys
        assert "views" not in registry.consumed_keys

    def test_channel_labels(self, registry: MetricRegistry) -> None:
        assert registry.channel_label("SMARTSTORE") == "SmartStore"
        assert registry.channel_label("TIKTOK") == "TIKTOK"

    def test_field_sets(self, registry: MetricRegistry) -> None:
        """View-specific chains live in the registry, broader than the synonyms."""
        assert registry.field_set("trend_totals")["reach"] == ("reach", "impressions", "views")
        assert registry.field_set("traffic")["users"] == ("totalUsers", "users")
        assert registry.field_set("missing") == {}
        assert registry.group("TRAFFIC") == ("GA4",)

    def test_trend_channels(self, registry: MetricRegistry) -> None:
        youtube = registry.trend_channels["youtube"]
        assert youtube.provider == "YOUTUBE"
        assert youtube.series["subscribers"] == ("subscribers", "subscriberCount")

    def test_lookups_are_read_only(self, registry: MetricRegistry) -> None:
        with pytest.raises(TypeError):
            registry.channel_groups["SNS"] = ()


class TestRegistryLoading:
    """Tests for load_registry() and MetricRegistry.from_dict() failures."""

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(RegistryLoadError, match="Failed to load"):
            load_registry(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path) -> None:
        path = tmp_path / "registry.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(RegistryLoadError, match="not a mapping"):
            load_registry(path)

    def test_custom_file(self, tmp_path) -> None:
        path = tmp_path / "registry.yaml"
        path.write_text(
            "metrics:\n"
            "  - key: gmv\n"
            "    label: GMV\n"
            "    overview: true\n"
            "highlights:\n"
            "  significance_threshold: 25\n"
        )
        registry = load_registry(path)
        assert [d.key for d in registry.overview_metrics] == ["gmv"]
        assert registry.highlight_settings.significance_threshold == 25
        assert registry.highlight_settings.max_highlights == 5

    def test_duplicate_keys(self) -> None:
        with pytest.raises(RegistryLoadError, match="Duplicate"):
            MetricRegistry.from_dict({"metrics": [{"key": "a"}, {"key": "a"}]})

    def test_bad_reducer(self) -> None:
        with pytest.raises(RegistryLoadError):
            MetricRegistry.from_dict({"metrics": [{"key": "a", "reducer": "avg"}]})

    def test_unknown_timezone(self) -> None:
        with pytest.raises(RegistryLoadError, match="timezone"):
            MetricRegistry.from_dict({"metrics": [], "timezone": "Mars/Olympus"})


class TestQueryModels:
    """Tests for request parameter validation."""

    def test_period_query(self) -> None:
        query = parse_query(
            PeriodQuery,
            {"periodType": "MONTHLY", "periodStart": "2024-02-29", "channels": "YOUTUBE, GA4"},
        )
        assert query.period_start.isoformat() == "2024-02-29"
        assert query.channels == ["YOUTUBE", "GA4"]

    def test_invalid_calendar_date(self) -> None:
        with pytest.raises(InputValidationError):
            parse_query(PeriodQuery, {"periodType": "MONTHLY", "periodStart": "2023-02-29"})

    def test_trend_defaults(self) -> None:
        query = parse_query(TrendQuery, {"periodType": "WEEKLY", "periodCount": None})
        assert query.period_count == 8
        assert query.channels is None

    def test_raw_rows_defaults(self) -> None:
        query = parse_query(RawRowsQuery, {"startDate": "2024-03-01", "endDate": "2024-03-31"})
        assert query.period_type == "DAILY"
        assert query.max_rows == 1000
        assert query.metrics is None

    def test_raw_rows_max_rows_bound(self) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            parse_query(
                RawRowsQuery,
                {"startDate": "2024-03-01", "endDate": "2024-03-31", "maxRows": 20000},
            )
        assert exc_info.value.row_count == 1
        assert exc_info.value.errors
