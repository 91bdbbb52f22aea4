"""Metric descriptor registry.

A single immutable table describing every known metric: its display label,
how snapshots combine (reducer), whether growth is good (polarity), and which
alternative spellings feed it (synonyms). Call sites look metrics up here
instead of carrying their own fallback chains.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..exceptions import RegistryLoadError

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "registry.yaml"


class Reducer(str, Enum):
    """How values from several snapshots in one window are combined."""

    SUM = "sum"  # Counters: revenue, reach, followers gained
    MAX = "max"  # Gauges: dau, wau, mau

    def combine(self, accumulated: float | None, value: float) -> float:
        if accumulated is None:
            return value
        if self is Reducer.MAX:
            return max(accumulated, value)
        return accumulated + value


class Polarity(str, Enum):
    """Whether an increase in a metric is good news."""

    GOOD_UP = "good_up"
    GOOD_DOWN = "good_down"
    NEUTRAL = "neutral"


class MetricDescriptor(BaseModel):
    """Registry entry for one metric key."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str | None = None
    reducer: Reducer = Reducer.SUM
    polarity: Polarity = Polarity.NEUTRAL
    synonyms: tuple[str, ...] = ()
    overview: bool = False

    @model_validator(mode="before")
    @classmethod
    def canonical_key_first(cls, data: Any) -> Any:
        """Synonyms always start with the canonical key unless listed explicitly."""
        if isinstance(data, dict) and data.get("key") is not None:
            synonyms = list(data.get("synonyms") or [])
            if data["key"] not in synonyms:
                synonyms.insert(0, data["key"])
            data = {**data, "synonyms": synonyms}
        return data


class HighlightSettings(BaseModel):
    """Default highlight thresholds; workspaces may override them."""

    model_config = ConfigDict(frozen=True)

    significance_threshold: float = Field(default=10.0, ge=0)
    max_highlights: int = Field(default=5, ge=1)


class TrendChannel(BaseModel):
    """One per-channel trend series: its provider and field chains."""

    model_config = ConfigDict(frozen=True)

    provider: str
    series: dict[str, tuple[str, ...]]


class RegistryConfig(BaseModel):
    """Validated shape of registry.yaml."""

    model_config = ConfigDict(frozen=True)

    metrics: list[MetricDescriptor]
    channel_groups: dict[str, list[str]] = Field(default_factory=dict)
    channel_labels: dict[str, str] = Field(default_factory=dict)
    field_sets: dict[str, dict[str, tuple[str, ...]]] = Field(default_factory=dict)
    trend_channels: dict[str, TrendChannel] = Field(default_factory=dict)
    highlights: HighlightSettings = Field(default_factory=HighlightSettings)
    timezone: str | None = None

    @field_validator("metrics")
    @classmethod
    def unique_keys(cls, metrics: list[MetricDescriptor]) -> list[MetricDescriptor]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for metric in metrics:
            if metric.key in seen:
                duplicates.append(metric.key)
            seen.add(metric.key)
        if duplicates:
            raise ValueError(f"Duplicate metric keys: {duplicates}")
        return metrics

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, tz: str | None) -> str | None:
        if tz is not None:
            try:
                ZoneInfo(tz)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unknown IANA timezone: {tz}") from e
        return tz


class MetricRegistry:
    """Read-only lookups over the metric descriptor table.

    Usage:
        registry = load_registry()
        registry.reducer_for("totalUsers")  # Reducer.MAX, via the dau synonyms
        registry.label_for("revenue")       # "Revenue"
    """

    def __init__(self, config: RegistryConfig):
        self._config = config
        self._by_key: Mapping[str, MetricDescriptor] = MappingProxyType(
            {d.key: d for d in config.metrics}
        )

        owners: dict[str, MetricDescriptor] = {}
        for descriptor in config.metrics:
            for synonym in descriptor.synonyms:
                owners.setdefault(synonym, descriptor)
        self._by_synonym: Mapping[str, MetricDescriptor] = MappingProxyType(owners)

        self.overview_metrics: tuple[MetricDescriptor, ...] = tuple(
            d for d in config.metrics if d.overview
        )
        # Spellings folded into an overview metric; never passed through on their own
        self.consumed_keys: frozenset[str] = frozenset(
            s for d in self.overview_metrics for s in d.synonyms
        )
        self.channel_groups: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {name: tuple(providers) for name, providers in config.channel_groups.items()}
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "MetricRegistry":
        """Build a registry from an already-parsed mapping."""
        try:
            return cls(RegistryConfig.model_validate(raw))
        except ValidationError as e:
            raise RegistryLoadError(f"Invalid registry configuration: {e}") from e

    @property
    def highlight_settings(self) -> HighlightSettings:
        return self._config.highlights

    @property
    def timezone(self) -> str | None:
        return self._config.timezone

    @property
    def trend_channels(self) -> Mapping[str, TrendChannel]:
        return MappingProxyType(self._config.trend_channels)

    def field_set(self, name: str) -> Mapping[str, tuple[str, ...]]:
        """Named field chains, {field: snapshot keys}; empty when not configured."""
        return MappingProxyType(self._config.field_sets.get(name, {}))

    def get(self, key: str) -> MetricDescriptor | None:
        return self._by_key.get(key)

    def label_for(self, key: str) -> str | None:
        descriptor = self._by_key.get(key)
        return descriptor.label if descriptor else None

    def polarity_for(self, key: str) -> Polarity:
        descriptor = self._by_key.get(key)
        return descriptor.polarity if descriptor else Polarity.NEUTRAL

    def reducer_for(self, key: str) -> Reducer:
        """Reducer for a raw key: own entry, then the entry listing it as a synonym, then SUM."""
        descriptor = self._by_key.get(key) or self._by_synonym.get(key)
        return descriptor.reducer if descriptor else Reducer.SUM

    def channel_label(self, provider: str) -> str:
        return self._config.channel_labels.get(provider, provider)

    def group(self, name: str) -> tuple[str, ...]:
        return self.channel_groups[name]


@lru_cache(maxsize=8)
def load_registry(path: Path | str | None = None) -> MetricRegistry:
    """Load and validate the registry YAML. Cached per path.

    Args:
        path: Registry file. Defaults to the bundled registry.yaml.

    Raises:
        RegistryLoadError: If the file is unreadable or fails validation.
    """
    registry_path = Path(path) if path is not None else DEFAULT_REGISTRY_PATH
    try:
        with open(registry_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RegistryLoadError(f"Failed to load registry from {registry_path}: {e}") from e

    if not isinstance(raw, dict):
        raise RegistryLoadError(f"Registry at {registry_path} is not a mapping")

    return MetricRegistry.from_dict(raw)
