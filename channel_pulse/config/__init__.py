from .registry import (
    DEFAULT_REGISTRY_PATH,
    HighlightSettings,
    MetricDescriptor,
    MetricRegistry,
    Polarity,
    Reducer,
    TrendChannel,
    load_registry,
)

__all__ = [
    "DEFAULT_REGISTRY_PATH",
    "HighlightSettings",
    "MetricDescriptor",
    "MetricRegistry",
    "Polarity",
    "Reducer",
    "TrendChannel",
    "load_registry",
]
