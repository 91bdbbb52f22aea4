"""Pydantic models for upstream snapshot and content records."""

from collections.abc import Mapping
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class PeriodType(str, Enum):
    """Granularity of a snapshot window."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class Provider(str, Enum):
    """External data sources a workspace can connect."""

    GA4 = "GA4"
    META_INSTAGRAM = "META_INSTAGRAM"
    META_FACEBOOK = "META_FACEBOOK"
    YOUTUBE = "YOUTUBE"
    SMARTSTORE = "SMARTSTORE"
    COUPANG = "COUPANG"
    GOOGLE_SEARCH_CONSOLE = "GOOGLE_SEARCH_CONSOLE"
    NAVER_BLOG = "NAVER_BLOG"
    NAVER_KEYWORDS = "NAVER_KEYWORDS"


def _as_datetime(value: Any) -> Any:
    """Promote bare dates to midnight so windows compare uniformly."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _as_mapping(value: Any) -> dict[str, Any]:
    """Non-mapping payloads degrade to an empty metric bag."""
    if isinstance(value, Mapping):
        return dict(value)
    return {}


class Connection(BaseModel):
    """Channel connection that produced a snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: Optional[str] = None
    provider: str
    account_name: Optional[str] = None


class MetricSnapshot(BaseModel):
    """Immutable time-windowed metric record for one channel connection.

    Accepts both camelCase (``periodStart``) and snake_case keys. A flat
    ``provider`` / ``accountName`` pair is folded into ``connection``.
    Leaf values in ``data`` are left as received; the aggregators coerce them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    period_type: PeriodType
    period_start: datetime
    period_end: datetime
    data: dict[str, Any] = Field(default_factory=dict)
    connection: Optional[Connection] = None

    @model_validator(mode="before")
    @classmethod
    def fold_flat_connection(cls, raw: Any) -> Any:
        if isinstance(raw, Mapping) and raw.get("connection") is None and raw.get("provider"):
            raw = dict(raw)
            raw["connection"] = {
                "provider": raw.pop("provider"),
                "account_name": raw.pop("accountName", None) or raw.pop("account_name", None),
            }
        return raw

    @field_validator("period_start", "period_end", mode="before")
    @classmethod
    def promote_dates(cls, value: Any) -> Any:
        return _as_datetime(value)

    @field_validator("data", mode="before")
    @classmethod
    def coerce_data(cls, value: Any) -> dict[str, Any]:
        return _as_mapping(value)

    @property
    def provider(self) -> str | None:
        return self.connection.provider if self.connection else None

    @property
    def account_name(self) -> str | None:
        return self.connection.account_name if self.connection else None

    @property
    def connection_key(self) -> tuple[str | None, ...]:
        """Identity used to tell one connection's snapshots from another's."""
        if self.connection is None:
            return (None,)
        if self.connection.id:
            return (self.connection.id,)
        return (self.connection.provider, self.connection.account_name)


class ContentItem(BaseModel):
    """Published post or video with its latest metrics."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    channel: str
    content_type: str = "POST"
    title: Optional[str] = None
    url: str
    published_at: datetime
    metrics: dict[str, Any] = Field(default_factory=dict)

    @field_validator("published_at", mode="before")
    @classmethod
    def promote_dates(cls, value: Any) -> Any:
        return _as_datetime(value)

    @field_validator("metrics", mode="before")
    @classmethod
    def coerce_metrics(cls, value: Any) -> dict[str, Any]:
        return _as_mapping(value)
