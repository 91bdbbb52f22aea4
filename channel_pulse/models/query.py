"""Pydantic models for request parameters accepted at the service boundary."""

import re
from collections.abc import Mapping
from datetime import date
from typing import Any, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..exceptions import InputValidationError

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

QueryT = TypeVar("QueryT", bound=BaseModel)


def _strict_iso_date(value: Any) -> Any:
    """Only YYYY-MM-DD strings or date objects are accepted."""
    if isinstance(value, str) and not ISO_DATE_PATTERN.match(value):
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    return value


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
        return [item for item in items if item] or None
    return value


class _Query(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class PeriodQuery(_Query):
    """Dashboard request: one WEEKLY or MONTHLY period around an anchor date."""

    period_type: Literal["WEEKLY", "MONTHLY"]
    period_start: date
    channels: Optional[list[str]] = None

    @field_validator("period_start", mode="before")
    @classmethod
    def check_date(cls, value: Any) -> Any:
        return _strict_iso_date(value)

    @field_validator("channels", mode="before")
    @classmethod
    def split_channels(cls, value: Any) -> Any:
        return _split_csv(value)


class TrendQuery(_Query):
    """Trend request: the last ``period_count`` periods."""

    period_type: Literal["WEEKLY", "MONTHLY"]
    period_count: int = Field(default=8, ge=1, le=12)
    channels: Optional[list[str]] = None

    @field_validator("channels", mode="before")
    @classmethod
    def split_channels(cls, value: Any) -> Any:
        return _split_csv(value)


class RawRowsQuery(_Query):
    """Row-level export request over an explicit date range."""

    start_date: date
    end_date: date
    period_type: Literal["DAILY", "WEEKLY", "MONTHLY"] = "DAILY"
    channels: Optional[list[str]] = None
    metrics: Optional[list[str]] = None
    max_rows: int = Field(default=1000, ge=1, le=10000)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def check_dates(cls, value: Any) -> Any:
        return _strict_iso_date(value)

    @field_validator("channels", "metrics", mode="before")
    @classmethod
    def split_lists(cls, value: Any) -> Any:
        return _split_csv(value)

    @model_validator(mode="after")
    def ordered_range(self) -> "RawRowsQuery":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


def parse_query(model: type[QueryT], params: Mapping[str, Any]) -> QueryT:
    """Validate raw request parameters.

    Missing (``None``) parameters are dropped so model defaults apply.

    Raises:
        InputValidationError: If the parameters do not satisfy the model.
    """
    cleaned = {k: v for k, v in params.items() if v is not None}
    try:
        return model.model_validate(cleaned)
    except ValidationError as e:
        raise InputValidationError(e.errors(), 1) from e
