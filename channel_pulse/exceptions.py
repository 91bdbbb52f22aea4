"""Custom exceptions for the metrics engine."""

from typing import Any


class EngineError(Exception):
    """Base exception for engine errors."""

    pass


class RegistryLoadError(EngineError):
    """Failed to load the metric registry configuration."""

    pass


class InputValidationError(EngineError):
    """Request parameters or snapshot records failed Pydantic validation."""

    def __init__(self, errors: list[dict[str, Any]], row_count: int):
        self.errors = errors
        self.row_count = row_count
        super().__init__(
            f"Validation failed for {len(errors)} of {row_count} records. "
            f"First error: {errors[0] if errors else 'N/A'}"
        )


class InvalidPeriodTypeError(EngineError, ValueError):
    """Period type is not one the resolver can build a window for."""

    def __init__(self, period_type: Any, allowed: list[str]):
        self.period_type = period_type
        self.allowed = allowed
        super().__init__(
            f"Unsupported period type: {period_type!r}. Expected one of {allowed}"
        )
