"""Metrics aggregation and insight engine for multi-channel dashboards."""

from .exceptions import EngineError, InputValidationError, InvalidPeriodTypeError, RegistryLoadError
from .services import DashboardService

__version__ = "0.1.0"

__all__ = [
    "DashboardService",
    "EngineError",
    "InputValidationError",
    "InvalidPeriodTypeError",
    "RegistryLoadError",
]
