"""Service layer for dashboard computations."""

from .dashboard_service import DashboardService, RawRows, SnapshotSource

__all__ = ["DashboardService", "RawRows", "SnapshotSource"]
