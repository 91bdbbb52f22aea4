from .cleaner import clean_metric_map, coerce_metric_value, finite_number
from .loader import SnapshotLoader
from .rows import available_metrics, build_metric_frame, export_rows_csv

__all__ = [
    "SnapshotLoader",
    "available_metrics",
    "build_metric_frame",
    "clean_metric_map",
    "coerce_metric_value",
    "export_rows_csv",
    "finite_number",
]
