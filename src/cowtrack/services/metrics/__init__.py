"""Per-entity aggregation helpers."""

from .cows import calculate_all_cow_metrics, calculate_cow_metrics
from .flows import calculate_distance_breakdown, calculate_movement_flows
from .kpis import calculate_kpis
from .regions import calculate_all_region_metrics, calculate_region_metrics
from .warehouses import calculate_all_warehouse_metrics, calculate_warehouse_metrics

__all__ = [
    "calculate_cow_metrics",
    "calculate_all_cow_metrics",
    "calculate_warehouse_metrics",
    "calculate_all_warehouse_metrics",
    "calculate_region_metrics",
    "calculate_all_region_metrics",
    "calculate_kpis",
    "calculate_movement_flows",
    "calculate_distance_breakdown",
]
