"""Dashboard payload builders over the active movement dataset."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .classification import enrich_movements
from .dwell import (
    calculate_off_air_warehouse_aging,
    calculate_short_idle_time,
    calculate_warehouse_dwell_times,
    get_cow_off_air_details,
)
from .filters import filter_movements
from .metrics import (
    calculate_all_cow_metrics,
    calculate_all_region_metrics,
    calculate_all_warehouse_metrics,
    calculate_cow_metrics,
    calculate_distance_breakdown,
    calculate_kpis,
    calculate_movement_flows,
    calculate_warehouse_metrics,
)
from .rollups import (
    calculate_all_events_total_movements,
    calculate_ebu_royal_breakdown,
    calculate_top_events,
    calculate_top_vendors,
)
from ..config import settings
from ..data.movements_repository import load_dataset, reload_dataset
from ..models.domain import (
    CowMetrics,
    Location,
    MapPoint,
    Movement,
    NamedTotal,
    RankedEntry,
    WarehouseMetrics,
)


@dataclass(slots=True)
class MovementFilters:
    year: Optional[int] = None
    region: Optional[str] = None
    movement_type: Optional[str] = None
    vendor: Optional[str] = None


def _prepared(filters: MovementFilters) -> tuple[list[Movement], tuple[Location, ...]]:
    """Enrich the active dataset, then apply the dashboard filters."""

    dataset = load_dataset()
    enriched = enrich_movements(dataset.movements, dataset.locations)
    selected = filter_movements(
        enriched,
        dataset.locations,
        year=filters.year,
        region=filters.region,
        movement_type=filters.movement_type,
        vendor=filters.vendor,
    )
    return selected, dataset.locations


def _cow_payload(metrics: CowMetrics) -> dict:
    return {
        "cowId": metrics.cow_id,
        "totalMovements": metrics.total_movements,
        "totalDistanceKm": metrics.total_distance_km,
        "avgDistancePerMove": metrics.avg_distance_per_move,
        "movementMix": dict(metrics.movement_mix),
        "avgIdleDurationDays": metrics.avg_idle_duration_days,
        "isStatic": metrics.is_static,
        "lastMovementDate": metrics.last_movement_date,
        "regionsServed": list(metrics.regions_served),
    }


def _warehouse_payload(metrics: WarehouseMetrics) -> dict:
    return {
        "locationId": metrics.location_id,
        "locationName": metrics.location_name,
        "region": metrics.region,
        "outgoingMovements": metrics.outgoing_movements,
        "avgOutgoingDistance": metrics.avg_outgoing_distance,
        "topRegionsServed": [{"region": item.region, "count": item.count} for item in metrics.top_regions_served],
        "incomingMovements": metrics.incoming_movements,
        "avgIncomingDistance": metrics.avg_incoming_distance,
        "idleAccumulationDays": metrics.idle_accumulation_days,
    }


def _ranked_payload(entries: list[RankedEntry]) -> list[dict]:
    return [{"name": entry.name, "count": entry.count, "percentage": entry.percentage} for entry in entries]


def compute_kpis(filters: MovementFilters) -> dict:
    movements, locations = _prepared(filters)
    summary = calculate_kpis(movements, calculate_all_cow_metrics(movements, locations))
    return {
        "totalCows": summary.total_cows,
        "totalMovements": summary.total_movements,
        "totalDistanceKm": summary.total_distance_km,
        "activeCows": summary.active_cows,
        "staticCows": summary.static_cows,
        "avgMovesPerCow": summary.avg_moves_per_cow,
    }


def list_cow_metrics(filters: MovementFilters) -> list[dict]:
    movements, locations = _prepared(filters)
    return [_cow_payload(metrics) for metrics in calculate_all_cow_metrics(movements, locations)]


def get_cow_metrics(cow_id: str, filters: MovementFilters) -> Optional[dict]:
    movements, locations = _prepared(filters)
    if not any(movement.cow_id == cow_id for movement in movements):
        return None
    return _cow_payload(calculate_cow_metrics(cow_id, movements, locations))


def list_warehouse_metrics(filters: MovementFilters) -> list[dict]:
    movements, locations = _prepared(filters)
    results = calculate_all_warehouse_metrics(
        movements, locations, excluded_names=settings.excluded_warehouse_names
    )
    return [_warehouse_payload(metrics) for metrics in results]


def get_warehouse_metrics(location_id: str, filters: MovementFilters) -> Optional[dict]:
    movements, locations = _prepared(filters)
    metrics = calculate_warehouse_metrics(location_id, movements, locations)
    return _warehouse_payload(metrics) if metrics is not None else None


def list_region_metrics(filters: MovementFilters) -> list[dict]:
    movements, locations = _prepared(filters)
    cow_metrics = calculate_all_cow_metrics(movements, locations)
    return [
        {
            "region": metrics.region,
            "totalCowsDeployed": metrics.total_cows_deployed,
            "activeCows": metrics.active_cows,
            "staticCows": metrics.static_cows,
            "crossRegionMovements": metrics.cross_region_movements,
            "totalDistanceKm": metrics.total_distance_km,
            "avgDeploymentDurationDays": metrics.avg_deployment_duration_days,
        }
        for metrics in calculate_all_region_metrics(movements, locations, cow_metrics)
    ]


def compute_dwell_times(filters: MovementFilters, top_n: int, warehouse_only: bool = False) -> dict:
    movements, locations = _prepared(filters)
    summary = calculate_warehouse_dwell_times(movements, locations, top_n=top_n, warehouse_only=warehouse_only)
    return {
        "stays": [
            {
                "cowId": stay.cow_id,
                "warehouseName": stay.warehouse_name,
                "stayDays": stay.stay_days,
                "arrivalDate": stay.arrival_date,
                "departureDate": stay.departure_date,
            }
            for stay in summary.stays
        ],
        "topCows": [{"name": item.name, "value": item.value} for item in summary.top_cows],
        "avgStayPerWarehouse": [{"name": item.name, "value": item.value} for item in summary.avg_stay_per_warehouse],
        "topWarehouses": [{"name": item.name, "value": item.value} for item in summary.top_warehouses],
    }


def compute_off_air_aging(filters: MovementFilters) -> dict:
    movements, locations = _prepared(filters)
    result = calculate_off_air_warehouse_aging(movements, locations)
    return {
        "buckets": [{"name": bucket.name, "value": bucket.value} for bucket in result.buckets],
        "table": [
            {
                "cowId": row.cow_id,
                "totalMovements": row.total_movements,
                "avgIdleDays": row.avg_idle_days,
                "topWarehouse": row.top_warehouse,
            }
            for row in result.table
        ],
        "cowAgingMonths": dict(result.cow_aging_months),
        "bucketCows": {name: list(cows) for name, cows in result.bucket_cows.items()},
    }


def compute_short_idle(filters: MovementFilters) -> dict:
    movements, locations = _prepared(filters)
    result = calculate_short_idle_time(movements, locations)
    return {
        "buckets": [{"name": bucket.name, "value": bucket.value} for bucket in result.buckets],
        "cowIdleDays": dict(result.cow_idle_days),
        "bucketCows": {name: list(cows) for name, cows in result.bucket_cows.items()},
    }


def get_off_air_details(cow_id: str, filters: MovementFilters) -> Optional[dict]:
    movements, locations = _prepared(filters)
    details = get_cow_off_air_details(cow_id, movements, locations)
    if details is None:
        return None
    return {
        "cowId": details.cow_id,
        "totalMovements": details.total_movements,
        "totalIdleDays": details.total_idle_days,
        "avgIdleDays": details.avg_idle_days,
        "topWarehouse": details.top_warehouse,
        "stays": [
            {
                "fromLocation": stay.from_location,
                "toWarehouse": stay.to_warehouse,
                "idleStartDate": stay.idle_start_date,
                "idleEndDate": stay.idle_end_date,
                "idleDays": stay.idle_days,
                "offAirStatus": stay.off_air_status,
            }
            for stay in details.stays
        ],
    }


def compute_top_events(filters: MovementFilters, limit: int) -> dict:
    movements, _ = _prepared(filters)
    return {
        "items": _ranked_payload(calculate_top_events(movements, limit)),
        "totalMovements": calculate_all_events_total_movements(movements),
    }


def compute_top_vendors(filters: MovementFilters, limit: int) -> dict:
    movements, _ = _prepared(filters)
    return {"items": _ranked_payload(calculate_top_vendors(movements, limit))}


def compute_ebu_royal(filters: MovementFilters) -> dict:
    movements, _ = _prepared(filters)
    return {"items": _ranked_payload(calculate_ebu_royal_breakdown(movements)), "totalMovements": len(movements)}


def _point_payload(point: MapPoint) -> dict:
    return {
        "locationId": point.location_id,
        "name": point.location_name,
        "lat": point.latitude,
        "lon": point.longitude,
        "value": point.value,
    }


def _totals_payload(totals: list[NamedTotal]) -> list[dict]:
    return [{"name": item.name, "value": item.value} for item in totals]


def compute_flows(filters: MovementFilters, limit: int) -> dict:
    movements, locations = _prepared(filters)
    summary = calculate_movement_flows(movements, locations, limit=limit)
    return {
        "flows": [
            {
                "fromLocationId": flow.from_location_id,
                "fromLocation": flow.from_location_name,
                "toLocationId": flow.to_location_id,
                "toLocation": flow.to_location_name,
                "count": flow.count,
                "cowIds": list(flow.cow_ids),
            }
            for flow in summary.flows
        ],
        "origins": [_point_payload(point) for point in summary.origins],
        "destinations": [_point_payload(point) for point in summary.destinations],
    }


def compute_distance(filters: MovementFilters) -> dict:
    movements, locations = _prepared(filters)
    breakdown = calculate_distance_breakdown(movements, locations)
    return {
        "totalDistanceKm": breakdown.total_distance_km,
        "avgDistancePerMovement": breakdown.avg_distance_per_movement,
        "byYear": _totals_payload(breakdown.by_year),
        "byRegion": _totals_payload(breakdown.by_region),
        "byVendor": _totals_payload(breakdown.by_vendor),
    }


def refresh_dataset() -> dict:
    dataset = reload_dataset()
    return {
        "source": "sheet" if settings.sheet_csv_url else "file",
        "totalMovements": len(dataset.movements),
        "totalLocations": len(dataset.locations),
        "totalCows": len(dataset.cow_ids),
    }
