"""Regional deployment metrics."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ...models.domain import CowMetrics, Location, Movement, RegionMetrics
from ..classification import build_location_lookup
from ..durations import days_between, round2, safe_mean


def _region_of(lookup: dict[str, Location], location_id: str) -> Optional[str]:
    location = lookup.get(location_id)
    return location.region if location is not None else None


def calculate_region_metrics(
    region: str,
    movements: Iterable[Movement],
    locations: Iterable[Location],
    cow_metrics: Sequence[CowMetrics],
) -> RegionMetrics:
    """Deployment statistics for a region.

    A movement belongs to the region when either endpoint lies in it. The average
    deployment duration covers Full movements only and, unlike the idle-time
    calculations, keeps negative durations in the mean.
    """

    lookup = build_location_lookup(locations)
    static_by_cow = {metrics.cow_id: metrics.is_static for metrics in cow_metrics}

    region_movements = [
        m
        for m in movements
        if _region_of(lookup, m.to_location_id) == region or _region_of(lookup, m.from_location_id) == region
    ]

    deployed: list[str] = []
    for movement in region_movements:
        if _region_of(lookup, movement.to_location_id) == region and movement.cow_id not in deployed:
            deployed.append(movement.cow_id)

    # COWs without computed metrics are counted as active.
    static_cows = sum(1 for cow_id in deployed if static_by_cow.get(cow_id, False))
    active_cows = len(deployed) - static_cows

    cross_region = sum(
        1
        for m in region_movements
        if _region_of(lookup, m.from_location_id) != _region_of(lookup, m.to_location_id)
    )

    total_distance = sum(m.distance_km or 0.0 for m in region_movements)

    deployment_durations: list[float] = []
    for movement in region_movements:
        if movement.movement_type != "Full":
            continue
        duration = days_between(movement.moved_datetime, movement.reached_datetime)
        if duration is not None:
            deployment_durations.append(duration)

    return RegionMetrics(
        region=region,
        total_cows_deployed=len(deployed),
        active_cows=active_cows,
        static_cows=static_cows,
        cross_region_movements=cross_region,
        total_distance_km=round2(total_distance),
        avg_deployment_duration_days=round2(safe_mean(deployment_durations)),
    )


def calculate_all_region_metrics(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    cow_metrics: Sequence[CowMetrics],
) -> list[RegionMetrics]:
    """Metrics for each region present in the location directory, sorted by name."""

    batch = list(movements)
    directory = list(locations)
    regions = sorted({location.region for location in directory if location.region})
    return [calculate_region_metrics(region, batch, directory, cow_metrics) for region in regions]
