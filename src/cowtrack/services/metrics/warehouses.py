"""Warehouse dispatch/receiving metrics."""

from __future__ import annotations

from collections import Counter
from typing import Collection, Iterable, Optional, Sequence

from ...models.domain import Location, Movement, RegionCount, WarehouseMetrics
from ..classification import build_location_lookup
from ..durations import days_between, round2, sort_by_moved

TOP_REGIONS_LIMIT = 5


def _average_distance(movements: Sequence[Movement]) -> float:
    if not movements:
        return 0.0
    return round2(sum(m.distance_km or 0.0 for m in movements) / len(movements))


def _idle_accumulation(incoming: Sequence[Movement], outgoing: Sequence[Movement]) -> float:
    """Sum the gaps between each arrival and the same COW's next departure."""

    total = 0.0
    for arrival in incoming:
        if arrival.reached_datetime is None:
            continue
        departure = next(
            (
                m
                for m in outgoing
                if m.cow_id == arrival.cow_id
                and m.moved_datetime is not None
                and m.moved_datetime > arrival.reached_datetime
            ),
            None,
        )
        if departure is None:
            continue  # still parked, or left without a tracked movement
        total += days_between(arrival.reached_datetime, departure.moved_datetime) or 0.0
    return total


def calculate_warehouse_metrics(
    location_id: str,
    movements: Iterable[Movement],
    locations: Iterable[Location],
) -> Optional[WarehouseMetrics]:
    """Dispatch and receiving statistics for one warehouse.

    Returns None when the location is unknown or does not qualify as a warehouse.
    """

    lookup = build_location_lookup(locations)
    location = lookup.get(location_id)
    if location is None or not location.is_warehouse:
        return None

    batch = list(movements)
    outgoing = sort_by_moved(m for m in batch if m.from_location_id == location_id)
    incoming = [m for m in batch if m.to_location_id == location_id]

    region_counts: Counter[str] = Counter()
    for movement in outgoing:
        destination = lookup.get(movement.to_location_id)
        if destination is not None:
            region_counts[destination.region] += 1

    top_regions = [
        RegionCount(region=region, count=count)
        for region, count in region_counts.most_common(TOP_REGIONS_LIMIT)
    ]

    return WarehouseMetrics(
        location_id=location.location_id,
        location_name=location.location_name,
        region=location.region,
        outgoing_movements=len(outgoing),
        avg_outgoing_distance=_average_distance(outgoing),
        top_regions_served=top_regions,
        incoming_movements=len(incoming),
        avg_incoming_distance=_average_distance(incoming),
        idle_accumulation_days=round2(_idle_accumulation(incoming, outgoing)),
    )


def calculate_all_warehouse_metrics(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    *,
    excluded_names: Collection[str] = (),
) -> list[WarehouseMetrics]:
    """Metrics for every qualifying warehouse, sorted by outgoing movements (descending)."""

    batch = list(movements)
    directory = list(locations)
    results: list[WarehouseMetrics] = []
    for location in directory:
        if not location.is_warehouse or location.location_name in excluded_names:
            continue
        metrics = calculate_warehouse_metrics(location.location_id, batch, directory)
        if metrics is not None:
            results.append(metrics)
    return sorted(results, key=lambda item: -item.outgoing_movements)
