"""Origin/destination flows and distance rollups for the map and distance views."""

from __future__ import annotations

from typing import Iterable, Optional

from ...models.domain import (
    DistanceBreakdown,
    FlowSummary,
    Location,
    MapPoint,
    Movement,
    MovementFlow,
    NamedTotal,
)
from ..classification import build_location_lookup
from ..durations import round2
from ..geospatial import within_saudi_bounds

DISTANCE_REGIONS = ("WEST", "EAST", "CENTRAL", "SOUTH", "NORTH")
VENDOR_DISTANCE_LIMIT = 6


def _accumulate_point(points: dict[str, MapPoint], location: Location, count: int) -> None:
    point = points.get(location.location_id)
    if point is None:
        points[location.location_id] = MapPoint(
            location_id=location.location_id,
            location_name=location.location_name,
            latitude=location.latitude,
            longitude=location.longitude,
            value=count,
        )
    else:
        point.value += count


def _mappable(points: dict[str, MapPoint]) -> list[MapPoint]:
    kept = [p for p in points.values() if within_saudi_bounds(p.latitude, p.longitude)]
    return sorted(kept, key=lambda point: -point.value)


def calculate_movement_flows(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    *,
    limit: Optional[int] = None,
) -> FlowSummary:
    """Count movements per (origin, destination) pair and build map points.

    Movements with an endpoint missing from the directory are skipped. Flows are
    ranked by count with ties in first-seen order; ``limit`` trims the flow list
    only. Origin and destination points sum every flow and drop coordinates
    outside the Kingdom.
    """

    lookup = build_location_lookup(locations)
    flows: dict[tuple[str, str], MovementFlow] = {}
    for movement in movements:
        origin = lookup.get(movement.from_location_id)
        destination = lookup.get(movement.to_location_id)
        if origin is None or destination is None:
            continue
        key = (origin.location_id, destination.location_id)
        flow = flows.get(key)
        if flow is None:
            flow = flows[key] = MovementFlow(
                from_location_id=origin.location_id,
                from_location_name=origin.location_name,
                to_location_id=destination.location_id,
                to_location_name=destination.location_name,
                count=0,
            )
        flow.count += 1
        if movement.cow_id not in flow.cow_ids:
            flow.cow_ids.append(movement.cow_id)

    ranked = sorted(flows.values(), key=lambda flow: -flow.count)

    origins: dict[str, MapPoint] = {}
    destinations: dict[str, MapPoint] = {}
    for flow in ranked:
        _accumulate_point(origins, lookup[flow.from_location_id], flow.count)
        _accumulate_point(destinations, lookup[flow.to_location_id], flow.count)

    if limit is not None:
        ranked = ranked[: max(limit, 0)]

    return FlowSummary(flows=ranked, origins=_mappable(origins), destinations=_mappable(destinations))


def calculate_distance_breakdown(
    movements: Iterable[Movement],
    locations: Iterable[Location],
) -> DistanceBreakdown:
    """Distance travelled per departure year, destination region and vendor."""

    batch = list(movements)
    lookup = build_location_lookup(locations)

    by_year: dict[int, float] = {}
    by_region: dict[str, float] = {region: 0.0 for region in DISTANCE_REGIONS}
    by_vendor: dict[str, float] = {}
    for movement in batch:
        distance = movement.distance_km or 0.0
        if movement.moved_datetime is not None:
            year = movement.moved_datetime.year
            by_year[year] = by_year.get(year, 0.0) + distance
        destination = lookup.get(movement.to_location_id)
        if destination is not None:
            by_region[destination.region] = by_region.get(destination.region, 0.0) + distance
        vendor = (movement.vendor or "").strip()
        if vendor:
            by_vendor[vendor] = by_vendor.get(vendor, 0.0) + distance

    total = sum(movement.distance_km or 0.0 for movement in batch)
    vendors = sorted(by_vendor.items(), key=lambda item: -item[1])[:VENDOR_DISTANCE_LIMIT]

    return DistanceBreakdown(
        total_distance_km=round2(total),
        avg_distance_per_movement=round2(total / len(batch)) if batch else 0.0,
        by_year=[NamedTotal(name=str(year), value=round2(value)) for year, value in sorted(by_year.items())],
        by_region=[NamedTotal(name=region, value=round2(value)) for region, value in by_region.items()],
        by_vendor=[NamedTotal(name=vendor, value=round2(value)) for vendor, value in vendors],
    )
