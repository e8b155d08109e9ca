"""Per-COW movement metrics."""

from __future__ import annotations

from itertools import pairwise
from typing import Iterable, Sequence

from ...models.domain import MOVEMENT_TYPES, CowMetrics, Location, Movement
from ..classification import build_location_lookup
from ..durations import group_by_cow, iso_date, positive_days_between, round2, safe_mean, sort_by_moved


def _compute_metrics(cow_id: str, cow_movements: Sequence[Movement], lookup: dict[str, Location]) -> CowMetrics:
    total_movements = len(cow_movements)
    total_distance = sum(movement.distance_km or 0.0 for movement in cow_movements)
    avg_distance = total_distance / total_movements if total_movements else 0.0

    movement_mix = {movement_type: 0 for movement_type in MOVEMENT_TYPES}
    for movement in cow_movements:
        if movement.movement_type in movement_mix:
            movement_mix[movement.movement_type] += 1

    idle_durations: list[float] = []
    for previous, current in pairwise(cow_movements):
        idle_days = positive_days_between(previous.reached_datetime, current.moved_datetime)
        if idle_days is not None:
            idle_durations.append(idle_days)

    regions_served: list[str] = []
    for movement in cow_movements:
        destination = lookup.get(movement.to_location_id)
        if destination and destination.region and destination.region not in regions_served:
            regions_served.append(destination.region)

    reached_dates = [m.reached_datetime for m in cow_movements if m.reached_datetime is not None]
    last_movement_date = iso_date(max(reached_dates)) if reached_dates else None

    return CowMetrics(
        cow_id=cow_id,
        total_movements=total_movements,
        total_distance_km=round2(total_distance),
        avg_distance_per_move=round2(avg_distance),
        movement_mix=movement_mix,
        avg_idle_duration_days=round2(safe_mean(idle_durations)),
        is_static=total_movements <= 1,
        last_movement_date=last_movement_date,
        regions_served=regions_served,
    )


def calculate_cow_metrics(
    cow_id: str,
    movements: Iterable[Movement],
    locations: Iterable[Location],
) -> CowMetrics:
    """Aggregate the movements of a single COW.

    Idle time is measured between consecutive moves in departure order, from the
    previous arrival to the next departure; only positive gaps are averaged.
    """

    cow_movements = sort_by_moved(m for m in movements if m.cow_id == cow_id)
    return _compute_metrics(cow_id, cow_movements, build_location_lookup(locations))


def calculate_all_cow_metrics(
    movements: Iterable[Movement],
    locations: Iterable[Location],
) -> list[CowMetrics]:
    """Metrics for every COW present in the batch, in first-seen order."""

    lookup = build_location_lookup(locations)
    return [
        _compute_metrics(cow_id, cow_movements, lookup)
        for cow_id, cow_movements in group_by_cow(movements).items()
    ]
