"""Warehouse dwell time: how long COWs stay at a location between moves."""

from __future__ import annotations

from itertools import pairwise
from typing import Iterable, Mapping

from ...models.domain import DwellTimeSummary, Location, Movement, NamedTotal, StayRecord
from ..classification import build_location_lookup
from ..durations import group_by_cow, iso_date, positive_days_between, round2


def collect_stays(
    movements: Iterable[Movement],
    locations: Mapping[str, Location],
    *,
    warehouse_only: bool = False,
) -> list[StayRecord]:
    """Closed stays between consecutive movements of each COW.

    The stay location is the destination of the earlier movement. Any location
    found in the directory counts unless ``warehouse_only`` is set, in which case
    it must qualify as a warehouse. The last movement of a COW never closes a stay.
    """

    stays: list[StayRecord] = []
    for cow_id, cow_movements in group_by_cow(movements).items():
        for current, following in pairwise(cow_movements):
            location = locations.get(current.to_location_id)
            if location is None:
                continue
            if warehouse_only and not location.is_warehouse:
                continue
            stay_days = positive_days_between(current.reached_datetime, following.moved_datetime)
            if stay_days is None:
                continue
            stays.append(
                StayRecord(
                    cow_id=cow_id,
                    warehouse_name=location.location_name,
                    stay_days=round2(stay_days),
                    arrival_date=iso_date(current.reached_datetime),
                    departure_date=iso_date(following.moved_datetime),
                )
            )
    return stays


def _ranked(totals: dict[str, float], limit: int | None = None) -> list[NamedTotal]:
    # Stable sort: equal totals keep first-seen order.
    ranked = sorted(totals.items(), key=lambda item: -item[1])
    if limit is not None:
        ranked = ranked[: max(limit, 0)]
    return [NamedTotal(name=name, value=round2(value)) for name, value in ranked]


def calculate_warehouse_dwell_times(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    *,
    top_n: int = 10,
    warehouse_only: bool = False,
) -> DwellTimeSummary:
    stays = collect_stays(movements, build_location_lookup(locations), warehouse_only=warehouse_only)

    cow_totals: dict[str, float] = {}
    warehouse_totals: dict[str, float] = {}
    warehouse_counts: dict[str, int] = {}
    for stay in stays:
        cow_totals[stay.cow_id] = cow_totals.get(stay.cow_id, 0.0) + stay.stay_days
        warehouse_totals[stay.warehouse_name] = warehouse_totals.get(stay.warehouse_name, 0.0) + stay.stay_days
        warehouse_counts[stay.warehouse_name] = warehouse_counts.get(stay.warehouse_name, 0) + 1

    warehouse_averages = {
        name: total / warehouse_counts[name] for name, total in warehouse_totals.items()
    }

    return DwellTimeSummary(
        stays=stays,
        top_cows=_ranked(cow_totals, top_n),
        avg_stay_per_warehouse=_ranked(warehouse_averages),
        top_warehouses=_ranked(warehouse_totals, top_n),
    )
