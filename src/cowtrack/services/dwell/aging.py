"""Off-air warehouse aging: idle time accumulated by COWs parked at warehouses.

Only Half and Zero movements take part, since by classification at least one of
their endpoints is a warehouse. For every COW the off-air movements are ordered
by departure time; the destination of each movement is the parking location and
the gap until the next off-air departure is its idle time. Idle time counts only
when the parking location qualifies as a warehouse and the gap is positive.
COWs that never accumulate idle time are left out of every result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import pairwise
from typing import Iterable, Mapping, Optional

from ...models.domain import (
    OFF_AIR_MOVEMENT_TYPES,
    BucketCount,
    CowOffAirDetails,
    Location,
    Movement,
    OffAirAgingResult,
    OffAirAgingRow,
    OffAirStay,
    ShortIdleResult,
)
from ..classification import build_location_lookup
from ..durations import group_by_cow, iso_date, positive_days_between, round2
from .policy import OFF_AIR_AGING_POLICY, SHORT_IDLE_POLICY, AgingPolicy


@dataclass(slots=True)
class CowIdleLedger:
    """Idle time accumulated by one COW over its off-air movements."""

    cow_id: str
    movement_count: int
    total_idle_days: float = 0.0
    idle_by_warehouse: dict[str, float] = field(default_factory=dict)
    stays: list[OffAirStay] = field(default_factory=list)

    @property
    def top_warehouse(self) -> str:
        if not self.idle_by_warehouse:
            return ""
        # max() keeps the first-seen warehouse on ties
        return max(self.idle_by_warehouse.items(), key=lambda item: item[1])[0]

    @property
    def avg_idle_days(self) -> float:
        if self.movement_count <= 1:
            return 0.0
        return self.total_idle_days / (self.movement_count - 1)


def _location_label(locations: Mapping[str, Location], location_id: str) -> str:
    location = locations.get(location_id)
    return location.location_name if location is not None else location_id


def build_idle_ledgers(
    movements: Iterable[Movement],
    locations: Mapping[str, Location],
) -> dict[str, CowIdleLedger]:
    """Per-COW idle ledgers for every COW with at least one off-air movement."""

    off_air = [m for m in movements if m.movement_type in OFF_AIR_MOVEMENT_TYPES]
    ledgers: dict[str, CowIdleLedger] = {}
    for cow_id, cow_movements in group_by_cow(off_air).items():
        ledger = CowIdleLedger(cow_id=cow_id, movement_count=len(cow_movements))
        for current, following in pairwise(cow_movements):
            parking = locations.get(current.to_location_id)
            if parking is None or not parking.is_warehouse:
                continue
            idle_days = positive_days_between(current.reached_datetime, following.moved_datetime)
            if idle_days is None:
                continue
            ledger.total_idle_days += idle_days
            name = parking.location_name
            ledger.idle_by_warehouse[name] = ledger.idle_by_warehouse.get(name, 0.0) + idle_days
            ledger.stays.append(
                OffAirStay(
                    from_location=_location_label(locations, current.from_location_id),
                    to_warehouse=name,
                    idle_start_date=iso_date(current.reached_datetime),
                    idle_end_date=iso_date(following.moved_datetime),
                    idle_days=round2(idle_days),
                )
            )
        ledgers[cow_id] = ledger
    return ledgers


def _bucketize(
    values: Mapping[str, float],
    policy: AgingPolicy,
) -> tuple[list[BucketCount], dict[str, list[str]]]:
    bucket_cows: dict[str, list[str]] = {label: [] for label in policy.labels}
    for cow_id, value in values.items():
        label = policy.bucket_for(value)
        if label is not None:
            bucket_cows[label].append(cow_id)
    counts = [BucketCount(name=label, value=len(cow_ids)) for label, cow_ids in bucket_cows.items()]
    return counts, bucket_cows


def calculate_off_air_warehouse_aging(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    *,
    policy: AgingPolicy = OFF_AIR_AGING_POLICY,
) -> OffAirAgingResult:
    """Bucket COWs by total idle months spent at warehouses while off-air."""

    ledgers = build_idle_ledgers(movements, build_location_lookup(locations))
    aged = [ledger for ledger in ledgers.values() if ledger.total_idle_days > 0]

    # Buckets use the published 2 dp value.
    months = {ledger.cow_id: round2(policy.to_units(ledger.total_idle_days)) for ledger in aged}
    buckets, bucket_cows = _bucketize(months, policy)

    table = [
        OffAirAgingRow(
            cow_id=ledger.cow_id,
            total_movements=ledger.movement_count,
            avg_idle_days=round2(ledger.avg_idle_days),
            top_warehouse=ledger.top_warehouse,
        )
        for ledger in aged
    ]
    table.sort(key=lambda row: -row.avg_idle_days)

    return OffAirAgingResult(
        buckets=buckets,
        table=table,
        cow_aging_months=months,
        bucket_cows=bucket_cows,
    )


def calculate_short_idle_time(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    *,
    policy: AgingPolicy = SHORT_IDLE_POLICY,
) -> ShortIdleResult:
    """Same ledgers as the aging view, bucketed by raw idle days into narrow bands.

    COWs whose total lies beyond the last band are not reported.
    """

    ledgers = build_idle_ledgers(movements, build_location_lookup(locations))
    idle_days = {
        ledger.cow_id: round2(policy.to_units(ledger.total_idle_days))
        for ledger in ledgers.values()
        if ledger.total_idle_days > 0
    }
    buckets, bucket_cows = _bucketize(idle_days, policy)
    reported = {cow_id for cow_ids in bucket_cows.values() for cow_id in cow_ids}
    return ShortIdleResult(
        buckets=buckets,
        cow_idle_days={cow_id: days for cow_id, days in idle_days.items() if cow_id in reported},
        bucket_cows=bucket_cows,
    )


def get_cow_off_air_details(
    cow_id: str,
    movements: Iterable[Movement],
    locations: Iterable[Location],
) -> Optional[CowOffAirDetails]:
    """Drill-down for one COW; None when it has no off-air movements."""

    cow_movements = [m for m in movements if m.cow_id == cow_id]
    ledger = build_idle_ledgers(cow_movements, build_location_lookup(locations)).get(cow_id)
    if ledger is None:
        return None
    return CowOffAirDetails(
        cow_id=cow_id,
        total_movements=ledger.movement_count,
        total_idle_days=round2(ledger.total_idle_days),
        avg_idle_days=round2(ledger.avg_idle_days),
        top_warehouse=ledger.top_warehouse,
        stays=list(ledger.stays),
    )
