from datetime import datetime, timedelta, timezone

import pytest

from src.cowtrack.models.domain import Location, Movement
from src.cowtrack.services.classification import build_location_lookup, enrich_movements
from src.cowtrack.services.dwell import (
    OFF_AIR_AGING_POLICY,
    SHORT_IDLE_POLICY,
    AgingPolicy,
    Band,
    calculate_off_air_warehouse_aging,
    calculate_short_idle_time,
    calculate_warehouse_dwell_times,
    collect_stays,
    get_cow_off_air_details,
)

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _day(offset: float) -> datetime:
    return START + timedelta(days=offset)


def _location(location_id: str, location_type: str = "Site") -> Location:
    return Location(
        location_id=location_id,
        location_name=location_id,
        region="CENTRAL",
        location_type=location_type,
        latitude=24.7,
        longitude=46.6,
    )


def _movement(
    sn: int,
    cow_id: str,
    from_id: str,
    to_id: str,
    moved: float,
    reached: float,
    movement_type: str | None = None,
) -> Movement:
    return Movement(
        sn=sn,
        cow_id=cow_id,
        from_location_id=from_id,
        to_location_id=to_id,
        moved_datetime=_day(moved),
        reached_datetime=_day(reached),
        movement_type=movement_type,
    )


@pytest.fixture
def locations() -> list[Location]:
    return [
        _location("WH-A", "Warehouse"),
        _location("WH-B", "Warehouse"),
        _location("S-1"),
        _location("S-2"),
    ]


def test_round_trip_records_stay_at_site(locations):
    movements = [
        _movement(1, "C1", "WH-A", "S-1", 0, 1),
        _movement(2, "C1", "S-1", "WH-A", 9, 10),
    ]

    summary = calculate_warehouse_dwell_times(movements, locations)

    assert len(summary.stays) == 1
    stay = summary.stays[0]
    assert (stay.cow_id, stay.warehouse_name, stay.stay_days) == ("C1", "S-1", 8.0)
    assert (stay.arrival_date, stay.departure_date) == ("2024-01-02", "2024-01-10")


def test_warehouse_only_drops_site_stays(locations):
    movements = [
        _movement(1, "C1", "WH-A", "S-1", 0, 1),
        _movement(2, "C1", "S-1", "WH-A", 9, 10),
        _movement(3, "C1", "WH-A", "S-2", 15, 16),
    ]

    loose = calculate_warehouse_dwell_times(movements, locations)
    strict = calculate_warehouse_dwell_times(movements, locations, warehouse_only=True)

    assert [s.warehouse_name for s in loose.stays] == ["S-1", "WH-A"]
    assert [s.warehouse_name for s in strict.stays] == ["WH-A"]
    assert strict.stays[0].stay_days == 5.0


@pytest.mark.parametrize("count", [1, 2, 5])
def test_stays_close_only_inner_intervals(locations, count):
    movements = [_movement(i, "C1", "S-1", "S-2", i * 3, i * 3 + 1) for i in range(count)]

    stays = collect_stays(movements, build_location_lookup(locations))

    assert len(stays) == count - 1


def test_negative_gap_is_not_a_stay(locations):
    movements = [
        _movement(1, "C1", "WH-A", "S-1", 0, 5),
        _movement(2, "C1", "S-1", "WH-A", 3, 6),
    ]

    assert collect_stays(movements, build_location_lookup(locations)) == []


def test_unknown_stay_location_is_skipped(locations):
    movements = [
        _movement(1, "C1", "WH-A", "GHOST", 0, 1),
        _movement(2, "C1", "GHOST", "WH-A", 4, 5),
    ]

    assert collect_stays(movements, build_location_lookup(locations)) == []


def test_dwell_rankings(locations):
    movements = [
        _movement(1, "C1", "S-1", "WH-A", 0, 1),
        _movement(2, "C1", "WH-A", "S-1", 5, 6),
        _movement(3, "C2", "S-1", "WH-A", 0, 1),
        _movement(4, "C2", "WH-A", "S-1", 3, 4),
        _movement(5, "C3", "S-2", "WH-B", 0, 1),
        _movement(6, "C3", "WH-B", "S-2", 11, 12),
    ]

    summary = calculate_warehouse_dwell_times(movements, locations, top_n=2)

    assert [(c.name, c.value) for c in summary.top_cows] == [("C3", 10.0), ("C1", 4.0)]
    assert [(w.name, w.value) for w in summary.top_warehouses] == [("WH-B", 10.0), ("WH-A", 6.0)]
    assert [(w.name, w.value) for w in summary.avg_stay_per_warehouse] == [("WH-B", 10.0), ("WH-A", 3.0)]


def test_policy_bands_are_upper_inclusive():
    assert OFF_AIR_AGING_POLICY.labels == [
        "0-3 Months",
        "4-6 Months",
        "7-9 Months",
        "10-12 Months",
        "12+ Months",
    ]
    assert OFF_AIR_AGING_POLICY.bucket_for(3.0) == "0-3 Months"
    assert OFF_AIR_AGING_POLICY.bucket_for(3.01) == "4-6 Months"
    assert OFF_AIR_AGING_POLICY.bucket_for(12.0) == "10-12 Months"
    assert OFF_AIR_AGING_POLICY.bucket_for(40.0) == "12+ Months"
    assert OFF_AIR_AGING_POLICY.to_units(90.0) == 3.0
    assert SHORT_IDLE_POLICY.bucket_for(15.5) is None


def test_custom_policy():
    policy = AgingPolicy(bands=(Band("short", 1), Band("long", None)), days_per_unit=7.0)

    assert policy.bucket_for(policy.to_units(7.0)) == "short"
    assert policy.bucket_for(policy.to_units(7.5)) == "long"


@pytest.fixture
def off_air_batch(locations) -> list[Movement]:
    return enrich_movements(
        [
            # C1: 120 days at WH-A (4 months) then 30 at WH-B
            _movement(1, "C1", "S-1", "WH-A", 0, 1),
            _movement(2, "C1", "WH-A", "WH-B", 121, 122),
            _movement(3, "C1", "WH-B", "S-1", 152, 153),
            # C2: 10 days at WH-A
            _movement(4, "C2", "S-2", "WH-A", 0, 1),
            _movement(5, "C2", "WH-A", "S-2", 11, 12),
            # C3: only Full moves, never off-air
            _movement(6, "C3", "S-1", "S-2", 0, 1),
            _movement(7, "C3", "S-2", "S-1", 20, 21),
            # C4: overlapping dates only, never ages
            _movement(8, "C4", "S-1", "WH-B", 0, 5),
            _movement(9, "C4", "WH-B", "S-1", 2, 3),
        ],
        locations,
    )


def test_off_air_aging_partition(off_air_batch, locations):
    result = calculate_off_air_warehouse_aging(off_air_batch, locations)

    assert set(result.cow_aging_months) == {"C1", "C2"}
    assert result.cow_aging_months == {"C1": 5.0, "C2": 0.33}
    bucketed = [cow for cows in result.bucket_cows.values() for cow in cows]
    assert sorted(bucketed) == ["C1", "C2"]
    assert sum(bucket.value for bucket in result.buckets) == len(result.cow_aging_months)
    assert result.bucket_cows["0-3 Months"] == ["C2"]
    assert result.bucket_cows["4-6 Months"] == ["C1"]
    assert [bucket.name for bucket in result.buckets] == OFF_AIR_AGING_POLICY.labels


def test_off_air_aging_table(off_air_batch, locations):
    table = calculate_off_air_warehouse_aging(off_air_batch, locations).table

    assert [row.cow_id for row in table] == ["C1", "C2"]
    c1 = table[0]
    assert c1.total_movements == 3
    assert c1.avg_idle_days == 75.0
    assert c1.top_warehouse == "WH-A"


def test_off_air_ignores_site_parking(locations):
    movements = enrich_movements(
        [
            _movement(1, "C1", "WH-A", "S-1", 0, 1),
            _movement(2, "C1", "S-1", "WH-A", 40, 41),
        ],
        locations,
    )

    result = calculate_off_air_warehouse_aging(movements, locations)

    assert result.table == []
    assert all(bucket.value == 0 for bucket in result.buckets)


def test_short_idle_buckets(off_air_batch, locations):
    result = calculate_short_idle_time(off_air_batch, locations)

    assert [(b.name, b.value) for b in result.buckets] == [
        ("1-5 Days", 0),
        ("6-10 Days", 1),
        ("11-15 Days", 0),
    ]
    assert result.bucket_cows["6-10 Days"] == ["C2"]
    assert result.cow_idle_days == {"C2": 10.0}


def test_cow_off_air_details(off_air_batch, locations):
    details = get_cow_off_air_details("C1", off_air_batch, locations)

    assert details is not None
    assert details.total_movements == 3
    assert details.total_idle_days == 150.0
    assert details.top_warehouse == "WH-A"
    assert [(s.from_location, s.to_warehouse, s.idle_days) for s in details.stays] == [
        ("S-1", "WH-A", 120.0),
        ("WH-A", "WH-B", 30.0),
    ]
    assert details.stays[0].idle_start_date == "2024-01-02"
    assert details.stays[0].off_air_status == "Off-Air"


def test_cow_off_air_details_missing(off_air_batch, locations):
    assert get_cow_off_air_details("C3", off_air_batch, locations) is None
    assert get_cow_off_air_details("NOPE", off_air_batch, locations) is None


def test_aging_bucket_matches_published_months(locations):
    movements = enrich_movements(
        [
            _movement(1, "C1", "S-1", "WH-A", 0, 1),
            _movement(2, "C1", "WH-A", "S-1", 91.1, 92),
        ],
        locations,
    )

    result = calculate_off_air_warehouse_aging(movements, locations)

    # 90.1 idle days is 3.0033 months, published and bucketed as 3.0
    assert result.cow_aging_months == {"C1": 3.0}
    assert result.bucket_cows["0-3 Months"] == ["C1"]
    assert result.bucket_cows["4-6 Months"] == []
