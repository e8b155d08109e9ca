from datetime import datetime, timezone

import pytest

from src.cowtrack.models.domain import CowMetrics, Location, Movement
from src.cowtrack.services.classification import enrich_movements
from src.cowtrack.services.metrics import (
    calculate_all_cow_metrics,
    calculate_all_region_metrics,
    calculate_all_warehouse_metrics,
    calculate_cow_metrics,
    calculate_kpis,
    calculate_region_metrics,
    calculate_warehouse_metrics,
)


def _at(day: int, hour: int = 0) -> datetime:
    return datetime(2024, 1, day, hour, tzinfo=timezone.utc)


def _location(location_id: str, region: str, location_type: str = "Site") -> Location:
    return Location(
        location_id=location_id,
        location_name=location_id,
        region=region,
        location_type=location_type,
        latitude=24.7,
        longitude=46.6,
    )


def _movement(
    sn: int,
    cow_id: str,
    from_id: str,
    to_id: str,
    moved: datetime | None,
    reached: datetime | None,
    distance: float = 0.0,
    movement_type: str | None = None,
) -> Movement:
    return Movement(
        sn=sn,
        cow_id=cow_id,
        from_location_id=from_id,
        to_location_id=to_id,
        moved_datetime=moved,
        reached_datetime=reached,
        movement_type=movement_type,
        distance_km=distance,
    )


@pytest.fixture
def locations() -> list[Location]:
    return [
        _location("WH-A", "CENTRAL", "Warehouse"),
        _location("S-1", "WEST"),
        _location("S-2", "EAST"),
        _location("Bajda WH", "NORTH"),
    ]


def test_cow_metrics_round_trip(locations):
    movements = enrich_movements(
        [
            _movement(1, "C1", "WH-A", "S-1", _at(1), _at(2), distance=100.0),
            _movement(2, "C1", "S-1", "WH-A", _at(10), _at(11), distance=101.0),
        ],
        locations,
    )

    metrics = calculate_cow_metrics("C1", movements, locations)

    assert metrics.total_movements == 2
    assert metrics.movement_mix == {"Full": 0, "Half": 2, "Zero": 0}
    assert metrics.is_static is False
    assert metrics.total_distance_km == 201.0
    assert metrics.avg_distance_per_move == 100.5
    assert metrics.avg_idle_duration_days == 8.0
    assert metrics.regions_served == ["WEST", "CENTRAL"]
    assert metrics.last_movement_date == "2024-01-11"


def test_cow_metrics_sorts_and_ignores_negative_idle(locations):
    movements = [
        _movement(2, "C1", "S-1", "S-2", _at(3), _at(6), movement_type="Full"),
        _movement(1, "C1", "WH-A", "S-1", _at(1), _at(4), movement_type="Half"),
    ]

    metrics = calculate_cow_metrics("C1", movements, locations)

    # reached on the 4th, next departure on the 3rd: overlap is not idle time
    assert metrics.avg_idle_duration_days == 0.0
    assert metrics.regions_served == ["WEST", "EAST"]


def test_single_movement_cow_is_static(locations):
    metrics = calculate_cow_metrics(
        "C9", [_movement(1, "C9", "WH-A", "S-1", _at(1), _at(2), movement_type="Half")], locations
    )

    assert metrics.is_static is True
    assert metrics.avg_idle_duration_days == 0.0


def test_all_cow_metrics_first_seen_order(locations):
    movements = [
        _movement(1, "C2", "WH-A", "S-1", _at(1), _at(2)),
        _movement(2, "C1", "WH-A", "S-2", _at(1), _at(2)),
        _movement(3, "C2", "S-1", "WH-A", _at(5), _at(6)),
    ]

    results = calculate_all_cow_metrics(movements, locations)

    assert [m.cow_id for m in results] == ["C2", "C1"]
    assert [m.is_static for m in results] == [False, True]


def test_warehouse_metrics_counts_and_idle(locations):
    movements = [
        _movement(1, "C1", "WH-A", "S-1", _at(1), _at(2), distance=50.0),
        _movement(2, "C1", "S-1", "WH-A", _at(4), _at(5), distance=70.0),
        _movement(3, "C1", "WH-A", "S-2", _at(8), _at(9), distance=30.0),
        _movement(4, "C2", "WH-A", "S-1", _at(2), _at(3), distance=40.0),
    ]

    metrics = calculate_warehouse_metrics("WH-A", movements, locations)

    assert metrics is not None
    assert metrics.outgoing_movements == 3
    assert metrics.incoming_movements == 1
    assert metrics.avg_outgoing_distance == 40.0
    assert metrics.avg_incoming_distance == 70.0
    assert [(r.region, r.count) for r in metrics.top_regions_served] == [("WEST", 2), ("EAST", 1)]
    # arrived on the 5th, next departure of the same COW on the 8th
    assert metrics.idle_accumulation_days == 3.0


def test_warehouse_metrics_rejects_sites_and_unknown(locations):
    assert calculate_warehouse_metrics("S-1", [], locations) is None
    assert calculate_warehouse_metrics("NOPE", [], locations) is None


def test_all_warehouse_metrics_applies_exclusions(locations):
    movements = [_movement(1, "C1", "Bajda WH", "S-1", _at(1), _at(2))]

    names = [m.location_name for m in calculate_all_warehouse_metrics(movements, locations)]
    trimmed = calculate_all_warehouse_metrics(movements, locations, excluded_names=("Bajda WH",))

    assert names == ["Bajda WH", "WH-A"]
    assert [m.location_name for m in trimmed] == ["WH-A"]


def test_region_metrics_counts_deployments(locations):
    movements = [
        _movement(1, "C1", "WH-A", "S-1", _at(1), _at(3), distance=900.0, movement_type="Half"),
        _movement(2, "C2", "S-2", "S-1", _at(2), _at(4), distance=1200.0, movement_type="Full"),
        _movement(3, "C2", "S-1", "S-2", _at(6), _at(7), distance=1200.0, movement_type="Full"),
    ]
    cow_metrics = calculate_all_cow_metrics(movements, locations)

    west = calculate_region_metrics("WEST", movements, locations, cow_metrics)

    assert west.total_cows_deployed == 2
    assert west.static_cows == 1
    assert west.active_cows == 1
    assert west.cross_region_movements == 3
    assert west.total_distance_km == 3300.0
    assert west.avg_deployment_duration_days == 1.5


def test_region_deployment_duration_keeps_negative_values(locations):
    movements = [
        _movement(1, "C1", "S-1", "S-1", _at(5), _at(3), movement_type="Full"),
        _movement(2, "C1", "S-1", "S-1", _at(6), _at(7), movement_type="Full"),
    ]

    west = calculate_region_metrics("WEST", movements, locations, [])

    # (-2 + 1) / 2, whereas idle-time averages would drop the negative gap
    assert west.avg_deployment_duration_days == -0.5
    assert west.cross_region_movements == 0
    assert west.active_cows == 1


def test_all_region_metrics_sorted_by_name(locations):
    regions = calculate_all_region_metrics([], locations, [])

    assert [r.region for r in regions] == ["CENTRAL", "EAST", "NORTH", "WEST"]
    assert all(r.total_cows_deployed == 0 for r in regions)


def test_kpis_summary(locations):
    movements = [
        _movement(1, "C1", "WH-A", "S-1", _at(1), _at(2), distance=10.0),
        _movement(2, "C1", "S-1", "WH-A", _at(3), _at(4), distance=10.5),
        _movement(3, "C2", "WH-A", "S-2", _at(1), _at(2), distance=5.0),
    ]
    cow_metrics: list[CowMetrics] = calculate_all_cow_metrics(movements, locations)

    kpis = calculate_kpis(movements, cow_metrics)

    assert kpis.total_cows == 2
    assert kpis.total_movements == 3
    assert kpis.total_distance_km == 25.5
    assert (kpis.active_cows, kpis.static_cows) == (1, 1)
    assert kpis.avg_moves_per_cow == 1.5


def test_kpis_empty_batch():
    kpis = calculate_kpis([], [])

    assert kpis.total_cows == 0
    assert kpis.avg_moves_per_cow == 0.0
