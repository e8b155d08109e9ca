from datetime import datetime, timezone

import pytest

from src.cowtrack.models.domain import Location, Movement
from src.cowtrack.services.filters import filter_movements
from src.cowtrack.services.rollups import (
    calculate_all_events_total_movements,
    calculate_ebu_royal_breakdown,
    calculate_top_events,
    calculate_top_vendors,
)


def _movement(
    sn: int,
    top_event: str | None = None,
    to_sub_location: str | None = None,
    vendor: str | None = None,
    ebu_royal: str = "NON EBU",
    cow_id: str = "C1",
    to_id: str = "S-1",
    moved: datetime | None = None,
    movement_type: str | None = "Full",
) -> Movement:
    return Movement(
        sn=sn,
        cow_id=cow_id,
        from_location_id="WH-A",
        to_location_id=to_id,
        moved_datetime=moved or datetime(2024, 3, 1, tzinfo=timezone.utc),
        reached_datetime=moved or datetime(2024, 3, 2, tzinfo=timezone.utc),
        movement_type=movement_type,
        top_event=top_event,
        to_sub_location=to_sub_location,
        vendor=vendor,
        ebu_royal_category=ebu_royal,
    )


def test_stoplist_only_batch_yields_nothing():
    movements = [
        _movement(1, top_event="Others"),
        _movement(2, top_event="WH"),
        _movement(3, top_event=""),
        _movement(4, top_event="#N/A"),
        _movement(5, top_event=" others "),
        _movement(6, top_event="wh"),
    ]

    assert calculate_top_events(movements) == []
    assert calculate_all_events_total_movements(movements) == 0


def test_top_events_merge_case_and_fall_back_to_sub_location():
    movements = [
        _movement(1, top_event="Hajj"),
        _movement(2, top_event="HAJJ"),
        _movement(3, top_event=None, to_sub_location="Riyadh Season"),
        _movement(4, top_event="Ramadan"),
        _movement(5, top_event="Others"),
    ]

    top = calculate_top_events(movements, limit=2)

    assert [(e.name, e.count, e.percentage) for e in top] == [("Hajj", 2, 50.0), ("Riyadh Season", 1, 25.0)]
    assert calculate_all_events_total_movements(movements) == 4


def test_top_vendors_skip_blank():
    movements = [
        _movement(1, vendor="Ericsson"),
        _movement(2, vendor="ericsson "),
        _movement(3, vendor="Nokia"),
        _movement(4, vendor="  "),
        _movement(5, vendor=None),
    ]

    top = calculate_top_vendors(movements)

    assert [(v.name, v.count) for v in top] == [("Ericsson", 2), ("Nokia", 1)]
    assert top[0].percentage == pytest.approx(66.7)


def test_ebu_royal_breakdown_covers_all_categories():
    movements = [
        _movement(1, ebu_royal="ROYAL"),
        _movement(2, ebu_royal="EBU"),
        _movement(3, ebu_royal="EBU"),
        _movement(4),
    ]

    breakdown = calculate_ebu_royal_breakdown(movements)

    assert [(b.name, b.count, b.percentage) for b in breakdown] == [
        ("ROYAL", 1, 25.0),
        ("EBU", 2, 50.0),
        ("NON EBU", 1, 25.0),
    ]
    assert all(b.count == 0 for b in calculate_ebu_royal_breakdown([]))


def test_filter_movements():
    locations = [
        Location("S-1", "S-1", "WEST", "Site", 21.5, 39.2),
        Location("S-2", "S-2", "EAST", "Site", 26.4, 50.1),
    ]
    movements = [
        _movement(1, vendor="Ericsson", to_id="S-1", moved=datetime(2023, 5, 1, tzinfo=timezone.utc)),
        _movement(2, vendor="Nokia", to_id="S-2", movement_type="Half"),
        _movement(3, vendor="ericsson", to_id="S-2"),
        _movement(4, vendor="Ericsson", to_id="GHOST"),
    ]

    assert [m.sn for m in filter_movements(movements, locations)] == [1, 2, 3, 4]
    assert [m.sn for m in filter_movements(movements, locations, year=2024)] == [2, 3, 4]
    assert [m.sn for m in filter_movements(movements, locations, region="east")] == [2, 3]
    assert [m.sn for m in filter_movements(movements, locations, movement_type="Half")] == [2]
    assert [m.sn for m in filter_movements(movements, locations, vendor="ERICSSON", year=2024)] == [3, 4]
