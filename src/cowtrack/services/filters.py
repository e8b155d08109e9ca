"""Dashboard filters applied to a movement batch before aggregation."""

from __future__ import annotations

from typing import Iterable, Optional

from ..models.domain import Location, Movement
from .classification import build_location_lookup


def filter_movements(
    movements: Iterable[Movement],
    locations: Iterable[Location],
    *,
    year: Optional[int] = None,
    region: Optional[str] = None,
    movement_type: Optional[str] = None,
    vendor: Optional[str] = None,
) -> list[Movement]:
    """Keep movements matching every supplied filter.

    ``year`` matches the departure year, ``region`` the destination region and
    ``vendor`` is compared case-insensitively. Unset filters match everything.
    """

    lookup = build_location_lookup(locations)
    normalized_region = region.strip().upper() if region else None
    normalized_vendor = vendor.strip().lower() if vendor else None

    results: list[Movement] = []
    for movement in movements:
        if year is not None:
            if movement.moved_datetime is None or movement.moved_datetime.year != year:
                continue
        if normalized_region:
            destination = lookup.get(movement.to_location_id)
            if destination is None or destination.region.upper() != normalized_region:
                continue
        if movement_type and movement.movement_type != movement_type:
            continue
        if normalized_vendor and (movement.vendor or "").strip().lower() != normalized_vendor:
            continue
        results.append(movement)
    return results
