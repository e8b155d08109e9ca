"""Movement classification and enrichment."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from ..models.domain import Location, Movement, MovementType


def build_location_lookup(locations: Iterable[Location]) -> dict[str, Location]:
    """Index locations by id. Later duplicates replace earlier ones."""

    return {location.location_id: location for location in locations}


def is_warehouse_location(location: Location | None) -> bool:
    return location is not None and location.is_warehouse


def classify_movement(movement: Movement, locations: Mapping[str, Location]) -> MovementType:
    """Classify a movement as Full, Half or Zero from its endpoint location types.

    Site to Site is a Full move, a move with exactly one warehouse endpoint is Half,
    and Warehouse to Warehouse is Zero. An endpoint missing from the directory
    makes the movement Zero.
    """

    from_location = locations.get(movement.from_location_id)
    to_location = locations.get(movement.to_location_id)
    if from_location is None or to_location is None:
        return "Zero"

    from_is_warehouse = from_location.location_type == "Warehouse"
    to_is_warehouse = to_location.location_type == "Warehouse"

    if not from_is_warehouse and not to_is_warehouse:
        return "Full"
    if from_is_warehouse != to_is_warehouse:
        return "Half"
    return "Zero"


def enrich_movements(movements: Sequence[Movement], locations: Iterable[Location]) -> list[Movement]:
    """Return copies of ``movements`` with ``movement_type`` filled in.

    A type already present on the record comes from the source sheet and is kept.
    ``distance_km`` is passed through untouched.
    """

    lookup = build_location_lookup(locations)
    enriched: list[Movement] = []
    for movement in movements:
        movement_type = movement.movement_type or classify_movement(movement, lookup)
        enriched.append(replace(movement, movement_type=movement_type))
    return enriched
