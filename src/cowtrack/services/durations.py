"""Date arithmetic shared by the idle, stay and deployment calculations."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..models.domain import Movement

SECONDS_PER_DAY = 86_400.0


def days_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    """Return ``end - start`` in fractional days, or None when either side is unknown."""

    if start is None or end is None:
        return None
    return (end - start).total_seconds() / SECONDS_PER_DAY


def positive_days_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    """Like :func:`days_between` but drops zero and negative gaps."""

    days = days_between(start, end)
    if days is None or days <= 0:
        return None
    return days


def iso_date(value: Optional[datetime]) -> str:
    return value.date().isoformat() if value is not None else ""


def round2(value: float) -> float:
    return round(value, 2)


def safe_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _moved_sort_key(movement: Movement) -> tuple[bool, datetime]:
    # Undated movements sort last; ``sorted`` is stable so ties keep batch order.
    return (movement.moved_datetime is None, movement.moved_datetime or datetime.min)


def sort_by_moved(movements: Iterable[Movement]) -> list[Movement]:
    """Chronological order by departure time."""

    return sorted(movements, key=_moved_sort_key)


def group_by_cow(movements: Iterable[Movement]) -> dict[str, list[Movement]]:
    """Group movements per COW (first-seen order), each group sorted by departure time."""

    groups: dict[str, list[Movement]] = {}
    for movement in movements:
        groups.setdefault(movement.cow_id, []).append(movement)
    return {cow_id: sort_by_moved(items) for cow_id, items in groups.items()}
