"""Frequency rollups over free-text event and vendor fields."""

from __future__ import annotations

from collections import Counter
from typing import Callable, Collection, Iterable, Optional

from ...models.domain import Movement, RankedEntry

# Placeholder values the sheet uses where no real event was recorded.
EVENT_STOPLIST = frozenset({"wh", "others", "other", "#n/a", ""})

EBU_ROYAL_CATEGORIES: tuple[str, ...] = ("ROYAL", "EBU", "NON EBU")


def event_label(movement: Movement) -> Optional[str]:
    """Event text of a movement: the top event when present, else the destination sub-location."""

    return movement.top_event or movement.to_sub_location


def _tally(
    movements: Iterable[Movement],
    extract: Callable[[Movement], Optional[str]],
    stoplist: Collection[str],
) -> tuple[Counter[str], dict[str, str]]:
    counts: Counter[str] = Counter()
    display: dict[str, str] = {}
    for movement in movements:
        raw = extract(movement)
        if raw is None:
            continue
        text = raw.strip()
        key = text.lower()
        if not key or key in stoplist:
            continue
        counts[key] += 1
        display.setdefault(key, text)
    return counts, display


def _rank(counts: Counter[str], display: dict[str, str], limit: int) -> list[RankedEntry]:
    total = sum(counts.values())
    entries: list[RankedEntry] = []
    for key, count in counts.most_common(max(limit, 0)):
        percentage = round(count / total * 100, 1) if total else 0.0
        entries.append(RankedEntry(name=display[key], count=count, percentage=percentage))
    return entries


def calculate_top_events(movements: Iterable[Movement], limit: int = 10) -> list[RankedEntry]:
    """Most frequent events, with each share taken over all non-placeholder events."""

    counts, display = _tally(movements, event_label, EVENT_STOPLIST)
    return _rank(counts, display, limit)


def calculate_all_events_total_movements(movements: Iterable[Movement]) -> int:
    """Movements carrying a real event, independent of the top-N cut."""

    counts, _ = _tally(movements, event_label, EVENT_STOPLIST)
    return sum(counts.values())


def calculate_top_vendors(movements: Iterable[Movement], limit: int = 10) -> list[RankedEntry]:
    counts, display = _tally(movements, lambda movement: movement.vendor, ())
    return _rank(counts, display, limit)


def calculate_ebu_royal_breakdown(movements: Iterable[Movement]) -> list[RankedEntry]:
    """Movement counts per EBU/Royal category, as shares of the whole batch."""

    batch = list(movements)
    counts = Counter(movement.ebu_royal_category for movement in batch)
    total = len(batch)
    return [
        RankedEntry(
            name=category,
            count=counts.get(category, 0),
            percentage=round(counts.get(category, 0) / total * 100, 1) if total else 0.0,
        )
        for category in EBU_ROYAL_CATEGORIES
    ]
