"""Event and vendor rollups."""

from .events import (
    EVENT_STOPLIST,
    calculate_all_events_total_movements,
    calculate_ebu_royal_breakdown,
    calculate_top_events,
    calculate_top_vendors,
)

__all__ = [
    "EVENT_STOPLIST",
    "calculate_top_events",
    "calculate_all_events_total_movements",
    "calculate_top_vendors",
    "calculate_ebu_royal_breakdown",
]
