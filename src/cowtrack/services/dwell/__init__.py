"""Dwell-time and idle-aging engines."""

from .aging import (
    build_idle_ledgers,
    calculate_off_air_warehouse_aging,
    calculate_short_idle_time,
    get_cow_off_air_details,
)
from .policy import DAYS_PER_MONTH, OFF_AIR_AGING_POLICY, SHORT_IDLE_POLICY, AgingPolicy, Band
from .stays import calculate_warehouse_dwell_times, collect_stays

__all__ = [
    "AgingPolicy",
    "Band",
    "DAYS_PER_MONTH",
    "OFF_AIR_AGING_POLICY",
    "SHORT_IDLE_POLICY",
    "build_idle_ledgers",
    "calculate_off_air_warehouse_aging",
    "calculate_short_idle_time",
    "calculate_warehouse_dwell_times",
    "collect_stays",
    "get_cow_off_air_details",
]
