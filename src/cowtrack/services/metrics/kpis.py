"""Headline KPIs for the dashboard strip."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import CowMetrics, KpiSummary, Movement
from ..durations import round2


def calculate_kpis(movements: Sequence[Movement], cow_metrics: Sequence[CowMetrics]) -> KpiSummary:
    total_cows = len({movement.cow_id for movement in movements})
    total_movements = len(movements)
    total_distance = sum(movement.distance_km or 0.0 for movement in movements)
    static_cows = sum(1 for metrics in cow_metrics if metrics.is_static)
    active_cows = len(cow_metrics) - static_cows
    avg_moves = total_movements / total_cows if total_cows else 0.0
    return KpiSummary(
        total_cows=total_cows,
        total_movements=total_movements,
        total_distance_km=round2(total_distance),
        active_cows=active_cows,
        static_cows=static_cows,
        avg_moves_per_cow=round2(avg_moves),
    )
