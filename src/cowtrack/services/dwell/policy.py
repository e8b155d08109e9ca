"""Bucketing policy for idle-time distributions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Fixed, non-calendar month used to turn idle days into aging months.
DAYS_PER_MONTH = 30.0


@dataclass(frozen=True, slots=True)
class Band:
    """A bucket holding values up to and including ``upper`` (no bound when None)."""

    label: str
    upper: Optional[float]


@dataclass(frozen=True, slots=True)
class AgingPolicy:
    """Ordered bands plus the divisor converting idle days into the band unit."""

    bands: tuple[Band, ...]
    days_per_unit: float = 1.0

    @property
    def labels(self) -> list[str]:
        return [band.label for band in self.bands]

    def to_units(self, idle_days: float) -> float:
        return idle_days / self.days_per_unit

    def bucket_for(self, value: float) -> Optional[str]:
        """Label of the first band whose upper bound is >= ``value``; None when past the last band."""

        for band in self.bands:
            if band.upper is None or value <= band.upper:
                return band.label
        return None


OFF_AIR_AGING_POLICY = AgingPolicy(
    bands=(
        Band("0-3 Months", 3),
        Band("4-6 Months", 6),
        Band("7-9 Months", 9),
        Band("10-12 Months", 12),
        Band("12+ Months", None),
    ),
    days_per_unit=DAYS_PER_MONTH,
)

SHORT_IDLE_POLICY = AgingPolicy(
    bands=(
        Band("1-5 Days", 5),
        Band("6-10 Days", 10),
        Band("11-15 Days", 15),
    ),
    days_per_unit=1.0,
)
