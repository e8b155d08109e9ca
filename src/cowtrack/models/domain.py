"""Domain models for locations, COW movements and derived analytics records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, get_args

MovementType = Literal["Full", "Half", "Zero"]
LocationType = Literal["Site", "Warehouse"]
Region = Literal["CENTRAL", "WEST", "EAST", "SOUTH", "NORTH"]

MOVEMENT_TYPES: tuple[str, ...] = get_args(MovementType)
OFF_AIR_MOVEMENT_TYPES = frozenset({"Half", "Zero"})


@dataclass(slots=True)
class Location:
    """A deployment site or warehouse that COWs move between."""

    location_id: str
    location_name: str
    region: Region
    location_type: LocationType
    latitude: float
    longitude: float
    owner: str = "Unknown"
    sub_location: Optional[str] = None

    @property
    def is_warehouse(self) -> bool:
        """True when tagged as a warehouse or when the name carries a ``WH`` marker."""
        return self.location_type == "Warehouse" or "WH" in self.location_name.upper()


@dataclass(slots=True)
class Movement:
    """One relocation of a COW between two locations."""

    sn: int
    cow_id: str
    from_location_id: str
    to_location_id: str
    moved_datetime: Optional[datetime]
    reached_datetime: Optional[datetime]
    movement_type: Optional[MovementType] = None
    distance_km: float = 0.0
    top_event: Optional[str] = None
    from_sub_location: Optional[str] = None
    to_sub_location: Optional[str] = None
    vendor: Optional[str] = None
    ebu_royal_category: str = "NON EBU"


@dataclass(slots=True)
class CowMetrics:
    cow_id: str
    total_movements: int
    total_distance_km: float
    avg_distance_per_move: float
    movement_mix: dict[str, int]
    avg_idle_duration_days: float
    is_static: bool
    last_movement_date: Optional[str]
    regions_served: list[str]


@dataclass(slots=True)
class RegionCount:
    region: str
    count: int


@dataclass(slots=True)
class WarehouseMetrics:
    location_id: str
    location_name: str
    region: str
    outgoing_movements: int
    avg_outgoing_distance: float
    top_regions_served: list[RegionCount]
    incoming_movements: int
    avg_incoming_distance: float
    idle_accumulation_days: float


@dataclass(slots=True)
class RegionMetrics:
    region: str
    total_cows_deployed: int
    active_cows: int
    static_cows: int
    cross_region_movements: int
    total_distance_km: float
    avg_deployment_duration_days: float


@dataclass(slots=True)
class StayRecord:
    """A closed interval a COW spent at one location between two movements."""

    cow_id: str
    warehouse_name: str
    stay_days: float
    arrival_date: str
    departure_date: str


@dataclass(slots=True)
class NamedTotal:
    name: str
    value: float


@dataclass(slots=True)
class DwellTimeSummary:
    stays: list[StayRecord]
    top_cows: list[NamedTotal]
    avg_stay_per_warehouse: list[NamedTotal]
    top_warehouses: list[NamedTotal]


@dataclass(slots=True)
class BucketCount:
    """Chart pair for a bucketed distribution."""

    name: str
    value: int


@dataclass(slots=True)
class OffAirAgingRow:
    cow_id: str
    total_movements: int
    avg_idle_days: float
    top_warehouse: str


@dataclass(slots=True)
class OffAirAgingResult:
    buckets: list[BucketCount]
    table: list[OffAirAgingRow]
    cow_aging_months: dict[str, float]
    bucket_cows: dict[str, list[str]]


@dataclass(slots=True)
class ShortIdleResult:
    buckets: list[BucketCount]
    cow_idle_days: dict[str, float]
    bucket_cows: dict[str, list[str]]


@dataclass(slots=True)
class OffAirStay:
    from_location: str
    to_warehouse: str
    idle_start_date: str
    idle_end_date: str
    idle_days: float
    off_air_status: str = "Off-Air"


@dataclass(slots=True)
class CowOffAirDetails:
    cow_id: str
    total_movements: int
    total_idle_days: float
    avg_idle_days: float
    top_warehouse: str
    stays: list[OffAirStay] = field(default_factory=list)


@dataclass(slots=True)
class RankedEntry:
    """A frequency-ranked label with its share of the counted total."""

    name: str
    count: int
    percentage: float


@dataclass(slots=True)
class KpiSummary:
    total_cows: int
    total_movements: int
    total_distance_km: float
    active_cows: int
    static_cows: int
    avg_moves_per_cow: float


@dataclass(frozen=True, slots=True)
class Dataset:
    """Everything one load of the movement sheet yields."""

    movements: tuple[Movement, ...]
    locations: tuple[Location, ...]

    @property
    def cow_ids(self) -> list[str]:
        return list(dict.fromkeys(movement.cow_id for movement in self.movements))


@dataclass(slots=True)
class MovementFlow:
    """Movements along one origin to destination pair."""

    from_location_id: str
    from_location_name: str
    to_location_id: str
    to_location_name: str
    count: int
    cow_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class MapPoint:
    location_id: str
    location_name: str
    latitude: float
    longitude: float
    value: int


@dataclass(slots=True)
class FlowSummary:
    flows: list[MovementFlow]
    origins: list[MapPoint]
    destinations: list[MapPoint]


@dataclass(slots=True)
class DistanceBreakdown:
    total_distance_km: float
    avg_distance_per_movement: float
    by_year: list[NamedTotal]
    by_region: list[NamedTotal]
    by_vendor: list[NamedTotal]
