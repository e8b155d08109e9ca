"""Analytics API schemas."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel


class KpiResponse(BaseModel):
    totalCows: int
    totalMovements: int
    totalDistanceKm: float
    activeCows: int
    staticCows: int
    avgMovesPerCow: float


class MovementMixModel(BaseModel):
    Full: int = 0
    Half: int = 0
    Zero: int = 0


class CowMetricsModel(BaseModel):
    cowId: str
    totalMovements: int
    totalDistanceKm: float
    avgDistancePerMove: float
    movementMix: MovementMixModel
    avgIdleDurationDays: float
    isStatic: bool
    lastMovementDate: str | None = None
    regionsServed: List[str]


class RegionCountModel(BaseModel):
    region: str
    count: int


class WarehouseMetricsModel(BaseModel):
    locationId: str
    locationName: str
    region: str
    outgoingMovements: int
    avgOutgoingDistance: float
    topRegionsServed: List[RegionCountModel]
    incomingMovements: int
    avgIncomingDistance: float
    idleAccumulationDays: float


class RegionMetricsModel(BaseModel):
    region: str
    totalCowsDeployed: int
    activeCows: int
    staticCows: int
    crossRegionMovements: int
    totalDistanceKm: float
    avgDeploymentDurationDays: float


class StayModel(BaseModel):
    cowId: str
    warehouseName: str
    stayDays: float
    arrivalDate: str
    departureDate: str


class NamedValueModel(BaseModel):
    name: str
    value: float


class DwellTimeResponse(BaseModel):
    stays: List[StayModel]
    topCows: List[NamedValueModel]
    avgStayPerWarehouse: List[NamedValueModel]
    topWarehouses: List[NamedValueModel]


class BucketModel(BaseModel):
    name: str
    value: int


class OffAirAgingRowModel(BaseModel):
    cowId: str
    totalMovements: int
    avgIdleDays: float
    topWarehouse: str


class OffAirAgingResponse(BaseModel):
    buckets: List[BucketModel]
    table: List[OffAirAgingRowModel]
    cowAgingMonths: Dict[str, float]
    bucketCows: Dict[str, List[str]]


class ShortIdleResponse(BaseModel):
    buckets: List[BucketModel]
    cowIdleDays: Dict[str, float]
    bucketCows: Dict[str, List[str]]


class OffAirStayModel(BaseModel):
    fromLocation: str
    toWarehouse: str
    idleStartDate: str
    idleEndDate: str
    idleDays: float
    offAirStatus: str


class CowOffAirDetailsResponse(BaseModel):
    cowId: str
    totalMovements: int
    totalIdleDays: float
    avgIdleDays: float
    topWarehouse: str
    stays: List[OffAirStayModel]


class RankedEntryModel(BaseModel):
    name: str
    count: int
    percentage: float


class TopEventsResponse(BaseModel):
    items: List[RankedEntryModel]
    totalMovements: int


class TopVendorsResponse(BaseModel):
    items: List[RankedEntryModel]


class EbuRoyalResponse(BaseModel):
    items: List[RankedEntryModel]
    totalMovements: int


class MovementFlowModel(BaseModel):
    fromLocationId: str
    fromLocation: str
    toLocationId: str
    toLocation: str
    count: int
    cowIds: List[str]


class MapPointModel(BaseModel):
    locationId: str
    name: str
    lat: float
    lon: float
    value: int


class FlowsResponse(BaseModel):
    flows: List[MovementFlowModel]
    origins: List[MapPointModel]
    destinations: List[MapPointModel]


class DistanceBreakdownResponse(BaseModel):
    totalDistanceKm: float
    avgDistancePerMovement: float
    byYear: List[NamedValueModel]
    byRegion: List[NamedValueModel]
    byVendor: List[NamedValueModel]


class ReloadResponse(BaseModel):
    source: str
    totalMovements: int
    totalLocations: int
    totalCows: int
