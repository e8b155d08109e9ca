"""Movement analytics endpoints."""

from __future__ import annotations

from typing import Any, Callable, List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ...config import settings
from ...data.sheets_client import SheetFetchError
from ...schemas.analytics import (
    CowMetricsModel,
    CowOffAirDetailsResponse,
    DistanceBreakdownResponse,
    DwellTimeResponse,
    EbuRoyalResponse,
    FlowsResponse,
    KpiResponse,
    OffAirAgingResponse,
    RegionMetricsModel,
    ReloadResponse,
    ShortIdleResponse,
    TopEventsResponse,
    TopVendorsResponse,
    WarehouseMetricsModel,
)
from ...services import dashboard
from ...services.dashboard import MovementFilters

router = APIRouter(prefix="/analytics", tags=["analytics"])


def movement_filters(
    year: int | None = Query(default=None, ge=1900, le=2100, description="Departure year"),
    region: str | None = Query(default=None, description="Destination region (CENTRAL, WEST, EAST, SOUTH, NORTH)"),
    movement_type: str | None = Query(
        default=None,
        alias="movementType",
        pattern="^(Full|Half|Zero)$",
        description="Movement type filter",
    ),
    vendor: str | None = Query(default=None, description="Case-insensitive vendor filter"),
) -> MovementFilters:
    return MovementFilters(year=year, region=region, movement_type=movement_type, vendor=vendor)


def _run(builder: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    try:
        return builder(*args, **kwargs)
    except (FileNotFoundError, ValueError, SheetFetchError) as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Movement data unavailable: {exc}",
        ) from exc


@router.get("/kpis", response_model=KpiResponse, status_code=status.HTTP_200_OK)
def get_kpis(filters: MovementFilters = Depends(movement_filters)) -> KpiResponse:
    return KpiResponse(**_run(dashboard.compute_kpis, filters))


@router.get("/cows", response_model=List[CowMetricsModel], status_code=status.HTTP_200_OK)
def list_cows(filters: MovementFilters = Depends(movement_filters)) -> List[CowMetricsModel]:
    return [CowMetricsModel.model_validate(item) for item in _run(dashboard.list_cow_metrics, filters)]


@router.get("/cows/{cow_id}", response_model=CowMetricsModel, status_code=status.HTTP_200_OK)
def get_cow(
    cow_id: str = Path(..., description="COW identifier"),
    filters: MovementFilters = Depends(movement_filters),
) -> CowMetricsModel:
    payload = _run(dashboard.get_cow_metrics, cow_id, filters)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"COW '{cow_id}' has no movements.")
    return CowMetricsModel.model_validate(payload)


@router.get("/warehouses", response_model=List[WarehouseMetricsModel], status_code=status.HTTP_200_OK)
def list_warehouses(filters: MovementFilters = Depends(movement_filters)) -> List[WarehouseMetricsModel]:
    return [WarehouseMetricsModel.model_validate(item) for item in _run(dashboard.list_warehouse_metrics, filters)]


@router.get("/warehouses/{location_id}", response_model=WarehouseMetricsModel, status_code=status.HTTP_200_OK)
def get_warehouse(
    location_id: str = Path(..., description="Warehouse location identifier"),
    filters: MovementFilters = Depends(movement_filters),
) -> WarehouseMetricsModel:
    payload = _run(dashboard.get_warehouse_metrics, location_id, filters)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Warehouse '{location_id}' not found.")
    return WarehouseMetricsModel.model_validate(payload)


@router.get("/regions", response_model=List[RegionMetricsModel], status_code=status.HTTP_200_OK)
def list_regions(filters: MovementFilters = Depends(movement_filters)) -> List[RegionMetricsModel]:
    return [RegionMetricsModel.model_validate(item) for item in _run(dashboard.list_region_metrics, filters)]


@router.get("/dwell-time", response_model=DwellTimeResponse, status_code=status.HTTP_200_OK)
def get_dwell_time(
    filters: MovementFilters = Depends(movement_filters),
    top_n: int | None = Query(default=None, alias="topN", ge=1, le=100),
    warehouse_only: bool = Query(default=False, alias="warehouseOnly", description="Count stays at warehouses only"),
) -> DwellTimeResponse:
    payload = _run(dashboard.compute_dwell_times, filters, top_n or settings.top_n_default, warehouse_only)
    return DwellTimeResponse.model_validate(payload)


@router.get("/aging/off-air", response_model=OffAirAgingResponse, status_code=status.HTTP_200_OK)
def get_off_air_aging(filters: MovementFilters = Depends(movement_filters)) -> OffAirAgingResponse:
    return OffAirAgingResponse.model_validate(_run(dashboard.compute_off_air_aging, filters))


@router.get("/aging/short-idle", response_model=ShortIdleResponse, status_code=status.HTTP_200_OK)
def get_short_idle(filters: MovementFilters = Depends(movement_filters)) -> ShortIdleResponse:
    return ShortIdleResponse.model_validate(_run(dashboard.compute_short_idle, filters))


@router.get("/aging/off-air/{cow_id}", response_model=CowOffAirDetailsResponse, status_code=status.HTTP_200_OK)
def get_off_air_details(
    cow_id: str = Path(..., description="COW identifier"),
    filters: MovementFilters = Depends(movement_filters),
) -> CowOffAirDetailsResponse:
    payload = _run(dashboard.get_off_air_details, cow_id, filters)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"COW '{cow_id}' has no off-air movements.",
        )
    return CowOffAirDetailsResponse.model_validate(payload)


@router.get("/events/top", response_model=TopEventsResponse, status_code=status.HTTP_200_OK)
def get_top_events(
    filters: MovementFilters = Depends(movement_filters),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> TopEventsResponse:
    payload = _run(dashboard.compute_top_events, filters, limit or settings.top_n_default)
    return TopEventsResponse.model_validate(payload)


@router.get("/vendors/top", response_model=TopVendorsResponse, status_code=status.HTTP_200_OK)
def get_top_vendors(
    filters: MovementFilters = Depends(movement_filters),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> TopVendorsResponse:
    payload = _run(dashboard.compute_top_vendors, filters, limit or settings.top_n_default)
    return TopVendorsResponse.model_validate(payload)


@router.get("/ebu-royal", response_model=EbuRoyalResponse, status_code=status.HTTP_200_OK)
def get_ebu_royal(filters: MovementFilters = Depends(movement_filters)) -> EbuRoyalResponse:
    return EbuRoyalResponse.model_validate(_run(dashboard.compute_ebu_royal, filters))


@router.get("/flows", response_model=FlowsResponse, status_code=status.HTTP_200_OK)
def get_flows(
    filters: MovementFilters = Depends(movement_filters),
    limit: int | None = Query(default=None, ge=1, le=500, description="Number of ranked flows to return"),
) -> FlowsResponse:
    payload = _run(dashboard.compute_flows, filters, limit or settings.top_n_default)
    return FlowsResponse.model_validate(payload)


@router.get("/distance", response_model=DistanceBreakdownResponse, status_code=status.HTTP_200_OK)
def get_distance(filters: MovementFilters = Depends(movement_filters)) -> DistanceBreakdownResponse:
    return DistanceBreakdownResponse.model_validate(_run(dashboard.compute_distance, filters))


@router.post("/reload", response_model=ReloadResponse, status_code=status.HTTP_200_OK)
def reload_data() -> ReloadResponse:
    """Re-read the active movement source, picking up sheet edits."""
    return ReloadResponse.model_validate(_run(dashboard.refresh_dataset))
