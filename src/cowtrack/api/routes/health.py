"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't touch the movement sheet."""
    return {"status": "ok"}


@router.get("/health/data-source", status_code=status.HTTP_200_OK)
def health_data_source() -> dict:
    """Report which movement source the analytics endpoints read from."""
    if settings.sheet_csv_url:
        return {"source": "sheet", "url": settings.sheet_csv_url}
    movements_file = settings.movements_file
    return {
        "source": "file",
        "dataRoot": str(settings.data_root),
        "fileName": movements_file.name,
        "exists": movements_file.exists(),
    }
