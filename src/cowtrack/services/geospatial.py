"""Geospatial helpers for inferring a Saudi region from coordinates."""

from __future__ import annotations

import math

from shapely.geometry import Point, box

EARTH_RADIUS_KM = 6371.0
DEFAULT_REGION = "CENTRAL"

# (min_lon, min_lat, max_lon, max_lat); checked in order, first match wins.
REGION_BOXES = {
    "NORTH": box(34.0, 30.5, 55.0, 33.1),
    "EAST": box(47.5, 24.0, 55.0, 30.5),
    "CENTRAL": box(41.0, 23.0, 47.5, 27.5),
    "WEST": box(34.0, 19.0, 41.0, 27.5),
    "SOUTH": box(41.0, 16.0, 49.0, 23.0),
}

# Kingdom extent used to drop map points with bad coordinates.
SAUDI_BOUNDS = box(34.4, 16.4, 55.67, 32.15)

REGION_CENTERS = {
    "NORTH": (32.0, 36.5),
    "WEST": (22.3, 39.2),
    "CENTRAL": (24.7, 46.6),
    "EAST": (26.2, 50.2),
    "SOUTH": (19.5, 43.5),
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def region_from_coordinates(latitude: float | None, longitude: float | None) -> str:
    """Map a coordinate to NORTH/EAST/CENTRAL/WEST/SOUTH.

    Points outside every box go to the nearest region centre. Missing or zero
    coordinates fall back to CENTRAL.
    """

    if not latitude or not longitude or math.isnan(latitude) or math.isnan(longitude):
        return DEFAULT_REGION

    point = Point(longitude, latitude)
    for region, bounds in REGION_BOXES.items():
        if bounds.covers(point):
            return region

    return min(
        REGION_CENTERS,
        key=lambda region: haversine_km(latitude, longitude, *REGION_CENTERS[region]),
    )


def within_saudi_bounds(latitude: float, longitude: float) -> bool:
    return SAUDI_BOUNDS.covers(Point(longitude, latitude))
