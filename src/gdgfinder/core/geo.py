from __future__ import annotations
from dataclasses import dataclass
from math import asin, cos, inf, isnan, radians, sin, sqrt

"""
Geospatial helpers.

Distances are plain great-circle (haversine) math so the search layer can sort
chapters without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees (the search reference point)."""

    lat: float
    lon: float


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute great-circle distance in meters between two lat/lon pairs."""
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    dlat = phi2 - phi1
    dlon = radians(lon2) - radians(lon1)

    h = sin(dlat / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points; NaN passes through.
    if h > 1.0:
        h = 1.0
    return 2 * EARTH_RADIUS_M * asin(sqrt(h))


def sort_distance_m(lat: float, lon: float, point: GeoPoint) -> float:
    """Distance usable as a sort key: NaN coordinates map to +inf (sorted last)."""
    d = haversine_m(lat, lon, point.lat, point.lon)
    return inf if isnan(d) else d
