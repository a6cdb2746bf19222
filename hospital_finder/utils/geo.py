from __future__ import annotations

from math import asin, atan2, cos, degrees, radians, sin, sqrt
from typing import NamedTuple, Optional, Tuple

EARTH_RADIUS_KM = 6371.0


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    # None when the box wraps the antimeridian or reaches a pole
    lng_range: Optional[Tuple[float, float]]


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    lat1, lng1, lat2, lng2 = map(radians, [lat1, lng1, lat2, lng2])

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """Smallest lat/lng box containing every point within radius_km of (lat, lng)."""
    angular = radius_km / EARTH_RADIUS_KM
    min_lat = lat - degrees(angular)
    max_lat = lat + degrees(angular)

    if min_lat <= -90 or max_lat >= 90:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), None)

    dlng = degrees(asin(min(1.0, sin(angular) / cos(radians(lat)))))
    min_lng, max_lng = lng - dlng, lng + dlng
    if min_lng < -180 or max_lng > 180:
        return BoundingBox(min_lat, max_lat, None)
    return BoundingBox(min_lat, max_lat, (min_lng, max_lng))
