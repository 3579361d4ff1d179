# Great-circle distance between two WGS-84 points

import math

from .models import GeoPoint

EARTH_RADIUS_M = 6371e3


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in metres. NaN coordinates propagate NaN."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    s = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(s), math.sqrt(1 - s))
    return EARTH_RADIUS_M * c
