"""
Great-circle helpers on a spherical Earth (R = 6371 km).

Points are (lat, lon) tuples in degrees.
"""

import math
from typing import Sequence, Tuple

EARTH_RADIUS_KM = 6371.0

LatLon = Tuple[float, float]


def distance_km(p1: LatLon, p2: LatLon) -> float:
    """
    Haversine distance between two points.

    Args:
        p1: (lat, lon) of the first point in degrees
        p2: (lat, lon) of the second point in degrees

    Returns:
        Distance in kilometres
    """
    lat1, lon1 = p1
    lat2, lon2 = p2

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def bearing_deg(p1: LatLon, p2: LatLon) -> float:
    """
    Initial bearing (forward azimuth) from p1 to p2.

    Returns:
        Bearing in degrees, normalised to [0, 360). Identical points give 0.
    """
    lat1, lon1 = p1
    lat2, lon2 = p2
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    x = math.sin(dlon) * math.cos(lat2_rad)
    y = (math.cos(lat1_rad) * math.sin(lat2_rad) -
         math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon))

    bearing = math.degrees(math.atan2(x, y)) % 360.0
    # -0.0 % 360 and tiny negatives can round up to 360.0
    return 0.0 if bearing >= 360.0 else bearing


def midpoint(p1: LatLon, p2: LatLon) -> LatLon:
    """Coordinate-space midpoint, used to place segment labels."""
    return ((p1[0] + p2[0]) / 2, (p1[1] + p2[1]) / 2)


def interpolate(p1: LatLon, p2: LatLon, t: float) -> LatLon:
    """Linear interpolation in coordinate space (t=0 → p1, t=1 → p2)."""
    return (p1[0] + (p2[0] - p1[0]) * t, p1[1] + (p2[1] - p1[1]) * t)


def route_length_km(points: Sequence[LatLon]) -> float:
    """Sum of haversine distances over consecutive points."""
    return sum(distance_km(points[i], points[i + 1]) for i in range(len(points) - 1))
