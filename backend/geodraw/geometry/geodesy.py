"""Spherical helpers for lon/lat geometry.

Circles are approximated by projecting points along great circles, and areas
are measured on a sphere so that thresholds can be expressed in square meters.
"""

import math
from typing import Sequence

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

MEAN_EARTH_RADIUS_M = 6371008.8
WGS84_EQUATORIAL_RADIUS_M = 6378137.0


def destination(
    origin: tuple[float, float],
    distance_m: float,
    bearing_deg: float,
) -> tuple[float, float]:
    """Point reached from ``origin`` after ``distance_m`` along ``bearing_deg``."""
    lon1 = math.radians(origin[0])
    lat1 = math.radians(origin[1])
    bearing = math.radians(bearing_deg)
    angular = distance_m / MEAN_EARTH_RADIUS_M

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return (math.degrees(lon2), math.degrees(lat2))


def circle_ring(
    center: tuple[float, float],
    radius_m: float,
    steps: int = 64,
) -> list[tuple[float, float]]:
    """Closed ring of ``steps`` points approximating a circle."""
    ring = [destination(center, radius_m, i * -360 / steps) for i in range(steps)]
    ring.append(ring[0])
    return ring


def ring_area(coords: Sequence[Sequence[float]]) -> float:
    """Signed spherical area of a closed ring in square meters."""
    count = len(coords) - 1
    if count <= 2:
        return 0.0

    total = 0.0
    for i in range(count):
        lower = coords[i]
        middle = coords[(i + 1) % count]
        upper = coords[(i + 2) % count]
        total += (math.radians(upper[0]) - math.radians(lower[0])) * math.sin(
            math.radians(middle[1])
        )

    return total * WGS84_EQUATORIAL_RADIUS_M * WGS84_EQUATORIAL_RADIUS_M / 2


def polygon_area(polygon: Polygon) -> float:
    if polygon.is_empty:
        return 0.0
    area = abs(ring_area(list(polygon.exterior.coords)))
    for interior in polygon.interiors:
        area -= abs(ring_area(list(interior.coords)))
    return area


def geodesic_area(geometry: BaseGeometry) -> float:
    """Area in square meters; zero for non-areal geometry."""
    if isinstance(geometry, Polygon):
        return polygon_area(geometry)
    if isinstance(geometry, MultiPolygon):
        return sum(polygon_area(part) for part in geometry.geoms)
    return 0.0
