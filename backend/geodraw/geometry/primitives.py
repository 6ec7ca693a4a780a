"""Boolean geometry primitives backed by Shapely.

The overlap resolver talks to geometry only through ``GeometryOps`` so that
alternative implementations (or failing ones, in tests) can be injected.
"""

from shapely.geometry.base import BaseGeometry

from geodraw.geometry.geodesy import geodesic_area


class GeometryOps:
    """Predicates, set operations and area over lon/lat geometry."""

    def intersects(self, a: BaseGeometry, b: BaseGeometry) -> bool:
        return a.intersects(b)

    def touches(self, a: BaseGeometry, b: BaseGeometry) -> bool:
        """True when a and b share boundary points but no interior."""
        return a.touches(b)

    def within(self, a: BaseGeometry, b: BaseGeometry) -> bool:
        """True when a lies entirely inside b."""
        return a.within(b)

    def union(self, a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
        return a.union(b)

    def difference(self, a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
        return a.difference(b)

    def area(self, geometry: BaseGeometry) -> float:
        """Area in square meters."""
        return geodesic_area(geometry)
