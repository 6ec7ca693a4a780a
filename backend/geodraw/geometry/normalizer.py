"""Conversion of drawn shapes into polygons for boolean operations."""

import logging
import math
from typing import Optional

from shapely.geometry import MultiPolygon, Polygon, shape as to_shapely

from geodraw.geometry.geodesy import circle_ring
from geodraw.geometry.types import NormalizedPolygon, Shape, ShapeKind

logger = logging.getLogger(__name__)

DEFAULT_CIRCLE_STEPS = 64

_POLYGONAL_TYPES = {"Polygon", "MultiPolygon"}


def _valid_radius(radius: object) -> bool:
    if isinstance(radius, bool) or not isinstance(radius, (int, float)):
        return False
    return not math.isnan(radius) and radius > 0


def normalize(
    shape: Shape,
    steps: int = DEFAULT_CIRCLE_STEPS,
) -> Optional[NormalizedPolygon]:
    """Polygon form of ``shape``, or None when it has none.

    Lines never normalize. Circles need a positive radius and a Point
    geometry. Polygons and rectangles are returned as drawn.
    """
    if shape.kind == ShapeKind.LINE:
        return None

    geometry_type = shape.geometry_type

    if shape.kind == ShapeKind.CIRCLE:
        if geometry_type != "Point" or not _valid_radius(shape.radius):
            logger.debug(f"Circle {shape.id} cannot be normalized (radius={shape.radius!r})")
            return None
        lon, lat = shape.geometry["coordinates"][:2]
        return Polygon(circle_ring((lon, lat), shape.radius, steps))

    if geometry_type not in _POLYGONAL_TYPES:
        logger.debug(f"Shape {shape.id} of kind {shape.kind.value} has {geometry_type} geometry")
        return None

    polygon = to_shapely(shape.geometry)
    if not isinstance(polygon, (Polygon, MultiPolygon)) or polygon.is_empty:
        return None
    return polygon
