"""GeoJSON feature validation schemas."""

import math
import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from geodraw.geometry.types import Shape, ShapeKind

Position = tuple[float, float]


def _validate_position(v: Any, label: str) -> Position:
    if not isinstance(v, (list, tuple)):
        raise ValueError(f"{label} must be an array [lon, lat]")
    if len(v) != 2:
        raise ValueError(f"{label} must have exactly 2 coordinates, got {len(v)}")

    try:
        lon, lat = float(v[0]), float(v[1])
    except (TypeError, ValueError) as e:
        raise ValueError(f"{label} coordinates must be numbers: {e}")

    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValueError(f"{label} coordinates must be finite (not NaN or Infinity)")
    if not (-180 <= lon <= 180 and -90 <= lat <= 90):
        raise ValueError(f"{label} is outside lon/lat bounds: [{lon}, {lat}]")

    return (lon, lat)


def _validate_ring(v: Any, label: str) -> list[Position]:
    if not isinstance(v, list):
        raise ValueError(f"{label} must be an array of positions")
    if len(v) < 4:
        raise ValueError(f"{label} must have at least 4 positions, got {len(v)}")

    ring = [_validate_position(p, f"{label}[{i}]") for i, p in enumerate(v)]
    if ring[0] != ring[-1]:
        raise ValueError(f"{label} must be closed (first position equals last)")
    return ring


def _validate_rings(v: Any, label: str) -> list[list[Position]]:
    if not isinstance(v, list) or not v:
        raise ValueError(f"{label} must be a non-empty array of rings")
    return [_validate_ring(ring, f"{label}[{i}]") for i, ring in enumerate(v)]


class PointGeometry(BaseModel):
    type: Literal["Point"]
    coordinates: Position

    @field_validator("coordinates", mode="before")
    @classmethod
    def validate_coordinates(cls, v: Any) -> Position:
        return _validate_position(v, "point")


class LineStringGeometry(BaseModel):
    type: Literal["LineString"]
    coordinates: list[Position]

    @field_validator("coordinates", mode="before")
    @classmethod
    def validate_coordinates(cls, v: Any) -> list[Position]:
        if not isinstance(v, list):
            raise ValueError("line coordinates must be an array")
        if len(v) < 2:
            raise ValueError(f"line must have at least 2 positions, got {len(v)}")
        return [_validate_position(p, f"position[{i}]") for i, p in enumerate(v)]


class PolygonGeometry(BaseModel):
    type: Literal["Polygon"]
    coordinates: list[list[Position]]

    @field_validator("coordinates", mode="before")
    @classmethod
    def validate_coordinates(cls, v: Any) -> list[list[Position]]:
        return _validate_rings(v, "ring")


class MultiPolygonGeometry(BaseModel):
    type: Literal["MultiPolygon"]
    coordinates: list[list[list[Position]]]

    @field_validator("coordinates", mode="before")
    @classmethod
    def validate_coordinates(cls, v: Any) -> list[list[list[Position]]]:
        if not isinstance(v, list) or not v:
            raise ValueError("multipolygon must be a non-empty array of polygons")
        return [_validate_rings(polygon, f"polygon[{i}].ring") for i, polygon in enumerate(v)]


Geometry = Annotated[
    Union[PointGeometry, LineStringGeometry, PolygonGeometry, MultiPolygonGeometry],
    Field(discriminator="type"),
]

# Geometry types a submitted shape of each kind may carry
GEOMETRY_TYPES_BY_KIND = {
    ShapeKind.POLYGON: {"Polygon", "MultiPolygon"},
    ShapeKind.RECTANGLE: {"Polygon"},
    ShapeKind.CIRCLE: {"Point"},
    ShapeKind.LINE: {"LineString"},
}


class FeatureProperties(BaseModel):
    """Feature properties; unknown keys are kept as drawn."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    shape_type: ShapeKind
    radius: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)

    @field_validator("id")
    @classmethod
    def id_not_whitespace(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("id cannot be empty or whitespace")
        return v.strip()


class DrawnFeature(BaseModel):
    """A shape submitted by the drawing client."""

    type: Literal["Feature"] = "Feature"
    geometry: Geometry
    properties: FeatureProperties

    @model_validator(mode="after")
    def geometry_matches_kind(self) -> "DrawnFeature":
        kind = self.properties.shape_type
        allowed = GEOMETRY_TYPES_BY_KIND[kind]
        if self.geometry.type not in allowed:
            raise ValueError(
                f"{kind.value} requires {' or '.join(sorted(allowed))} geometry, "
                f"got {self.geometry.type}"
            )
        if kind == ShapeKind.CIRCLE and self.properties.radius is None:
            raise ValueError("circle requires a radius in meters")
        if kind != ShapeKind.CIRCLE and self.properties.radius is not None:
            raise ValueError(f"radius is only allowed for circles, not {kind.value}")
        return self

    def point_count(self) -> int:
        coordinates = self.geometry.coordinates
        if self.geometry.type == "Point":
            return 1
        if self.geometry.type == "LineString":
            return len(coordinates)
        if self.geometry.type == "Polygon":
            return sum(len(ring) for ring in coordinates)
        return sum(len(ring) for polygon in coordinates for ring in polygon)

    def to_shape(self) -> Shape:
        """Build the core shape, assigning an id when the client sent none."""
        extra = dict(self.properties.model_extra or {})
        return Shape(
            id=self.properties.id or str(uuid.uuid4()),
            kind=self.properties.shape_type,
            geometry=self.geometry.model_dump(mode="json"),
            radius=self.properties.radius,
            properties=extra,
        )


class StoredFeature(BaseModel):
    """A feature as kept in the feature store and returned to clients."""

    type: Literal["Feature"] = "Feature"
    geometry: dict[str, Any]
    properties: dict[str, Any]


def shape_from_stored(feature: dict[str, Any]) -> Shape:
    """Rebuild a shape from its stored GeoJSON feature."""
    properties = dict(feature.get("properties") or {})
    shape_id = properties.pop("id")
    kind = ShapeKind(properties.pop("shape_type"))
    radius = properties.pop("radius", None)
    return Shape(
        id=shape_id,
        kind=kind,
        geometry=feature["geometry"],
        radius=radius,
        properties=properties,
    )
