"""Type definitions for the geometry engine.

Contains enums and data classes used throughout the geometry module.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from shapely.geometry import MultiPolygon, Polygon

NormalizedPolygon = Union[Polygon, MultiPolygon]


class ShapeKind(str, Enum):
    """Kind of shape, fixed when the shape is drawn."""

    POLYGON = "polygon"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    LINE = "line"


class OutcomeStatus(str, Enum):
    """Result of running a new shape through overlap resolution."""

    ACCEPTED = "accepted"
    TRIMMED = "trimmed"
    REJECTED = "rejected"


class RejectionReason(str, Enum):
    """Why a shape was rejected."""

    NEW_INSIDE_EXISTING = "new_inside_existing"
    EXISTING_INSIDE_NEW = "existing_inside_new"
    AREA_BELOW_THRESHOLD = "area_below_threshold"
    DEGENERATE_GEOMETRY = "degenerate_geometry"
    INVALID_INPUT = "invalid_input"


class NeighborRelation(str, Enum):
    """How an existing polygon relates to a new one."""

    DISJOINT = "disjoint"
    NEW_INSIDE_EXISTING = "new_inside_existing"
    EXISTING_INSIDE_NEW = "existing_inside_new"
    PARTIAL = "partial"


class StageStatus(str, Enum):
    """Status of a single union/difference stage."""

    SUCCESS = "success"
    DEGENERATE = "degenerate"
    FATAL = "fatal"


@dataclass(frozen=True)
class Shape:
    """A drawn shape.

    ``geometry`` is a GeoJSON geometry mapping with ``[lon, lat]`` positions.
    Circles carry a ``Point`` geometry plus ``radius`` in meters.
    """

    id: str
    kind: ShapeKind
    geometry: dict[str, Any]
    radius: Optional[float] = None
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def geometry_type(self) -> str:
        return self.geometry.get("type", "")

    def with_geometry(self, geometry: dict[str, Any]) -> "Shape":
        """Copy carrying new geometry; a circle becomes a polygon."""
        if self.kind == ShapeKind.CIRCLE and geometry.get("type") != "Point":
            return replace(self, geometry=geometry, kind=ShapeKind.POLYGON, radius=None)
        return replace(self, geometry=geometry)

    def to_feature(self) -> dict[str, Any]:
        """Convert to a GeoJSON Feature."""
        properties = {
            **self.properties,
            "id": self.id,
            "shape_type": self.kind.value,
        }
        if self.radius is not None:
            properties["radius"] = self.radius
        return {
            "type": "Feature",
            "geometry": self.geometry,
            "properties": properties,
        }


@dataclass(frozen=True)
class StageResult:
    """Outcome of a union or difference stage."""

    status: StageStatus
    geometry: Optional[NormalizedPolygon] = None
    detail: Optional[str] = None
    reason: Optional[RejectionReason] = None

    @property
    def ok(self) -> bool:
        return self.status == StageStatus.SUCCESS


@dataclass(frozen=True)
class OverlapOutcome:
    """Result of resolving a new shape against existing shapes."""

    status: OutcomeStatus
    shape: Optional[Shape] = None
    reason: Optional[RejectionReason] = None
    used_fallback: bool = False
    original_area: Optional[float] = None
    result_area: Optional[float] = None

    @classmethod
    def accepted(cls, shape: Shape) -> "OverlapOutcome":
        return cls(status=OutcomeStatus.ACCEPTED, shape=shape)

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        used_fallback: bool = False,
        original_area: Optional[float] = None,
    ) -> "OverlapOutcome":
        return cls(
            status=OutcomeStatus.REJECTED,
            reason=reason,
            used_fallback=used_fallback,
            original_area=original_area,
        )

    @property
    def is_rejected(self) -> bool:
        return self.status == OutcomeStatus.REJECTED
