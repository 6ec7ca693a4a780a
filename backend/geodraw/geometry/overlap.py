"""Overlap resolution for newly drawn shapes.

A new area-shape is checked against every previously accepted shape:

- shapes that do not overlap it are ignored;
- full containment in either direction rejects the new shape outright;
- partially overlapping shapes are unioned and subtracted from the new shape.

When the batch union/difference degrades (a GEOS error, an empty result or a
non-polygonal result) the new shape is trimmed against each neighbor in turn
instead. Trimmed results whose remaining area is negligible are rejected.
"""

import logging
import math
from typing import Callable, Optional, Sequence

from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, mapping
from shapely.geometry.base import BaseGeometry

from geodraw.geometry.normalizer import DEFAULT_CIRCLE_STEPS, normalize
from geodraw.geometry.primitives import GeometryOps
from geodraw.geometry.types import (
    NeighborRelation,
    NormalizedPolygon,
    OutcomeStatus,
    OverlapOutcome,
    RejectionReason,
    Shape,
    ShapeKind,
    StageResult,
    StageStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_TRIM_AREA_M2 = 0.0001

BinaryOp = Callable[[BaseGeometry, BaseGeometry], BaseGeometry]


class OverlapResolver:
    """Decides whether a new shape is accepted, trimmed or rejected."""

    def __init__(
        self,
        min_area: float = DEFAULT_MIN_TRIM_AREA_M2,
        circle_steps: int = DEFAULT_CIRCLE_STEPS,
        ops: Optional[GeometryOps] = None,
    ):
        self.min_area = min_area
        self.circle_steps = circle_steps
        self.ops = ops or GeometryOps()

    def resolve(self, new_shape: Shape, existing: Sequence[Shape]) -> OverlapOutcome:
        """Resolve ``new_shape`` against ``existing`` in insertion order.

        Args:
            new_shape: The shape just drawn
            existing: Snapshot of accepted shapes, oldest first

        Returns:
            OverlapOutcome; ``shape`` is the untouched input when accepted
        """
        new_polygon = normalize(new_shape, self.circle_steps)
        if new_polygon is None:
            if new_shape.kind == ShapeKind.LINE:
                return OverlapOutcome.accepted(new_shape)
            logger.info(f"Rejecting {new_shape.kind.value} {new_shape.id}: not normalizable")
            return OverlapOutcome.rejected(RejectionReason.INVALID_INPUT)

        neighbors: list[NormalizedPolygon] = []
        for shape in existing:
            existing_polygon = normalize(shape, self.circle_steps)
            if existing_polygon is None:
                continue

            relation = self.classify(new_polygon, existing_polygon)
            logger.debug(f"{new_shape.id} vs {shape.id}: {relation.value}")

            if relation == NeighborRelation.DISJOINT:
                continue
            if relation == NeighborRelation.NEW_INSIDE_EXISTING:
                logger.info(f"Rejecting {new_shape.id}: fully inside {shape.id}")
                return OverlapOutcome.rejected(RejectionReason.NEW_INSIDE_EXISTING)
            if relation == NeighborRelation.EXISTING_INSIDE_NEW:
                logger.info(f"Rejecting {new_shape.id}: fully encloses {shape.id}")
                return OverlapOutcome.rejected(RejectionReason.EXISTING_INSIDE_NEW)

            neighbors.append(existing_polygon)

        if not neighbors:
            return OverlapOutcome.accepted(new_shape)

        original_area = self.ops.area(new_polygon)
        used_fallback = False

        stage = self.trim_batch(new_polygon, neighbors)
        if stage.status == StageStatus.DEGENERATE:
            logger.warning(
                f"Batch trim degenerate for {new_shape.id} ({stage.detail}), "
                "falling back to iterative trimming"
            )
            stage = self.trim_iteratively(new_polygon, neighbors)
            used_fallback = True

        if not stage.ok:
            logger.info(f"Rejecting {new_shape.id}: {stage.detail}")
            return OverlapOutcome.rejected(
                stage.reason or RejectionReason.DEGENERATE_GEOMETRY,
                used_fallback=used_fallback,
                original_area=original_area,
            )

        result_area = self.ops.area(stage.geometry)
        logger.info(
            f"Trimmed {new_shape.id} against {len(neighbors)} neighbor(s): "
            f"{original_area:.2f}m2 -> {result_area:.2f}m2"
        )
        return OverlapOutcome(
            status=OutcomeStatus.TRIMMED,
            shape=new_shape.with_geometry(mapping(stage.geometry)),
            used_fallback=used_fallback,
            original_area=original_area,
            result_area=result_area,
        )

    def classify(
        self,
        new_polygon: NormalizedPolygon,
        existing_polygon: NormalizedPolygon,
    ) -> NeighborRelation:
        """Relationship of the new polygon to one existing polygon.

        Polygons that only share boundary points count as disjoint.
        """
        if not self.ops.intersects(new_polygon, existing_polygon):
            return NeighborRelation.DISJOINT
        if self.ops.touches(new_polygon, existing_polygon):
            return NeighborRelation.DISJOINT
        if self.ops.within(new_polygon, existing_polygon):
            return NeighborRelation.NEW_INSIDE_EXISTING
        if self.ops.within(existing_polygon, new_polygon):
            return NeighborRelation.EXISTING_INSIDE_NEW
        return NeighborRelation.PARTIAL

    def union_neighbors(self, neighbors: Sequence[NormalizedPolygon]) -> StageResult:
        """Left fold of ``union`` over the neighbors in encounter order."""
        merged = neighbors[0]
        for neighbor in neighbors[1:]:
            step = self._attempt(self.ops.union, merged, neighbor)
            if not step.ok:
                return step
            merged = step.geometry
        return StageResult(status=StageStatus.SUCCESS, geometry=merged)

    def trim_batch(
        self,
        new_polygon: NormalizedPolygon,
        neighbors: Sequence[NormalizedPolygon],
    ) -> StageResult:
        """Subtract the union of all neighbors in a single difference.

        DEGENERATE means the caller should fall back to iterative trimming;
        FATAL means the result is valid but too small to keep.
        """
        union = self.union_neighbors(neighbors)
        if not union.ok:
            return union

        difference = self._attempt(self.ops.difference, new_polygon, union.geometry)
        if not difference.ok:
            return difference

        return self._check_area(difference.geometry)

    def trim_iteratively(
        self,
        new_polygon: NormalizedPolygon,
        neighbors: Sequence[NormalizedPolygon],
    ) -> StageResult:
        """Subtract each neighbor in turn; any failed step is FATAL."""
        working = new_polygon
        for index, neighbor in enumerate(neighbors):
            step = self._attempt(self.ops.difference, working, neighbor)
            if not step.ok:
                return StageResult(
                    status=StageStatus.FATAL,
                    detail=f"iterative step {index}: {step.detail}",
                    reason=RejectionReason.DEGENERATE_GEOMETRY,
                )

            checked = self._check_area(step.geometry)
            if not checked.ok:
                return checked

            working = step.geometry

        return StageResult(status=StageStatus.SUCCESS, geometry=working)

    def _attempt(self, op: BinaryOp, a: BaseGeometry, b: BaseGeometry) -> StageResult:
        """Run a set operation, mapping failures to a DEGENERATE stage."""
        name = getattr(op, "__name__", "operation")
        try:
            result = op(a, b)
        except (GEOSException, ValueError) as e:
            return StageResult(
                status=StageStatus.DEGENERATE,
                detail=f"{name} failed: {e}",
                reason=RejectionReason.DEGENERATE_GEOMETRY,
            )

        if result is None or result.is_empty:
            return StageResult(
                status=StageStatus.DEGENERATE,
                detail=f"{name} produced no geometry",
                reason=RejectionReason.DEGENERATE_GEOMETRY,
            )

        if not isinstance(result, (Polygon, MultiPolygon)):
            return StageResult(
                status=StageStatus.DEGENERATE,
                detail=f"{name} produced {result.geom_type}",
                reason=RejectionReason.DEGENERATE_GEOMETRY,
            )

        return StageResult(status=StageStatus.SUCCESS, geometry=result)

    def _check_area(self, geometry: NormalizedPolygon) -> StageResult:
        area = self.ops.area(geometry)
        if math.isnan(area) or area < self.min_area:
            return StageResult(
                status=StageStatus.FATAL,
                geometry=geometry,
                detail=f"remaining area {area} below {self.min_area}",
                reason=RejectionReason.AREA_BELOW_THRESHOLD,
            )
        return StageResult(status=StageStatus.SUCCESS, geometry=geometry)
