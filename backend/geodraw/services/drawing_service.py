"""Drawing service for business logic."""

import logging
from datetime import datetime, timezone, timedelta
from typing import Any, Optional

from redis.asyncio import Redis

from geodraw.config import Settings
from geodraw.core.exceptions import (
    DrawingFullError,
    DrawingNotFoundError,
    InvalidFeatureError,
    ShapeLimitReachedError,
    ShapeRejectedError,
)
from geodraw.geometry.overlap import OverlapResolver
from geodraw.geometry.types import OutcomeStatus, ShapeKind
from geodraw.models.schemas.drawing import (
    DrawingCreateResponse,
    DrawingStatusResponse,
    FeatureCollection,
    FeatureListResponse,
    FeatureSubmitResponse,
)
from geodraw.models.schemas.feature import DrawnFeature, StoredFeature, shape_from_stored
from geodraw.repositories.drawing_repository import DrawingRepository

logger = logging.getLogger(__name__)


def count_shapes(features: list[dict[str, Any]]) -> dict[str, int]:
    """Count stored features per shape kind."""
    counts = {kind.value: 0 for kind in ShapeKind}
    for feature in features:
        shape_type = (feature.get("properties") or {}).get("shape_type")
        if shape_type in counts:
            counts[shape_type] += 1
    return counts


class DrawingService:
    """Business logic for drawings and overlap-checked feature submission."""

    def __init__(
        self,
        redis: Redis,
        settings: Settings,
        resolver: Optional[OverlapResolver] = None,
    ):
        self.settings = settings
        ttl_seconds = settings.drawing_ttl_hours * 3600
        self.repo = DrawingRepository(redis, ttl_seconds)
        self.resolver = resolver or OverlapResolver(
            min_area=settings.min_trim_area_m2,
            circle_steps=settings.circle_steps,
        )

    async def create_drawing(self) -> DrawingCreateResponse:
        """Create a new empty drawing."""
        meta = await self.repo.create()
        logger.info(f"Created drawing {meta['drawing_id']}")
        return DrawingCreateResponse(
            drawing_id=meta["drawing_id"],
            created_at=datetime.fromisoformat(meta["created_at"]),
        )

    async def get_drawing(self, drawing_id: str) -> DrawingStatusResponse:
        """Get drawing status. Raises DrawingNotFoundError."""
        meta = await self._get_meta(drawing_id)

        ttl = await self.repo.get_ttl(drawing_id)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl or 0)

        features = await self.repo.get_features(drawing_id)

        updated_at = None
        if meta.get("updated_at"):
            updated_at = datetime.fromisoformat(meta["updated_at"])

        return DrawingStatusResponse(
            drawing_id=meta["drawing_id"],
            created_at=datetime.fromisoformat(meta["created_at"]),
            updated_at=updated_at,
            expires_at=expires_at,
            feature_count=len(features),
            shape_counts=count_shapes(features),
            shape_limits=self.settings.shape_limits(),
        )

    async def delete_drawing(self, drawing_id: str) -> bool:
        """Delete drawing. Returns True if deleted."""
        await self._get_meta(drawing_id)
        return await self.repo.delete(drawing_id)

    async def list_features(self, drawing_id: str) -> FeatureListResponse:
        """Accepted features in insertion order."""
        await self._get_meta(drawing_id)
        features = await self.repo.get_features(drawing_id)
        return FeatureListResponse(
            features=[StoredFeature(**feature) for feature in features],
            count=len(features),
        )

    async def submit_feature(
        self,
        drawing_id: str,
        feature: DrawnFeature,
    ) -> FeatureSubmitResponse:
        """
        Run a drawn feature through the overlap check and store the result.
        Raises ShapeLimitReachedError when the kind's limit is reached.
        Raises ShapeRejectedError when the overlap check refuses the shape.
        """
        await self._get_meta(drawing_id)

        point_count = feature.point_count()
        if point_count > self.settings.max_points_per_shape:
            raise InvalidFeatureError(
                [f"shape has {point_count} positions (max {self.settings.max_points_per_shape})"]
            )

        stored = await self.repo.get_features(drawing_id)
        if len(stored) >= self.settings.max_features_per_drawing:
            raise DrawingFullError(self.settings.max_features_per_drawing)

        shape = feature.to_shape()
        kind = shape.kind.value

        limit = self.settings.shape_limits().get(kind)
        if limit is not None and count_shapes(stored)[kind] >= limit:
            raise ShapeLimitReachedError(kind, limit)

        if any((f.get("properties") or {}).get("id") == shape.id for f in stored):
            raise InvalidFeatureError([f"feature id already exists: {shape.id}"])

        existing = [shape_from_stored(f) for f in stored]
        logger.debug(f"Checking overlap for {kind} {shape.id} against {len(existing)} feature(s)")

        outcome = self.resolver.resolve(shape, existing)
        if outcome.is_rejected:
            logger.info(f"Drawing {drawing_id}: {kind} {shape.id} rejected ({outcome.reason.value})")
            raise ShapeRejectedError(outcome.reason.value)

        final_feature = outcome.shape.to_feature()
        await self.repo.append_feature(drawing_id, final_feature)

        return FeatureSubmitResponse(
            status=outcome.status.value,
            feature=StoredFeature(**final_feature),
            was_trimmed=outcome.status == OutcomeStatus.TRIMMED,
            used_fallback=outcome.used_fallback,
            original_area_m2=outcome.original_area,
            result_area_m2=outcome.result_area,
        )

    async def export_geojson(self, drawing_id: str) -> FeatureCollection:
        """All accepted features as a GeoJSON FeatureCollection."""
        await self._get_meta(drawing_id)
        features = await self.repo.get_features(drawing_id)
        return FeatureCollection(features=features)

    async def _get_meta(self, drawing_id: str) -> dict[str, Any]:
        meta = await self.repo.get_meta(drawing_id)
        if meta is None:
            raise DrawingNotFoundError(drawing_id)
        return meta
