"""Drawing session request/response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from geodraw.models.schemas.feature import StoredFeature


class DrawingCreateResponse(BaseModel):
    """Response when creating a new drawing."""

    drawing_id: str
    created_at: datetime


class DrawingStatusResponse(BaseModel):
    """Drawing status including per-kind shape counts."""

    drawing_id: str
    created_at: datetime
    updated_at: datetime | None = None
    expires_at: datetime
    feature_count: int
    shape_counts: dict[str, int]
    shape_limits: dict[str, int | None]


class FeatureListResponse(BaseModel):
    """Accepted features in insertion order."""

    features: list[StoredFeature]
    count: int


class FeatureSubmitResponse(BaseModel):
    """Response after a feature passed the overlap check."""

    status: str
    feature: StoredFeature
    was_trimmed: bool
    used_fallback: bool = False
    original_area_m2: float | None = None
    result_area_m2: float | None = None


class FeatureCollection(BaseModel):
    """GeoJSON FeatureCollection for export."""

    type: str = "FeatureCollection"
    features: list[dict[str, Any]]
