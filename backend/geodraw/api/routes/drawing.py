"""Drawing and feature endpoints."""

from fastapi import APIRouter, Depends, Response, status

from geodraw.api.deps import get_drawing_service
from geodraw.config import Settings, get_settings
from geodraw.models.schemas.drawing import (
    DrawingCreateResponse,
    DrawingStatusResponse,
    FeatureCollection,
    FeatureListResponse,
    FeatureSubmitResponse,
)
from geodraw.models.schemas.feature import DrawnFeature
from geodraw.services.drawing_service import DrawingService

router = APIRouter()


@router.post(
    "",
    response_model=DrawingCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_drawing(
    drawing_service: DrawingService = Depends(get_drawing_service),
) -> DrawingCreateResponse:
    """Create a new empty drawing."""
    return await drawing_service.create_drawing()


@router.get("/{drawing_id}", response_model=DrawingStatusResponse)
async def get_drawing(
    drawing_id: str,
    drawing_service: DrawingService = Depends(get_drawing_service),
) -> DrawingStatusResponse:
    """Get drawing status and shape counts."""
    return await drawing_service.get_drawing(drawing_id)


@router.delete("/{drawing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_drawing(
    drawing_id: str,
    drawing_service: DrawingService = Depends(get_drawing_service),
) -> None:
    """Delete a drawing and all of its features."""
    await drawing_service.delete_drawing(drawing_id)


@router.get("/{drawing_id}/features", response_model=FeatureListResponse)
async def list_features(
    drawing_id: str,
    drawing_service: DrawingService = Depends(get_drawing_service),
) -> FeatureListResponse:
    """List accepted features in the order they were drawn."""
    return await drawing_service.list_features(drawing_id)


@router.post(
    "/{drawing_id}/features",
    response_model=FeatureSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_feature(
    drawing_id: str,
    feature: DrawnFeature,
    drawing_service: DrawingService = Depends(get_drawing_service),
) -> FeatureSubmitResponse:
    """Submit a drawn shape; it is stored as drawn, trimmed, or rejected."""
    return await drawing_service.submit_feature(drawing_id, feature)


@router.get("/{drawing_id}/export", response_model=FeatureCollection)
async def export_drawing(
    drawing_id: str,
    response: Response,
    drawing_service: DrawingService = Depends(get_drawing_service),
    settings: Settings = Depends(get_settings),
) -> FeatureCollection:
    """Download all accepted features as GeoJSON."""
    response.headers["Content-Disposition"] = (
        f'attachment; filename="{settings.export_filename}"'
    )
    return await drawing_service.export_geojson(drawing_id)
