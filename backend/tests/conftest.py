"""Pytest fixtures for geometry, service and API testing."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from geodraw.config import Settings
from geodraw.geometry.overlap import OverlapResolver
from geodraw.geometry.types import Shape, ShapeKind
from geodraw.repositories.drawing_repository import DrawingRepository
from geodraw.services.drawing_service import DrawingService


def square_ring(x: float, y: float, size: float) -> list[list[float]]:
    """Closed lon/lat ring of an axis-aligned square with lower-left (x, y)."""
    return [
        [x, y],
        [x + size, y],
        [x + size, y + size],
        [x, y + size],
        [x, y],
    ]


def rect_ring(x0: float, y0: float, x1: float, y1: float) -> list[list[float]]:
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]


def make_polygon(
    ring: list[list[float]],
    shape_id: Optional[str] = None,
    kind: ShapeKind = ShapeKind.POLYGON,
) -> Shape:
    return Shape(
        id=shape_id or str(uuid.uuid4()),
        kind=kind,
        geometry={"type": "Polygon", "coordinates": [ring]},
    )


def make_square(
    x: float,
    y: float,
    size: float,
    shape_id: Optional[str] = None,
    kind: ShapeKind = ShapeKind.POLYGON,
) -> Shape:
    return make_polygon(square_ring(x, y, size), shape_id, kind)


def make_circle(
    lon: float,
    lat: float,
    radius: Optional[float],
    shape_id: Optional[str] = None,
) -> Shape:
    return Shape(
        id=shape_id or str(uuid.uuid4()),
        kind=ShapeKind.CIRCLE,
        geometry={"type": "Point", "coordinates": [lon, lat]},
        radius=radius,
    )


def make_line(points: list[list[float]], shape_id: Optional[str] = None) -> Shape:
    return Shape(
        id=shape_id or str(uuid.uuid4()),
        kind=ShapeKind.LINE,
        geometry={"type": "LineString", "coordinates": points},
    )


def polygon_feature(ring: list[list[float]], shape_type: str = "polygon", **properties: Any) -> dict:
    """GeoJSON feature as the drawing client submits it."""
    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": [ring]},
        "properties": {"shape_type": shape_type, **properties},
    }


def circle_feature(lon: float, lat: float, radius: float, **properties: Any) -> dict:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": {"shape_type": "circle", "radius": radius, **properties},
    }


def line_feature(points: list[list[float]], **properties: Any) -> dict:
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": points},
        "properties": {"shape_type": "line", **properties},
    }


@pytest.fixture
def resolver() -> OverlapResolver:
    return OverlapResolver()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        max_polygons=10,
        max_rectangles=5,
        max_circles=5,
        max_lines=-1,
        max_features_per_drawing=200,
    )


@pytest.fixture
def mock_drawing_repo():
    """Mock drawing repository backed by in-memory dicts."""
    repo = AsyncMock(spec=DrawingRepository)
    metas: dict[str, dict[str, Any]] = {}
    features: dict[str, list[dict[str, Any]]] = {}

    async def mock_create():
        drawing_id = str(uuid.uuid4())
        meta = {
            "drawing_id": drawing_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "updated_at": None,
        }
        metas[drawing_id] = meta
        features[drawing_id] = []
        return meta

    async def mock_get_meta(drawing_id):
        return metas.get(drawing_id)

    async def mock_get_features(drawing_id):
        return list(features.get(drawing_id, []))

    async def mock_append_feature(drawing_id, feature):
        if drawing_id not in metas:
            return False
        features[drawing_id].append(feature)
        metas[drawing_id]["updated_at"] = datetime.now(timezone.utc).isoformat()
        return True

    async def mock_delete(drawing_id):
        features.pop(drawing_id, None)
        return metas.pop(drawing_id, None) is not None

    async def mock_get_ttl(drawing_id):
        return 3600 if drawing_id in metas else None

    repo.create = mock_create
    repo.get_meta = mock_get_meta
    repo.get_features = mock_get_features
    repo.append_feature = mock_append_feature
    repo.delete = mock_delete
    repo.get_ttl = mock_get_ttl

    return repo


@pytest.fixture
def drawing_service(settings, mock_drawing_repo) -> DrawingService:
    service = DrawingService(AsyncMock(), settings)
    service.repo = mock_drawing_repo
    return service
