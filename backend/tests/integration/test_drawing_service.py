"""Integration tests for DrawingService against an in-memory repository."""

import pytest

from geodraw.config import Settings
from geodraw.core.exceptions import (
    DrawingFullError,
    DrawingNotFoundError,
    InvalidFeatureError,
    ShapeLimitReachedError,
    ShapeRejectedError,
)
from geodraw.models.schemas.feature import DrawnFeature
from geodraw.services.drawing_service import DrawingService, count_shapes
from tests.conftest import circle_feature, line_feature, polygon_feature, rect_ring, square_ring


def drawn(raw: dict) -> DrawnFeature:
    return DrawnFeature.model_validate(raw)


@pytest.fixture
def limited_service(mock_drawing_repo):
    settings = Settings(max_circles=1, max_features_per_drawing=3, max_points_per_shape=20)
    service = DrawingService(None, settings)
    service.repo = mock_drawing_repo
    return service


class TestDrawingLifecycle:
    @pytest.mark.asyncio
    async def test_create_and_status(self, drawing_service):
        created = await drawing_service.create_drawing()
        status = await drawing_service.get_drawing(created.drawing_id)

        assert status.drawing_id == created.drawing_id
        assert status.feature_count == 0
        assert status.shape_counts == {"polygon": 0, "rectangle": 0, "circle": 0, "line": 0}
        assert status.shape_limits["line"] is None
        assert status.shape_limits["circle"] == 5

    @pytest.mark.asyncio
    async def test_unknown_drawing(self, drawing_service):
        with pytest.raises(DrawingNotFoundError):
            await drawing_service.get_drawing("missing")
        with pytest.raises(DrawingNotFoundError):
            await drawing_service.submit_feature("missing", drawn(circle_feature(0, 0, 10)))

    @pytest.mark.asyncio
    async def test_delete(self, drawing_service):
        created = await drawing_service.create_drawing()
        assert await drawing_service.delete_drawing(created.drawing_id) is True
        with pytest.raises(DrawingNotFoundError):
            await drawing_service.list_features(created.drawing_id)


class TestSubmitFeature:
    @pytest.mark.asyncio
    async def test_accepted_as_drawn(self, drawing_service):
        drawing_id = (await drawing_service.create_drawing()).drawing_id
        raw = polygon_feature(square_ring(0, 0, 0.01), id="p1", name="yard")

        result = await drawing_service.submit_feature(drawing_id, drawn(raw))

        assert result.status == "accepted"
        assert result.was_trimmed is False
        assert result.feature.geometry == {"type": "Polygon", "coordinates": [square_ring(0, 0, 0.01)]}
        assert result.feature.properties == {"name": "yard", "id": "p1", "shape_type": "polygon"}

    @pytest.mark.asyncio
    async def test_trimmed_against_existing(self, drawing_service):
        drawing_id = (await drawing_service.create_drawing()).drawing_id
        await drawing_service.submit_feature(drawing_id, drawn(polygon_feature(square_ring(0, 0, 0.01))))

        result = await drawing_service.submit_feature(
            drawing_id, drawn(polygon_feature(square_ring(0.005, 0, 0.01), id="p2"))
        )

        assert result.status == "trimmed"
        assert result.was_trimmed is True
        assert result.used_fallback is False
        assert result.result_area_m2 == pytest.approx(result.original_area_m2 / 2, rel=1e-3)

        listed = await drawing_service.list_features(drawing_id)
        assert listed.count == 2
        assert listed.features[1].properties["id"] == "p2"
        assert listed.features[1].geometry == result.feature.geometry

    @pytest.mark.asyncio
    async def test_rejected_shape_is_not_stored(self, drawing_service):
        drawing_id = (await drawing_service.create_drawing()).drawing_id
        await drawing_service.submit_feature(drawing_id, drawn(polygon_feature(square_ring(0, 0, 0.01))))

        with pytest.raises(ShapeRejectedError) as exc_info:
            await drawing_service.submit_feature(
                drawing_id, drawn(circle_feature(0.005, 0.005, 20))
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.reason == "new_inside_existing"
        assert (await drawing_service.list_features(drawing_id)).count == 1

    @pytest.mark.asyncio
    async def test_lines_are_unlimited_and_never_blocked(self, drawing_service):
        drawing_id = (await drawing_service.create_drawing()).drawing_id
        await drawing_service.submit_feature(drawing_id, drawn(polygon_feature(square_ring(0, 0, 0.01))))

        for i in range(12):
            result = await drawing_service.submit_feature(
                drawing_id, drawn(line_feature([[-0.01, 0.0005 * i], [0.02, 0.0005 * i]]))
            )
            assert result.status == "accepted"

        status = await drawing_service.get_drawing(drawing_id)
        assert status.shape_counts["line"] == 12

    @pytest.mark.asyncio
    async def test_kind_limit(self, limited_service):
        drawing_id = (await limited_service.create_drawing()).drawing_id
        await limited_service.submit_feature(drawing_id, drawn(circle_feature(0, 0, 10)))

        with pytest.raises(ShapeLimitReachedError) as exc_info:
            await limited_service.submit_feature(drawing_id, drawn(circle_feature(1, 1, 10)))

        assert exc_info.value.detail == "Maximum 1 circles allowed"

    @pytest.mark.asyncio
    async def test_trimmed_circle_counts_as_polygon(self, limited_service):
        drawing_id = (await limited_service.create_drawing()).drawing_id
        await limited_service.submit_feature(drawing_id, drawn(polygon_feature(square_ring(0, -0.01, 0.02))))

        result = await limited_service.submit_feature(drawing_id, drawn(circle_feature(0, 0, 300)))
        assert result.feature.properties["shape_type"] == "polygon"
        assert "radius" not in result.feature.properties

        result = await limited_service.submit_feature(drawing_id, drawn(circle_feature(1, 1, 10)))
        assert result.status == "accepted"

        features = (await limited_service.list_features(drawing_id)).features
        assert count_shapes([f.model_dump() for f in features]) == {
            "polygon": 2,
            "rectangle": 0,
            "circle": 1,
            "line": 0,
        }

    @pytest.mark.asyncio
    async def test_drawing_full(self, limited_service):
        drawing_id = (await limited_service.create_drawing()).drawing_id
        for i in range(3):
            await limited_service.submit_feature(
                drawing_id, drawn(line_feature([[0, i], [1, i]]))
            )

        with pytest.raises(DrawingFullError):
            await limited_service.submit_feature(drawing_id, drawn(line_feature([[0, 5], [1, 5]])))

    @pytest.mark.asyncio
    async def test_too_many_positions(self, limited_service):
        drawing_id = (await limited_service.create_drawing()).drawing_id
        points = [[0.001 * i, 0] for i in range(21)]

        with pytest.raises(InvalidFeatureError):
            await limited_service.submit_feature(drawing_id, drawn(line_feature(points)))

    @pytest.mark.asyncio
    async def test_duplicate_id(self, drawing_service):
        drawing_id = (await drawing_service.create_drawing()).drawing_id
        await drawing_service.submit_feature(drawing_id, drawn(circle_feature(0, 0, 10, id="dup")))

        with pytest.raises(InvalidFeatureError) as exc_info:
            await drawing_service.submit_feature(drawing_id, drawn(circle_feature(1, 1, 10, id="dup")))

        assert "already exists" in exc_info.value.detail


class TestExport:
    @pytest.mark.asyncio
    async def test_export_keeps_insertion_order(self, drawing_service):
        drawing_id = (await drawing_service.create_drawing()).drawing_id
        submissions = [
            polygon_feature(rect_ring(0, 0, 0.01, 0.01), shape_type="rectangle", id="r"),
            circle_feature(1, 1, 40, id="c"),
            line_feature([[0, 0], [1, 1]], id="l"),
        ]
        for raw in submissions:
            await drawing_service.submit_feature(drawing_id, drawn(raw))

        collection = await drawing_service.export_geojson(drawing_id)

        assert collection.type == "FeatureCollection"
        assert [f["properties"]["id"] for f in collection.features] == ["r", "c", "l"]
        assert collection.features[1]["geometry"]["type"] == "Point"
        assert collection.features[1]["properties"]["radius"] == 40
