"""Custom exception classes."""

from fastapi import HTTPException, status


class GeoDrawException(HTTPException):
    """Base exception for application errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: str = "GEODRAW_ERROR",
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


class DrawingNotFoundError(GeoDrawException):
    def __init__(self, drawing_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Drawing not found: {drawing_id}",
            code="DRAWING_NOT_FOUND",
        )


class ShapeLimitReachedError(GeoDrawException):
    def __init__(self, shape_type: str, limit: int):
        self.shape_type = shape_type
        self.limit = limit
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Maximum {limit} {shape_type}s allowed",
            code="SHAPE_LIMIT_REACHED",
        )


class DrawingFullError(GeoDrawException):
    def __init__(self, limit: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Drawing already holds the maximum of {limit} features",
            code="DRAWING_FULL",
        )


class ShapeRejectedError(GeoDrawException):
    """The overlap check refused the shape."""

    MESSAGES = {
        "new_inside_existing": "Shape lies entirely inside an existing shape",
        "existing_inside_new": "Shape cannot fully enclose an existing shape",
        "area_below_threshold": "Shape completely removed due to overlap",
        "degenerate_geometry": "Shape could not be trimmed against existing shapes",
        "invalid_input": "Shape has no usable area",
    }

    def __init__(self, reason: str):
        self.reason = reason
        message = self.MESSAGES.get(reason, "Shape overlaps existing shape")
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{message}. Operation blocked.",
            code="SHAPE_REJECTED",
        )


class InvalidFeatureError(GeoDrawException):
    def __init__(self, errors: list[str]):
        self.errors = errors
        detail = f"Feature validation failed with {len(errors)} error(s): {'; '.join(errors[:5])}"
        if len(errors) > 5:
            detail += f" ... and {len(errors) - 5} more"
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code="INVALID_FEATURE",
        )
