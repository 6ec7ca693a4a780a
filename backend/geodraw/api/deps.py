"""Dependency injection for routes."""

from fastapi import Depends

from geodraw.config import get_settings, Settings
from geodraw.infrastructure.redis import get_redis
from geodraw.services.drawing_service import DrawingService


def get_drawing_service(
    settings: Settings = Depends(get_settings),
) -> DrawingService:
    redis = get_redis()
    return DrawingService(redis, settings)
