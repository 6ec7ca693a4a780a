"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel
from redis.exceptions import RedisError

from geodraw.config import get_settings
from geodraw.infrastructure import redis as redis_infra

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str


class ReadyResponse(BaseModel):
    status: str
    redis: str


@router.get("/health", response_model=HealthResponse)
async def health():
    settings = get_settings()
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/health/ready", response_model=ReadyResponse, status_code=status.HTTP_200_OK)
async def ready():
    redis_status = "disconnected"

    if redis_infra.redis_client:
        try:
            await redis_infra.redis_client.ping()
            redis_status = "connected"
        except RedisError:
            redis_status = "error"

    overall = "ready" if redis_status == "connected" else "not_ready"
    return ReadyResponse(status=overall, redis=redis_status)
