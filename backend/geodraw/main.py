"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geodraw.config import get_settings
from geodraw.api.routes import drawing, health
from geodraw.core.exceptions import GeoDrawException
from geodraw.infrastructure.redis import init_redis, close_redis


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_redis()
    yield
    await close_redis()


async def geodraw_exception_handler(request: Request, exc: GeoDrawException) -> JSONResponse:
    content = {"detail": exc.detail, "code": exc.code}
    reason = getattr(exc, "reason", None)
    if reason:
        content["reason"] = reason
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Map drawing backend with overlap-free shape storage",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GeoDrawException, geodraw_exception_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(drawing.router, prefix="/api/v1/drawings", tags=["Drawings"])

    return app


app = create_app()
