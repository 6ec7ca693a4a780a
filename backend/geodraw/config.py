"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = "GeoDraw"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    host: str = "0.0.0.0"
    port: int = 8000

    redis_url: str = "redis://localhost:6379/0"

    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    drawing_ttl_hours: int = 24
    max_features_per_drawing: int = 200
    max_points_per_shape: int = 1000

    # Per-kind limits; a negative value means unlimited
    max_polygons: int = 10
    max_rectangles: int = 5
    max_circles: int = 5
    max_lines: int = -1

    # Overlap resolution
    min_trim_area_m2: float = 0.0001
    circle_steps: int = 64

    export_filename: str = "drawn-features.geojson"

    def shape_limits(self) -> dict[str, int | None]:
        """Limits keyed by shape kind; None means unlimited."""
        limits = {
            "polygon": self.max_polygons,
            "rectangle": self.max_rectangles,
            "circle": self.max_circles,
            "line": self.max_lines,
        }
        return {kind: (limit if limit >= 0 else None) for kind, limit in limits.items()}


@lru_cache
def get_settings() -> Settings:
    return Settings()
