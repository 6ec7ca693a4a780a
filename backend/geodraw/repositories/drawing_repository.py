"""Drawing repository for Redis operations."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis


class DrawingRepository:
    """Data access layer for drawings and their accepted features in Redis.

    Features are kept in a Redis list so insertion order is preserved and
    the list only ever grows by appending.
    """

    def __init__(self, redis: Redis, ttl_seconds: int):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _meta_key(self, drawing_id: str) -> str:
        return f"drawing:{drawing_id}:meta"

    def _features_key(self, drawing_id: str) -> str:
        return f"drawing:{drawing_id}:features"

    async def create(self) -> dict[str, Any]:
        """Create a new empty drawing. Returns drawing metadata."""
        drawing_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)

        meta = {
            "drawing_id": drawing_id,
            "created_at": now.isoformat(),
            "updated_at": None,
        }

        await self.redis.set(
            self._meta_key(drawing_id),
            json.dumps(meta),
            ex=self.ttl_seconds,
        )
        return meta

    async def get_meta(self, drawing_id: str) -> dict[str, Any] | None:
        """Get drawing metadata. Returns None if not found or expired."""
        data = await self.redis.get(self._meta_key(drawing_id))
        if data is None:
            return None
        return json.loads(data)

    async def get_features(self, drawing_id: str) -> list[dict[str, Any]]:
        """Get all accepted features, oldest first."""
        data = await self.redis.lrange(self._features_key(drawing_id), 0, -1)
        return [json.loads(item) for item in data]

    async def append_feature(self, drawing_id: str, feature: dict[str, Any]) -> bool:
        """
        Append an accepted feature and refresh TTL.
        Returns False if drawing not found.
        """
        meta = await self.get_meta(drawing_id)
        if meta is None:
            return False

        meta["updated_at"] = datetime.now(timezone.utc).isoformat()

        meta_key = self._meta_key(drawing_id)
        features_key = self._features_key(drawing_id)

        pipe = self.redis.pipeline()
        pipe.rpush(features_key, json.dumps(feature))
        pipe.expire(features_key, self.ttl_seconds)
        pipe.set(meta_key, json.dumps(meta), ex=self.ttl_seconds)
        await pipe.execute()

        return True

    async def delete(self, drawing_id: str) -> bool:
        """Delete drawing and its features. Returns True if deleted."""
        pipe = self.redis.pipeline()
        pipe.delete(self._meta_key(drawing_id))
        pipe.delete(self._features_key(drawing_id))
        results = await pipe.execute()

        return results[0] > 0

    async def get_ttl(self, drawing_id: str) -> int | None:
        """Get remaining TTL in seconds. Returns None if key doesn't exist."""
        ttl = await self.redis.ttl(self._meta_key(drawing_id))
        if ttl < 0:
            return None
        return ttl
