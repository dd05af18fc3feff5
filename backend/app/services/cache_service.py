"""Redis cache service for extracted search contexts."""

import hashlib
import json
import logging
from typing import Any

import redis.asyncio as redis

logger = logging.getLogger(__name__)

# TTLs in seconds
TTL_DEFAULT = 15 * 60             # 15 minutes
TTL_SEARCH_CONTEXT = 60 * 60      # 1 hour; keys carry the current month


class CacheService:
    """Redis-backed JSON cache. Every failure degrades to a miss."""

    def __init__(self, redis_url: str, enabled: bool = True):
        self.redis_url = redis_url
        self.enabled = enabled
        self._redis: redis.Redis | None = None

    async def _get_redis(self) -> redis.Redis | None:
        if not self.enabled:
            return None
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, skipping cache: {e}")
                self._redis = None
                return None
        return self._redis

    async def get(self, key: str) -> Any | None:
        """Get a value from cache. Returns None on miss or error."""
        try:
            r = await self._get_redis()
            if r is None:
                return None
            raw = await r.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception as e:
            logger.debug(f"Cache get failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = TTL_DEFAULT) -> bool:
        """Set a value in cache with TTL. Returns False on error."""
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.set(key, json.dumps(value, default=str), ex=ttl)
            return True
        except Exception as e:
            logger.debug(f"Cache set failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key."""
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.delete(key)
            return True
        except Exception:
            return False

    # Typed helpers

    def context_key(self, query: str, year: int, month: int) -> str:
        normalized = " ".join(query.lower().split())
        digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:32]
        return f"searchctx:{year}:{month:02d}:{digest}"

    async def get_context(self, query: str, year: int, month: int) -> dict | None:
        return await self.get(self.context_key(query, year, month))

    async def set_context(
        self, query: str, year: int, month: int, data: dict, ttl: int = TTL_SEARCH_CONTEXT
    ) -> bool:
        return await self.set(self.context_key(query, year, month), data, ttl)

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None
