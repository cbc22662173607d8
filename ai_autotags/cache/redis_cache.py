"""Redis-backed cache for generation results."""

from __future__ import annotations

import logging
import time

import redis.asyncio as redis  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError
from redis.exceptions import RedisError

from ..models.schemas import GeneratedProperties

logger = logging.getLogger(__name__)


class CacheConfig(BaseModel):
    """Configuration for the Redis cache."""

    url: str = "redis://localhost:6379/0"
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    ttl_seconds: int = 3600
    prefix: str = "autotags:"
    track_stats: bool = True


class RedisCache:
    """Redis cache storing results as JSON under a key prefix.

    Expiry is delegated to Redis (``SETEX``). Connection and command errors
    are logged and behave like a cache miss so generation still works when
    Redis is down.
    """

    def __init__(self, config: CacheConfig, client: redis.Redis | None = None):
        self.config = config
        self.client: redis.Redis | None = client
        self._connected = client is not None

        self.stats = {
            "hits": 0,
            "misses": 0,
            "errors": 0,
            "total_latency_saved_ms": 0.0,
        }

    async def connect(self) -> bool:
        """Connect to the Redis server from ``config.url``."""
        if self._connected:
            return True

        try:
            self.client = redis.from_url(
                self.config.url,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                decode_responses=True,
            )
            await self.client.ping()
            self._connected = True
            logger.info("Connected to Redis cache")
            return True

        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.client = None
            self._connected = False
            return False

    async def disconnect(self) -> None:
        if self.client is not None:
            await self.client.aclose()
        self.client = None
        self._connected = False
        logger.info("Disconnected from Redis cache")

    def _key(self, key: str) -> str:
        return f"{self.config.prefix}{key}"

    async def get(self, key: str) -> GeneratedProperties | None:
        """Get a cached result if available."""
        if not await self.connect() or self.client is None:
            return None

        try:
            start_time = time.time()
            data = await self.client.get(self._key(key))

            if data:
                result = GeneratedProperties.model_validate_json(data)
                elapsed_ms = (time.time() - start_time) * 1000

                if self.config.track_stats:
                    self.stats["hits"] += 1
                    # Estimate saved latency (a provider call is ~1s)
                    self.stats["total_latency_saved_ms"] += 1000 - elapsed_ms

                logger.debug(
                    f"Cache hit for key: {key[:12]}... (latency: {elapsed_ms:.2f}ms)"
                )
                return result

            if self.config.track_stats:
                self.stats["misses"] += 1

            logger.debug(f"Cache miss for key: {key[:12]}...")
            return None

        except (RedisError, ValidationError) as e:
            if self.config.track_stats:
                self.stats["errors"] += 1
            logger.error(f"Cache get error: {e}")
            return None

    async def put(self, key: str, value: GeneratedProperties) -> None:
        """Cache a generation result."""
        if not await self.connect() or self.client is None:
            return

        try:
            await self.client.setex(
                self._key(key), self.config.ttl_seconds, value.model_dump_json()
            )
            logger.debug(
                f"Cached result for key: {key[:12]}... (TTL: {self.config.ttl_seconds}s)"
            )
        except RedisError as e:
            if self.config.track_stats:
                self.stats["errors"] += 1
            logger.error(f"Cache set error: {e}")

    async def invalidate_all(self) -> int:
        """Delete every entry under the configured prefix."""
        if not await self.connect() or self.client is None:
            return 0

        try:
            keys = []
            async for key in self.client.scan_iter(match=f"{self.config.prefix}*"):
                keys.append(key)

            if keys:
                await self.client.delete(*keys)
                logger.info(f"Invalidated {len(keys)} cache entries")

            return len(keys)

        except RedisError as e:
            logger.error(f"Cache invalidation error: {e}")
            return 0

    def get_stats(self) -> dict:
        """Get cache statistics."""
        if not self.config.track_stats:
            return {}

        total_requests = self.stats["hits"] + self.stats["misses"]
        hit_rate = (
            (self.stats["hits"] / total_requests * 100) if total_requests > 0 else 0
        )

        return {
            "hits": self.stats["hits"],
            "misses": self.stats["misses"],
            "errors": self.stats["errors"],
            "hit_rate": f"{hit_rate:.2f}%",
            "total_requests": total_requests,
            "latency_saved_ms": f"{self.stats['total_latency_saved_ms']:.2f}",
        }
