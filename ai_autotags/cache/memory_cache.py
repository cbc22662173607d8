"""In-process TTL cache for generation results."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..models.schemas import GeneratedProperties

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: GeneratedProperties
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl


class MemoryCache:
    """Dictionary-backed cache with lazy expiry.

    Expired entries are dropped when they are read; there is no background
    sweep. Values are copied on the way in and out so callers never share a
    mutable result.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.stats = {"hits": 0, "misses": 0, "expired": 0}

    async def get(self, key: str) -> GeneratedProperties | None:
        entry = self._entries.get(key)
        if entry is None:
            self.stats["misses"] += 1
            logger.debug(f"Cache miss for key: {key[:12]}...")
            return None

        if entry.is_expired(self._clock()):
            # may already be gone if another reader evicted it
            self._entries.pop(key, None)
            self.stats["expired"] += 1
            self.stats["misses"] += 1
            logger.debug(f"Cache entry expired for key: {key[:12]}...")
            return None

        self.stats["hits"] += 1
        logger.debug(f"Cache hit for key: {key[:12]}...")
        return entry.value.model_copy(deep=True)

    async def put(self, key: str, value: GeneratedProperties) -> None:
        self._entries[key] = CacheEntry(
            value=value.model_copy(deep=True),
            created_at=self._clock(),
            ttl=self.ttl_seconds,
        )

    async def invalidate_all(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        if count:
            logger.info(f"Invalidated {count} cache entries")
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict:
        total = self.stats["hits"] + self.stats["misses"]
        hit_rate = (self.stats["hits"] / total * 100) if total > 0 else 0
        return {
            **self.stats,
            "entries": len(self._entries),
            "total_requests": total,
            "hit_rate": f"{hit_rate:.2f}%",
        }
