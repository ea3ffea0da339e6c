"""
Cache backends for FIG data.

The image proxy and the athlete client only see ``CacheBackend``:
get/set/delete with a TTL plus prefix helpers for cache management.
``InMemoryCache`` keeps entries in the process; ``RedisCache`` shares
them between workers. Values must be JSON serialisable.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CacheBackend:
    """Key/value cache with per-entry TTL in seconds."""

    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def set(self, key: str, value: Any, ttl: int) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def keys(self, prefix: str = "") -> List[str]:
        raise NotImplementedError

    async def clear(self, prefix: str = "") -> int:
        removed = 0
        for key in await self.keys(prefix):
            if await self.delete(key):
                removed += 1
        return removed

    async def close(self) -> None:
        return None


class InMemoryCache(CacheBackend):
    """
    Process-local cache. Expired entries are dropped lazily on access and
    swept on every write; past ``max_entries`` the oldest writes go first.
    """

    def __init__(self, clock=time.monotonic, max_entries: int = 100):
        self._clock = clock
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def _live(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry[0] <= self._clock():
            self._entries.pop(key, None)
            return False
        return True

    def _evict(self) -> None:
        now = self._clock()
        for key in [key for key, (expires, _) in self._entries.items() if expires <= now]:
            del self._entries[key]
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Evicted {oldest} from the in-memory cache")

    async def get(self, key: str) -> Optional[Any]:
        if not self._live(key):
            return None
        return self._entries[key][1]

    async def set(self, key: str, value: Any, ttl: int) -> None:
        # Re-insert so dict order stays write order
        self._entries.pop(key, None)
        self._entries[key] = (self._clock() + ttl, value)
        self._evict()

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def keys(self, prefix: str = "") -> List[str]:
        return [key for key in list(self._entries) if key.startswith(prefix) and self._live(key)]


class RedisCache(CacheBackend):
    """Redis-backed cache using SETEX for TTLs."""

    def __init__(self, redis_client, namespace: str = "tournament-registration:"):
        self.redis_client = redis_client
        self.namespace = namespace

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisCache":
        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self.redis_client.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Dropping undecodable cache entry {key}: {e}")
            await self.delete(key)
            return None

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self.redis_client.setex(self._key(key), ttl, json.dumps(value))

    async def delete(self, key: str) -> bool:
        return bool(await self.redis_client.delete(self._key(key)))

    async def keys(self, prefix: str = "") -> List[str]:
        found = []
        async for raw_key in self.redis_client.scan_iter(match=f"{self._key(prefix)}*"):
            found.append(raw_key[len(self.namespace):])
        return found

    async def close(self) -> None:
        await self.redis_client.aclose()


def build_cache(redis_url: Optional[str] = None, max_entries: int = 100) -> CacheBackend:
    if redis_url:
        logger.info("Using Redis cache backend")
        return RedisCache.from_url(redis_url)
    logger.info("Using in-memory cache backend")
    return InMemoryCache(max_entries=max_entries)
