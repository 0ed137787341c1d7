"""
Cache-or-fetch helper backed by Redis.

Values are stored as JSON with a per-entry TTL; Redis drops an entry once its
TTL elapses, so an expired value is never handed back. Producer failures are
not cached.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

import redis

from app.core.config import settings

logger = logging.getLogger(__name__)


def generate_cache_key(prefix: str, *args) -> str:
    """generate_cache_key('barcode', '3017620422003') -> 'barcode:3017620422003'"""
    return ":".join([prefix, *[str(arg) for arg in args]])


class LookupCache:

    def __init__(self, redis_client: redis.Redis, default_ttl: Optional[float] = None):
        self.redis_client = redis_client
        self.default_ttl = default_ttl if default_ttl is not None else settings.cache_ttl_seconds

    def get(self, key: str) -> Tuple[bool, Any]:
        """Return (hit, value). A stored JSON null is a hit."""
        cached = self.redis_client.get(key)
        if cached is None:
            return False, None
        return True, json.loads(cached)

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        ttl = self.default_ttl if ttl is None else ttl
        ttl_ms = max(1, int(ttl * 1000))
        self.redis_client.set(key, json.dumps(value), px=ttl_ms)

    def invalidate(self, key: str):
        self.redis_client.delete(key)

    async def cache_or_fetch(
        self,
        key: str,
        producer: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        hit, value = self.get(key)
        if hit:
            logger.debug(f"Cache hit for {key}")
            return value

        # Exceptions from the producer propagate; nothing is stored for them
        value = await producer()
        self.set(key, value, ttl)
        return value
