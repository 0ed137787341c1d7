# backend/app/core/redis_client.py
"""Redis connection shared by the lookup cache and the auth rate limiter."""

from typing import Optional
import logging

import redis

from app.core.config import settings

logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get or create the Redis client."""
    global _client
    if _client is None:
        logger.info(f"Connecting to Redis at {settings.redis_url}")
        _client = redis.from_url(settings.redis_url)
    return _client


def close_redis_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("Redis client closed")


# FastAPI dependency
def get_redis() -> redis.Redis:
    return get_redis_client()
