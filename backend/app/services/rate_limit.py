"""Fixed-window request limiter for the auth endpoints, counted in Redis."""

import logging

import redis
from fastapi import Depends, Request

from app.core.config import settings
from app.core.errors import RateLimitError
from app.core.redis_client import get_redis
from app.services.cache import generate_cache_key

logger = logging.getLogger(__name__)


class RateLimiter:

    def __init__(self, scope: str, max_requests: int, window_seconds: int):
        self.scope = scope
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def hit(self, redis_client: redis.Redis, identifier: str) -> int:
        """Count one request for identifier and return the total in this window"""
        key = generate_cache_key("ratelimit", self.scope, identifier)
        count = redis_client.incr(key)
        if count == 1:
            # First hit opens the window
            redis_client.expire(key, self.window_seconds)
        return int(count)

    def __call__(self, request: Request, redis_client: redis.Redis = Depends(get_redis)):
        identifier = request.client.host if request.client else "unknown"
        count = self.hit(redis_client, identifier)
        if count > self.max_requests:
            logger.warning(f"Rate limit exceeded on {self.scope} for {identifier}")
            raise RateLimitError(
                "Too many requests from this IP, please try again after 15 minutes",
                "RATE_LIMITED",
            )


auth_rate_limiter = RateLimiter(
    scope="auth",
    max_requests=settings.auth_rate_limit_requests,
    window_seconds=settings.auth_rate_limit_window_seconds,
)
