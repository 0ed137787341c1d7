"""Shared FastAPI dependencies for the routers."""

import redis
from fastapi import Depends

from app.core.redis_client import get_redis
from app.services.cache import LookupCache
from app.services.open_food_facts import OpenFoodFactsClient


def get_lookup_cache(redis_client: redis.Redis = Depends(get_redis)) -> LookupCache:
    return LookupCache(redis_client)


def get_food_client(cache: LookupCache = Depends(get_lookup_cache)) -> OpenFoodFactsClient:
    return OpenFoodFactsClient(cache)
