"""
Redis caching utilities for booking reads
Reduces database load on the public booking listings
"""
import json
import logging
from typing import Any, Optional

from fastapi import Request
from redis.exceptions import RedisError

from .config import BOOKING_CACHE_TTL

logger = logging.getLogger(__name__)

BOOKINGS_ALL_KEY = "bookings:all"


class Cache:
    """Redis cache wrapper with automatic serialization

    A cache outage never fails a request: every error is logged and
    treated as a miss.
    """

    def __init__(self, redis_client):
        self.redis_client = redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        if self.redis_client is None:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except (RedisError, ValueError) as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = BOOKING_CACHE_TTL) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        if self.redis_client is None:
            return False

        try:
            serialized = json.dumps(value, default=str)
            self.redis_client.setex(key, ttl, serialized)
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except (RedisError, TypeError) as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, *keys: str) -> bool:
        """Delete values from cache"""
        if self.redis_client is None or not keys:
            return False

        try:
            self.redis_client.delete(*keys)
            logger.debug(f"✅ Cache DELETE: {', '.join(keys)}")
            return True
        except RedisError as e:
            logger.error(f"❌ Cache delete error for {keys}: {e}")
            return False


def get_cache(request: Request) -> Cache:
    """Dependency injection for Cache"""
    return Cache(request.app.state.redis)


def booking_key(booking_id: str) -> str:
    return f"bookings:{booking_id}"


def invalidate_booking_cache(cache: Cache, booking_id: Optional[str] = None) -> bool:
    """Drop the listing (and the single booking entry) after a write"""
    keys = [BOOKINGS_ALL_KEY]
    if booking_id:
        keys.append(booking_key(booking_id))
    return cache.delete(*keys)
