"""
Redis connection factory
Backs the OTP store and the booking response cache
"""

import logging

import redis

from .config import (
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_SOCKET_TIMEOUT,
    REDIS_SSL,
    REDIS_URL,
)

logger = logging.getLogger(__name__)


def _mask_url(redis_url: str) -> str:
    if "@" in redis_url:
        url_parts = redis_url.split("@")
        protocol = url_parts[0].split(":")[0]
        return f"{protocol}:****@{url_parts[1]}"
    return "****"


def create_redis_client() -> redis.Redis:
    """
    Create the process-wide Redis client.
    Supports both a REDIS_URL (managed Redis) and individual host settings.
    Constructed once at startup and passed to the services that need it.
    """
    logger.info("🔄 Initializing Redis connection...")

    if REDIS_URL:
        logger.info(f"📡 Using Redis URL connection: {_mask_url(REDIS_URL)}")
        client = redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
            health_check_interval=30,
            max_connections=20,
        )
    else:
        logger.info(
            f"📡 Using individual Redis configuration: {REDIS_HOST}:{REDIS_PORT}/{REDIS_DB} "
            f"(SSL: {'Enabled' if REDIS_SSL else 'Disabled'})"
        )
        client = redis.Redis(
            host=REDIS_HOST,
            port=REDIS_PORT,
            password=REDIS_PASSWORD,
            db=REDIS_DB,
            ssl=REDIS_SSL,
            decode_responses=True,
            socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
            health_check_interval=30,
            max_connections=20,
        )

    try:
        client.ping()
        logger.info("✅ Redis connected successfully")
    except redis.exceptions.RedisError as e:
        # Cache degrades to misses; OTP calls will surface UnavailableError
        logger.warning(f"⚠️ Redis ping failed at startup: {e}")

    return client
