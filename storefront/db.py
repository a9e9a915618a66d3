"""
Database Module - Upstash Redis client

Provides the singleton synchronous Upstash Redis client used for:
- Cart persistence for server-side shopper sessions
- Realtime cart streams
"""

import os
from typing import Optional

from upstash_redis import Redis

from storefront.errors import ERROR_REDIS_NOT_CONFIGURED

# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

_redis_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Cart operations are synchronous end to end, so only the sync client
    is exposed here.
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        _redis_client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    CART = "cart:"  # cart:{session_id}:{key}
    CART_STREAM = "stream:realtime:cart:"  # stream:realtime:cart:{session_id}

    @staticmethod
    def cart_key(session_id: str, key: str) -> str:
        return f"{RedisKeys.CART}{session_id}:{key}"

    @staticmethod
    def cart_stream_key(session_id: str) -> str:
        return f"{RedisKeys.CART_STREAM}{session_id}"


class TTL:
    """Time-to-live constants for Redis keys."""

    CART = int(os.environ.get("CART_TTL_SECONDS", "86400"))  # 24 hours
