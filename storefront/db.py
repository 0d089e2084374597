"""
Redis Module - Upstash Redis client for the shared cart slot

Provides a singleton sync Upstash Redis client. The cart engine is
synchronous, so only the sync client is exposed.
"""

import os
from typing import Optional

from upstash_redis import Redis

from storefront.errors import ERROR_REDIS_NOT_CONFIGURED


# Singleton instance
_sync_redis_client: Optional[Redis] = None


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        url = os.environ.get("UPSTASH_REDIS_REST_URL", "")
        token = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")
        if not url or not token:
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        _sync_redis_client = Redis(url=url, token=token)

    return _sync_redis_client


def reset_redis_client() -> None:
    """Drop the cached client (tests, credential rotation)."""
    global _sync_redis_client
    _sync_redis_client = None


# Redis key prefixes for organization
class RedisKeys:
    """Redis key prefixes for different data types."""

    # Cart snapshot storage
    CART = "cart:"  # cart:{namespace}

    @staticmethod
    def cart_key(namespace: str) -> str:
        return f"{RedisKeys.CART}{namespace}"
