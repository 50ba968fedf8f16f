"""Shared Redis client construction."""

import redis.asyncio as redis

from weather_aggregator.config import REDIS_URL, REDIS_SOCKET_TIMEOUT_SECONDS


def create_redis_client(url: str = REDIS_URL, timeout: float = REDIS_SOCKET_TIMEOUT_SECONDS) -> redis.Redis:
    """Create an async Redis client whose connects and commands time out.

    Args:
        url: Redis connection URL
        timeout: Connect and per-command socket timeout in seconds
    """
    return redis.from_url(url, socket_timeout=timeout, socket_connect_timeout=timeout)
