"""Rate limiting implementation."""

import logging
import time
from typing import Optional

import redis.asyncio as redis

from weather_aggregator.config import (
    RATE_LIMIT_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMIT_REDIS_KEY_PREFIX
)
from weather_aggregator.redis_client import create_redis_client

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiter on a Redis sorted set.

    The window is shared by every instance pointing at the same Redis.
    Requests are allowed if Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per window
            window_seconds: Window length in seconds
        """
        self.redis_client = redis_client or create_redis_client()
        self.max_requests = max_requests
        self.window_size = window_seconds
        self.sorted_set_key = f"{RATE_LIMIT_REDIS_KEY_PREFIX}:weather"

    async def is_allowed(self) -> tuple[bool, int]:
        """Check if a request is allowed under the rate limit.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
            - is_allowed: True if request should be allowed
            - retry_after_seconds: Seconds to wait before retrying (0 if allowed)
        """
        try:
            current_time = time.time()
            # Use microseconds
            current_timestamp = int(current_time * 1000000)
            window_start = (current_time - self.window_size) * 1000000

            pipe = self.redis_client.pipeline()
            pipe.zadd(self.sorted_set_key, {str(current_timestamp): current_timestamp})
            pipe.zremrangebyscore(self.sorted_set_key, 0, window_start)
            pipe.zcard(self.sorted_set_key)
            pipe.expire(self.sorted_set_key, int(self.window_size * 2))

            _, _, request_count, _ = await pipe.execute()

            if request_count > self.max_requests:
                retry_after = max(1, int(self.window_size))
                logger.debug(f"Rate limited: count={request_count}, max={self.max_requests}, retry_after={retry_after}")
                return False, retry_after

            logger.debug(f"Not rate limited: count={request_count}, max={self.max_requests}")
            return True, 0

        except Exception as e:
            # Allow request if Redis is down
            logger.error(f"Rate limiter error: {e}")
            return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
