"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from weather_aggregator.config import RATE_LIMIT_ENABLED
from weather_aggregator.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Enforce the shared rate limit on the weather API.

    Only paths under ``path_prefix`` count against the limit. Returns
    HTTP 429 when the limit is exceeded.
    """

    def __init__(
        self,
        app,
        rate_limiter: Optional[RateLimiter] = None,
        enabled: bool = RATE_LIMIT_ENABLED,
        path_prefix: str = "/api/v1/weather"
    ):
        """Initialize rate limit middleware.

        Args:
            app: ASGI application
            rate_limiter: Limiter to consult; limiting is off when None
            enabled: Whether limiting is applied at all
            path_prefix: Only requests under this path are limited
        """
        super().__init__(app)
        self.enabled = enabled
        self.path_prefix = path_prefix
        self.rate_limiter = rate_limiter if enabled else None
        if self.rate_limiter is not None:
            logger.info(
                f"Rate limit enabled: {self.enabled}, limit: {self.rate_limiter.max_requests} "
                f"req/{self.rate_limiter.window_size}s"
            )
        else:
            logger.info("Rate limit disabled")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/endpoint in chain

        Returns:
            HTTP response (either rate limit error or continued response)
        """
        if not self.enabled or self.rate_limiter is None:
            return await call_next(request)

        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        is_allowed, retry_after = await self.rate_limiter.is_allowed()

        if not is_allowed:
            request_host = request.client.host if request.client else "unknown"
            endpoint = f"{request.method} {request.url.path}"
            logger.warning(f"Rate limit exceeded for {request_host} accessing {endpoint}")

            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)

        # Add rate limit headers to response for transparency
        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = str(int(self.rate_limiter.window_size))

        return response
