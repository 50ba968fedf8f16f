"""Main FastAPI application for the weather forecast aggregator."""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Tuple

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_cache.backends import Backend
from fastapi_cache.backends.inmemory import InMemoryBackend
from fastapi_cache.backends.redis import RedisBackend

from weather_aggregator.api.endpoints import router as weather_router
from weather_aggregator.config import (
    HOST, PORT, DEBUG, API_KEY, REDIS_URL, CACHE_BACKEND, CACHE_PREFIX,
    RATE_LIMIT_ENABLED, missing_provider_settings
)
from weather_aggregator.forecast.aggregator import ForecastAggregator
from weather_aggregator.forecast.cache import ForecastCache
from weather_aggregator.forecast.clock import SystemClock
from weather_aggregator.logging_config import configure_logging
from weather_aggregator.middleware.rate_limit import RateLimitMiddleware
from weather_aggregator.providers.accuweather import AccuWeatherProvider
from weather_aggregator.providers.visualcrossing import VisualCrossingProvider
from weather_aggregator.providers.weatherapi import WeatherApiProvider
from weather_aggregator.rate_limiter import RateLimiter
from weather_aggregator.redis_client import create_redis_client

configure_logging(debug=DEBUG)
logger = logging.getLogger(__name__)


def create_cache_backend(backend_name: str = CACHE_BACKEND) -> Tuple[Backend, Optional[redis.Redis]]:
    """Build the cache backend named in configuration.

    Args:
        backend_name: "redis" or "memory"

    Returns:
        Tuple of (backend, redis_client); the client is None for the
        in-memory backend and must be closed by the caller otherwise
    """
    if backend_name == "memory":
        logger.info("Using in-memory cache backend")
        return InMemoryBackend(), None

    logger.info(f"Connecting to Redis at {REDIS_URL}")
    redis_client = create_redis_client()
    return RedisBackend(redis_client), redis_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build providers and the aggregator, and close them on shutdown."""
    providers = []
    redis_client = None
    try:
        missing = missing_provider_settings()
        if missing:
            raise RuntimeError(f"Missing provider configuration: {', '.join(missing)}")

        backend, redis_client = create_cache_backend(app.state.cache_backend)
        cache = ForecastCache(backend, prefix=CACHE_PREFIX)
        providers = [
            AccuWeatherProvider(cache=cache),
            WeatherApiProvider(),
            VisualCrossingProvider(),
        ]
        app.state.clock = SystemClock()
        app.state.aggregator = ForecastAggregator(providers, cache, clock=app.state.clock)
        logger.info(f"Configured providers: {', '.join(p.source_name for p in providers)}")

        logger.info("Starting Weather Forecast Aggregator")
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info("Shutting down Weather Forecast Aggregator")
        for provider in providers:
            try:
                await provider.aclose()
            except Exception as e:
                logger.error(f"Error closing {provider.source_name} client: {e}")

        if redis_client is not None:
            try:
                await redis_client.aclose()
            except Exception as e:
                logger.error(f"Error closing cache Redis client: {e}")

        rate_limiter = app.state.rate_limiter
        if rate_limiter is not None and hasattr(rate_limiter, "close"):
            try:
                await rate_limiter.close()
            except Exception as e:
                logger.error(f"Error closing rate limiter: {e}")


def create_app(
    api_key: str = API_KEY,
    rate_limit_enabled: bool = RATE_LIMIT_ENABLED,
    rate_limiter=None,
    use_lifespan: bool = True,
    cache_backend: str = CACHE_BACKEND
) -> FastAPI:
    """Create and configure FastAPI application.

    Rate limiting needs Redis. With the in-memory cache backend and no
    custom limiter it is switched off.

    Args:
        api_key: Key clients must send in the X-Api-Key header
        rate_limit_enabled: Whether to apply the shared rate limit
        rate_limiter: Custom limiter for the middleware (default Redis-backed)
        use_lifespan: Build providers on startup; tests set app.state themselves
        cache_backend: "redis" or "memory"

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Weather Forecast Aggregator",
        description="Daily forecasts merged from AccuWeather, WeatherAPI and Visual Crossing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan if use_lifespan else None
    )
    app.state.api_key = api_key
    app.state.cache_backend = cache_backend

    if rate_limit_enabled and rate_limiter is None:
        if cache_backend == "memory":
            logger.warning("Rate limiting disabled: it needs Redis and CACHE_BACKEND is memory")
            rate_limit_enabled = False
        else:
            rate_limiter = RateLimiter()
    app.state.rate_limiter = rate_limiter if rate_limit_enabled else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        rate_limiter=app.state.rate_limiter,
        enabled=rate_limit_enabled
    )

    app.include_router(weather_router)

    @app.get("/healthz", tags=["health"])
    async def health_check() -> dict:
        """Liveness check.

        Returns:
            Health status response
        """
        return {"status": "healthy", "service": "weather-aggregator"}

    return app


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "weather_aggregator.main:create_app",
        factory=True,
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
