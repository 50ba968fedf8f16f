"""Forecast cache on top of a fastapi-cache backend."""

import logging
from typing import Optional

from fastapi_cache.backends import Backend

from weather_aggregator.forecast.models import AggregateResponse, ForecastRequest

logger = logging.getLogger(__name__)


def forecast_cache_key(request: ForecastRequest) -> str:
    """Build the cache key for a request, e.g. ``LONDON:GB:2025-06-01``."""
    return f"{request.city.upper()}:{request.country_code}:{request.date.isoformat()}"


class ForecastCache:
    """Key/value cache for aggregate responses and provider lookups.

    Errors from the backend are raised to the caller; deciding whether
    a failure matters is up to whoever uses the cache.
    """

    def __init__(self, backend: Backend, prefix: str = ""):
        """Initialize the cache.

        Args:
            backend: fastapi-cache backend (Redis or in-memory)
            prefix: Optional namespace prepended to every key
        """
        self.backend = backend
        self.prefix = prefix

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    async def get_text(self, key: str) -> Optional[str]:
        """Read a raw value, or None on miss."""
        raw = await self.backend.get(self._full_key(key))
        if not raw:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    async def set_text(self, key: str, value: str, expire: int) -> None:
        """Store a raw value with an expiry in seconds."""
        await self.backend.set(self._full_key(key), value.encode("utf-8"), expire=expire)

    async def get_response(self, key: str) -> Optional[AggregateResponse]:
        """Read and deserialize a cached aggregate response.

        Raises:
            ValidationError: If the cached payload is not a valid response
        """
        payload = await self.get_text(key)
        if payload is None:
            return None
        return AggregateResponse.model_validate_json(payload)

    async def set_response(self, key: str, response: AggregateResponse, expire: int) -> None:
        """Serialize and store an aggregate response."""
        await self.set_text(key, response.model_dump_json(by_alias=True), expire)
        logger.debug(f"Cached forecast under {self._full_key(key)} for {expire}s")
