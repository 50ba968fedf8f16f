"""Provider capability and shared HTTP plumbing."""

import datetime
from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError

from weather_aggregator.config import PROVIDER_ATTEMPT_TIMEOUT_SECONDS, PROVIDER_RETRIES
from weather_aggregator.forecast.models import ForecastFailure, ProviderOutcome

logger = logging.getLogger(__name__)

FETCH_FAILED_REASON = "Failed to fetch forecast"
DATE_NOT_FOUND_REASON = "No forecast found for the requested date"


class WeatherProvider(Protocol):
    """Anything that can produce one forecast outcome for a city and date."""

    source_name: str

    async def get_forecast(
        self,
        city: str,
        country_code: str,
        date: datetime.date
    ) -> ProviderOutcome:
        ...


class HttpWeatherProvider(ABC):
    """Base class for providers backed by a JSON REST API."""

    source_name: str = "unknown"

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = PROVIDER_ATTEMPT_TIMEOUT_SECONDS,
        retries: int = PROVIDER_RETRIES,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the HTTP client.

        Args:
            base_url: Provider API base URL
            headers: Extra headers sent with every request
            timeout: Per-attempt timeout in seconds
            retries: Connection retries handled by the transport
            transport: Custom transport (tests pass httpx.MockTransport)
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=retries)
        )

    async def get_forecast(
        self,
        city: str,
        country_code: str,
        date: datetime.date
    ) -> ProviderOutcome:
        """Fetch and normalize the forecast for one day.

        Transport and payload errors are reported as a failure outcome
        instead of being raised.
        """
        try:
            return await self._fetch_forecast(city, country_code, date)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.error(f"Failed to fetch forecast from {self.source_name}: {e}")
            return self.failure(FETCH_FAILED_REASON)

    @abstractmethod
    async def _fetch_forecast(
        self,
        city: str,
        country_code: str,
        date: datetime.date
    ) -> ProviderOutcome:
        """Fetch and normalize the forecast, raising on transport or payload errors."""

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a path relative to the base URL and decode the JSON body.

        Raises:
            httpx.HTTPStatusError: On a non-success status
            httpx.RequestError: On network failure
        """
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from {self.source_name}: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error to {self.source_name}: {e}")
            raise

    def failure(self, reason: str) -> ForecastFailure:
        return ForecastFailure(source=self.source_name, reason=reason)

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
