"""Fan-out/fan-in forecast aggregation across providers."""

import asyncio
import logging
from typing import List, Optional, Sequence

from weather_aggregator.config import (
    CACHE_TIMEOUT_SECONDS, FORECAST_CACHE_EXPIRE_SECONDS, PROVIDER_TOTAL_TIMEOUT_SECONDS
)
from weather_aggregator.forecast.cache import ForecastCache, forecast_cache_key
from weather_aggregator.forecast.clock import Clock, SystemClock
from weather_aggregator.forecast.models import (
    AggregateResponse, ForecastFailure, ForecastRequest, ForecastSuccess,
    LocationInfo, ProviderOutcome, ResponseMetadata
)
from weather_aggregator.providers.base import WeatherProvider

logger = logging.getLogger(__name__)

TIMEOUT_REASON = "timeout"
NO_OUTCOME_REASON = "Provider returned no forecast"


class ForecastAggregator:
    """Queries every provider concurrently and merges the results.

    The aggregator never raises because of a provider or cache fault:
    provider faults become failure outcomes and cache faults are logged
    and treated as if no cache existed.
    """

    def __init__(
        self,
        providers: Sequence[WeatherProvider],
        cache: ForecastCache,
        clock: Optional[Clock] = None,
        cache_expire_seconds: int = FORECAST_CACHE_EXPIRE_SECONDS,
        provider_timeout: Optional[float] = PROVIDER_TOTAL_TIMEOUT_SECONDS,
        cache_timeout: Optional[float] = CACHE_TIMEOUT_SECONDS
    ):
        """Initialize the aggregator.

        Args:
            providers: Providers to query, in response order
            cache: Cache for assembled responses
            clock: Source of the current time (system clock if None)
            cache_expire_seconds: TTL of cached responses
            provider_timeout: Upper bound for a single provider call in
                seconds, or None to wait as long as the provider takes
            cache_timeout: Upper bound for a single cache read or write in
                seconds; a slower cache is treated as a miss
        """
        self.providers = list(providers)
        self.cache = cache
        self.clock = clock or SystemClock()
        self.cache_expire_seconds = cache_expire_seconds
        self.provider_timeout = provider_timeout
        self.cache_timeout = cache_timeout

    async def handle(self, request: ForecastRequest) -> AggregateResponse:
        """Return the aggregated forecast for a request.

        Args:
            request: City, country code and date to forecast

        Returns:
            Cached response if one exists, otherwise a freshly assembled one
        """
        cache_key = forecast_cache_key(request)

        cached = await self._read_cached(cache_key)
        if cached is not None:
            logger.info(f"Serving forecast for {cache_key} from cache")
            return cached

        logger.info(f"Querying {len(self.providers)} providers for {cache_key}")
        outcomes = await self._fetch_all(request)

        response = AggregateResponse(
            date=request.date,
            location=LocationInfo(name=request.city, country_code=request.country_code),
            forecasts=outcomes,
            metadata=ResponseMetadata(generated_at=self.clock.now())
        )

        successes = sum(1 for outcome in outcomes if isinstance(outcome, ForecastSuccess))
        logger.info(f"Aggregated {successes}/{len(outcomes)} successful forecasts for {cache_key}")

        if response.has_success:
            await self._store(cache_key, response)
        else:
            logger.warning(f"All providers failed for {cache_key}, response not cached")

        return response

    async def _read_cached(self, cache_key: str) -> Optional[AggregateResponse]:
        try:
            return await asyncio.wait_for(self.cache.get_response(cache_key), timeout=self.cache_timeout)
        except Exception as e:
            logger.warning(f"Failed to retrieve cached forecast for {cache_key}: {e!r}")
            return None

    async def _store(self, cache_key: str, response: AggregateResponse) -> None:
        try:
            await asyncio.wait_for(
                self.cache.set_response(cache_key, response, self.cache_expire_seconds),
                timeout=self.cache_timeout
            )
        except Exception as e:
            logger.warning(f"Failed to cache forecast for {cache_key}: {e!r}")

    async def _fetch_all(self, request: ForecastRequest) -> List[ProviderOutcome]:
        # gather keeps one result slot per task, in provider order
        tasks = [self._invoke(provider, request) for provider in self.providers]
        return list(await asyncio.gather(*tasks))

    async def _invoke(self, provider: WeatherProvider, request: ForecastRequest) -> ProviderOutcome:
        """Run one provider, converting anything it raises into a failure."""
        source = getattr(provider, "source_name", type(provider).__name__)
        try:
            outcome = await asyncio.wait_for(
                provider.get_forecast(request.city, request.country_code, request.date),
                timeout=self.provider_timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Provider {source} timed out after {self.provider_timeout}s")
            return ForecastFailure(source=source, reason=TIMEOUT_REASON)
        except Exception as e:
            logger.error(f"Provider {source} raised unexpectedly: {e!r}")
            return ForecastFailure(source=source, reason=f"Unexpected error: {type(e).__name__}")

        if not isinstance(outcome, (ForecastSuccess, ForecastFailure)):
            logger.error(f"Provider {source} returned {type(outcome).__name__} instead of an outcome")
            return ForecastFailure(source=source, reason=NO_OUTCOME_REASON)

        return outcome
