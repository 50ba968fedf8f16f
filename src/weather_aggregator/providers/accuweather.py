"""AccuWeather forecast provider."""

import datetime
import logging
from typing import List, Optional

from pydantic import TypeAdapter

from weather_aggregator.config import (
    ACCUWEATHER_API_KEY, ACCUWEATHER_BASE_URL, LOCATION_CACHE_EXPIRE_SECONDS
)
from weather_aggregator.forecast.cache import ForecastCache
from weather_aggregator.forecast.models import (
    ForecastSuccess, NormalizedForecast, ProviderOutcome, average_temperature
)
from weather_aggregator.providers.base import DATE_NOT_FOUND_REASON, HttpWeatherProvider
from weather_aggregator.providers.models import (
    AccuWeatherDailyForecast, AccuWeatherForecastResponse, AccuWeatherLocation
)

logger = logging.getLogger(__name__)

LOCATION_NOT_FOUND_REASON = "Location not found"

_locations_adapter = TypeAdapter(List[AccuWeatherLocation])


def location_cache_key(city: str, country_code: str) -> str:
    """Cache key for a resolved AccuWeather location key."""
    return f"accu-loc:{city.upper()}:{country_code.upper()}"


class AccuWeatherProvider(HttpWeatherProvider):
    """Daily forecasts from AccuWeather.

    AccuWeather addresses forecasts by its own location key, so each city
    is first resolved through the city search endpoint. Resolved keys are
    cached for 30 days.
    """

    source_name = "AccuWeather"

    def __init__(
        self,
        cache: Optional[ForecastCache] = None,
        api_key: str = ACCUWEATHER_API_KEY,
        base_url: str = ACCUWEATHER_BASE_URL,
        **kwargs
    ):
        """Initialize the AccuWeather provider.

        Args:
            cache: Cache for resolved location keys (lookups are not cached if None)
            api_key: AccuWeather API key, sent as a bearer token
            base_url: AccuWeather API base URL
            **kwargs: Passed through to HttpWeatherProvider
        """
        super().__init__(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            **kwargs
        )
        self.cache = cache

    async def _fetch_forecast(
        self,
        city: str,
        country_code: str,
        date: datetime.date
    ) -> ProviderOutcome:
        location_key = await self.get_location_key(city, country_code)
        if location_key is None:
            return self.failure(LOCATION_NOT_FOUND_REASON)

        data = await self._get_json(
            f"/forecasts/v1/daily/5day/{location_key}",
            params={"metric": "true", "details": "true"}
        )
        response = AccuWeatherForecastResponse.model_validate(data)

        date_prefix = date.isoformat()
        matching_day = next(
            (day for day in response.daily_forecasts if day.date.startswith(date_prefix)),
            None
        )
        if matching_day is None:
            logger.info(f"AccuWeather has no forecast for {date_prefix} at location {location_key}")
            return self.failure(DATE_NOT_FOUND_REASON)

        return ForecastSuccess(source=self.source_name, forecast=self._normalize(matching_day))

    async def get_location_key(self, city: str, country_code: str) -> Optional[str]:
        """Resolve a city to an AccuWeather location key.

        Returns:
            Location key, or None if the search found nothing
        """
        cache_key = location_cache_key(city, country_code)
        cached = await self._read_cached_location(cache_key)
        if cached is not None:
            return cached

        data = await self._get_json(
            "/locations/v1/cities/search",
            params={"q": city, "countryCode": country_code}
        )
        locations = _locations_adapter.validate_python(data)

        if not locations:
            logger.warning(f"AccuWeather location search returned no results for {city}, {country_code}")
            return None

        location_key = locations[0].key
        await self._store_location(cache_key, location_key)
        return location_key

    async def _read_cached_location(self, cache_key: str) -> Optional[str]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get_text(cache_key)
        except Exception as e:
            logger.warning(f"Failed to read cached AccuWeather location {cache_key}: {e}")
            return None

    async def _store_location(self, cache_key: str, location_key: str) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set_text(cache_key, location_key, LOCATION_CACHE_EXPIRE_SECONDS)
        except Exception as e:
            logger.warning(f"Failed to cache AccuWeather location {cache_key}: {e}")

    @staticmethod
    def _normalize(day: AccuWeatherDailyForecast) -> NormalizedForecast:
        """Map an AccuWeather day onto the normalized forecast."""
        min_temp = day.temperature.minimum.value
        max_temp = day.temperature.maximum.value
        feels_like = average_temperature(
            day.real_feel_temperature.minimum.value,
            day.real_feel_temperature.maximum.value
        )
        part = day.day

        humidity = 0
        wind_speed = 0.0
        precipitation = 0.0
        if part is not None:
            if part.relative_humidity is not None and part.relative_humidity.average is not None:
                humidity = part.relative_humidity.average
            if part.wind is not None:
                wind_speed = part.wind.speed.value
            if part.total_liquid is not None:
                precipitation = part.total_liquid.value

        return NormalizedForecast(
            max_temp_c=max_temp,
            min_temp_c=min_temp,
            avg_temp_c=average_temperature(min_temp, max_temp),
            avg_feels_like_c=feels_like,
            condition=part.icon_phrase if part else None,
            humidity_percent=humidity,
            wind_speed_kmh=wind_speed,
            precipitation_mm=precipitation,
            precipitation_chance_percent=part.precipitation_probability if part else None
        )
