"""WeatherAPI.com forecast provider."""

import datetime
import logging

from weather_aggregator.config import WEATHERAPI_API_KEY, WEATHERAPI_BASE_URL
from weather_aggregator.forecast.models import (
    ForecastSuccess, NormalizedForecast, ProviderOutcome, average_temperature
)
from weather_aggregator.providers.base import DATE_NOT_FOUND_REASON, HttpWeatherProvider
from weather_aggregator.providers.models import WeatherApiForecastDay, WeatherApiForecastResponse

logger = logging.getLogger(__name__)

CITY_NOT_FOUND_REASON = "No forecast found for the requested city"

# Today plus the five days a request may ask for
FORECAST_DAYS = 6


class WeatherApiProvider(HttpWeatherProvider):
    """Daily forecasts from WeatherAPI.com."""

    source_name = "WeatherAPI"

    def __init__(
        self,
        api_key: str = WEATHERAPI_API_KEY,
        base_url: str = WEATHERAPI_BASE_URL,
        **kwargs
    ):
        super().__init__(base_url=base_url, **kwargs)
        self.api_key = api_key

    async def _fetch_forecast(
        self,
        city: str,
        country_code: str,
        date: datetime.date
    ) -> ProviderOutcome:
        data = await self._get_json(
            "/v1/forecast.json",
            params={"key": self.api_key, "q": f"{city},{country_code}", "days": FORECAST_DAYS}
        )
        response = WeatherApiForecastResponse.model_validate(data)

        forecast_days = response.forecast.forecastday
        if not forecast_days:
            return self.failure(CITY_NOT_FOUND_REASON)

        date_string = date.isoformat()
        matching_day = next((day for day in forecast_days if day.date == date_string), None)
        if matching_day is None:
            logger.info(f"WeatherAPI has no forecast for {date_string} in {city}, {country_code}")
            return self.failure(DATE_NOT_FOUND_REASON)

        return ForecastSuccess(source=self.source_name, forecast=self._normalize(matching_day))

    @staticmethod
    def _normalize(forecast_day: WeatherApiForecastDay) -> NormalizedForecast:
        day = forecast_day.day
        avg_temp = day.avgtemp_c
        if avg_temp is None:
            avg_temp = average_temperature(day.mintemp_c, day.maxtemp_c)

        # Daily feels-like is not reported, so average the hourly values
        if forecast_day.hour:
            feels_like = round(
                sum(hour.feelslike_c for hour in forecast_day.hour) / len(forecast_day.hour), 1
            )
        else:
            feels_like = avg_temp

        return NormalizedForecast(
            max_temp_c=day.maxtemp_c,
            min_temp_c=day.mintemp_c,
            avg_temp_c=avg_temp,
            avg_feels_like_c=feels_like,
            condition=day.condition.text,
            humidity_percent=day.avghumidity,
            wind_speed_kmh=day.maxwind_kph,
            precipitation_mm=day.totalprecip_mm,
            precipitation_chance_percent=day.daily_chance_of_rain
        )
