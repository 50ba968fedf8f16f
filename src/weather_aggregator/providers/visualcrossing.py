"""Visual Crossing forecast provider."""

import datetime
import logging
from urllib.parse import quote

from weather_aggregator.config import VISUALCROSSING_API_KEY, VISUALCROSSING_BASE_URL
from weather_aggregator.forecast.models import (
    ForecastSuccess, NormalizedForecast, ProviderOutcome, average_temperature
)
from weather_aggregator.providers.base import DATE_NOT_FOUND_REASON, HttpWeatherProvider
from weather_aggregator.providers.models import VisualCrossingDay, VisualCrossingResponse

logger = logging.getLogger(__name__)


class VisualCrossingProvider(HttpWeatherProvider):
    """Daily forecasts from the Visual Crossing timeline API.

    The timeline endpoint is queried for the single requested date, so the
    first returned day is the one we want.
    """

    source_name = "VisualCrossing"

    def __init__(
        self,
        api_key: str = VISUALCROSSING_API_KEY,
        base_url: str = VISUALCROSSING_BASE_URL,
        **kwargs
    ):
        # Relative paths only resolve under the base when it ends with a slash
        if not base_url.endswith("/"):
            base_url = f"{base_url}/"
        super().__init__(base_url=base_url, **kwargs)
        self.api_key = api_key

    async def _fetch_forecast(
        self,
        city: str,
        country_code: str,
        date: datetime.date
    ) -> ProviderOutcome:
        location = quote(f"{city},{country_code}", safe="")
        data = await self._get_json(
            f"{location}/{date.isoformat()}",
            params={"unitGroup": "metric", "include": "days", "key": self.api_key}
        )
        response = VisualCrossingResponse.model_validate(data)

        if not response.days:
            logger.info(f"Visual Crossing returned no days for {city}, {country_code} on {date}")
            return self.failure(DATE_NOT_FOUND_REASON)

        return ForecastSuccess(source=self.source_name, forecast=self._normalize(response.days[0]))

    @staticmethod
    def _normalize(day: VisualCrossingDay) -> NormalizedForecast:
        avg_temp = day.temp
        if avg_temp is None:
            avg_temp = average_temperature(day.tempmin, day.tempmax)

        return NormalizedForecast(
            max_temp_c=day.tempmax,
            min_temp_c=day.tempmin,
            avg_temp_c=avg_temp,
            avg_feels_like_c=None,
            condition=day.conditions,
            humidity_percent=int(day.humidity),
            wind_speed_kmh=day.windspeed,
            precipitation_mm=day.precip if day.precip is not None else 0.0,
            precipitation_chance_percent=None
        )
