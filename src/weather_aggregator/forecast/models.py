"""Data models for the forecast aggregator."""

import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Two ASCII letters
COUNTRY_CODE_PATTERN = r"^[A-Za-z]{2}$"


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ForecastRequest(CamelModel):
    """A single aggregation request."""
    city: str = Field(..., description="City name as supplied by the caller")
    country_code: str = Field(..., pattern=COUNTRY_CODE_PATTERN, description="ISO 3166 alpha-2 country code")
    date: datetime.date = Field(..., description="Forecast date")

    @field_validator("country_code")
    @classmethod
    def _uppercase_country_code(cls, value: str) -> str:
        return value.upper()


class NormalizedForecast(CamelModel):
    """One provider's daily forecast in metric units."""
    max_temp_c: float = Field(..., description="Maximum temperature in Celsius")
    min_temp_c: float = Field(..., description="Minimum temperature in Celsius")
    avg_temp_c: Optional[float] = Field(None, description="Average temperature in Celsius")
    avg_feels_like_c: Optional[float] = Field(None, description="Average feels-like temperature in Celsius")
    condition: Optional[str] = Field(None, description="Short condition label")
    humidity_percent: int = Field(..., description="Relative humidity in percent")
    wind_speed_kmh: float = Field(..., description="Wind speed in km/h")
    precipitation_mm: float = Field(..., description="Total precipitation in millimetres")
    precipitation_chance_percent: Optional[int] = Field(None, description="Chance of precipitation in percent")


class ForecastSuccess(CamelModel):
    """Provider outcome carrying a forecast."""
    source: str = Field(..., description="Provider name")
    status: Literal["success"] = "success"
    forecast: NormalizedForecast


class ForecastFailure(CamelModel):
    """Provider outcome carrying the reason no forecast was produced."""
    source: str = Field(..., description="Provider name")
    status: Literal["failure"] = "failure"
    reason: str = Field(..., description="Why the provider produced no forecast")


ProviderOutcome = Annotated[Union[ForecastSuccess, ForecastFailure], Field(discriminator="status")]


class LocationInfo(CamelModel):
    """Location echoed back from the request."""
    name: str = Field(..., description="City name as supplied by the caller")
    country_code: str = Field(..., description="Uppercased country code")


class ResponseMetadata(CamelModel):
    """Response metadata."""
    generated_at: datetime.datetime = Field(..., description="UTC time the response was assembled")


class AggregateResponse(CamelModel):
    """Merged forecasts from every configured provider.

    This is both the HTTP response body and the cache payload.
    """
    date: datetime.date = Field(..., description="Forecast date")
    location: LocationInfo
    forecasts: List[ProviderOutcome] = Field(..., description="One outcome per provider, in invocation order")
    metadata: ResponseMetadata

    @property
    def has_success(self) -> bool:
        return any(isinstance(outcome, ForecastSuccess) for outcome in self.forecasts)


def average_temperature(min_temp_c: float, max_temp_c: float) -> float:
    """Mean of the daily minimum and maximum."""
    return (min_temp_c + max_temp_c) / 2.0


class ErrorResponse(BaseModel):
    """Error response model."""
    detail: str = Field(..., description="Error message")
