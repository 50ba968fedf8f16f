"""Raw response models for the third-party weather APIs."""

from typing import List, Optional

from pydantic import BaseModel, Field


# AccuWeather (PascalCase JSON)

class AccuWeatherLocation(BaseModel):
    """Entry from the city search endpoint."""
    key: str = Field(..., alias="Key", description="AccuWeather location key")


class AccuWeatherMeasurement(BaseModel):
    value: float = Field(..., alias="Value")


class AccuWeatherTemperatureRange(BaseModel):
    minimum: AccuWeatherMeasurement = Field(..., alias="Minimum")
    maximum: AccuWeatherMeasurement = Field(..., alias="Maximum")


class AccuWeatherRelativeHumidity(BaseModel):
    average: Optional[int] = Field(None, alias="Average")


class AccuWeatherWind(BaseModel):
    speed: AccuWeatherMeasurement = Field(..., alias="Speed")


class AccuWeatherDayPart(BaseModel):
    """Daytime half of a daily forecast (only present with details=true)."""
    icon_phrase: Optional[str] = Field(None, alias="IconPhrase")
    relative_humidity: Optional[AccuWeatherRelativeHumidity] = Field(None, alias="RelativeHumidity")
    wind: Optional[AccuWeatherWind] = Field(None, alias="Wind")
    total_liquid: Optional[AccuWeatherMeasurement] = Field(None, alias="TotalLiquid")
    precipitation_probability: Optional[int] = Field(None, alias="PrecipitationProbability")


class AccuWeatherDailyForecast(BaseModel):
    date: str = Field(..., alias="Date", description="ISO timestamp, e.g. 2025-06-01T07:00:00+01:00")
    temperature: AccuWeatherTemperatureRange = Field(..., alias="Temperature")
    real_feel_temperature: AccuWeatherTemperatureRange = Field(..., alias="RealFeelTemperature")
    day: Optional[AccuWeatherDayPart] = Field(None, alias="Day")


class AccuWeatherForecastResponse(BaseModel):
    """Response from the 5-day daily forecast endpoint."""
    daily_forecasts: List[AccuWeatherDailyForecast] = Field(default_factory=list, alias="DailyForecasts")


# WeatherAPI.com

class WeatherApiCondition(BaseModel):
    text: str


class WeatherApiDay(BaseModel):
    maxtemp_c: float
    mintemp_c: float
    avgtemp_c: Optional[float] = None
    maxwind_kph: float
    totalprecip_mm: float
    avghumidity: int
    daily_chance_of_rain: Optional[int] = None
    condition: WeatherApiCondition


class WeatherApiHour(BaseModel):
    feelslike_c: float


class WeatherApiForecastDay(BaseModel):
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    day: WeatherApiDay
    hour: List[WeatherApiHour] = Field(default_factory=list)


class WeatherApiForecast(BaseModel):
    forecastday: List[WeatherApiForecastDay] = Field(default_factory=list)


class WeatherApiForecastResponse(BaseModel):
    """Response from /v1/forecast.json."""
    forecast: WeatherApiForecast


# Visual Crossing

class VisualCrossingDay(BaseModel):
    datetime: Optional[str] = Field(None, description="Date in YYYY-MM-DD format")
    temp: Optional[float] = None
    tempmax: float
    tempmin: float
    humidity: float
    windspeed: float
    precip: Optional[float] = None
    conditions: Optional[str] = None


class VisualCrossingResponse(BaseModel):
    """Response from the timeline endpoint."""
    days: List[VisualCrossingDay] = Field(default_factory=list)
