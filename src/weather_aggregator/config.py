"""Configuration settings for the weather forecast aggregator."""

import os
from typing import Final, List
from dotenv import load_dotenv

load_dotenv()

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Inbound API key (X-Api-Key header)
API_KEY: str = os.getenv("API_KEY", "")

# Request window
MAX_FORECAST_DAYS_AHEAD: Final[int] = 5

# Cache configuration
CACHE_BACKEND: str = os.getenv("CACHE_BACKEND", "redis").lower()  # "redis" or "memory"
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_PREFIX: str = os.getenv("CACHE_PREFIX", "WeatherForecast")
CACHE_TIMEOUT_SECONDS: float = float(os.getenv("CACHE_TIMEOUT_SECONDS", "1"))  # per cache read or write
REDIS_SOCKET_TIMEOUT_SECONDS: float = float(os.getenv("REDIS_SOCKET_TIMEOUT_SECONDS", "1"))
FORECAST_CACHE_EXPIRE_SECONDS: Final[int] = 20 * 60
LOCATION_CACHE_EXPIRE_SECONDS: Final[int] = 30 * 24 * 60 * 60

# Provider transport
PROVIDER_ATTEMPT_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_ATTEMPT_TIMEOUT_SECONDS", "2"))
PROVIDER_RETRIES: int = int(os.getenv("PROVIDER_RETRIES", "2"))
PROVIDER_TOTAL_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_TOTAL_TIMEOUT_SECONDS", "5"))

# AccuWeather
ACCUWEATHER_API_KEY: str = os.getenv("ACCUWEATHER_API_KEY", "")
ACCUWEATHER_BASE_URL: str = os.getenv("ACCUWEATHER_BASE_URL", "https://dataservice.accuweather.com")

# WeatherAPI.com
WEATHERAPI_API_KEY: str = os.getenv("WEATHERAPI_API_KEY", "")
WEATHERAPI_BASE_URL: str = os.getenv("WEATHERAPI_BASE_URL", "https://api.weatherapi.com")

# Visual Crossing
VISUALCROSSING_API_KEY: str = os.getenv("VISUALCROSSING_API_KEY", "")
VISUALCROSSING_BASE_URL: str = os.getenv(
    "VISUALCROSSING_BASE_URL",
    "https://weather.visualcrossing.com/VisualCrossingWebServices/rest/services/timeline/"
)

# Rate limiting configuration
RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", "15"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def missing_provider_settings() -> List[str]:
    """Return the names of provider settings that are required but unset."""
    required = {
        "ACCUWEATHER_API_KEY": ACCUWEATHER_API_KEY,
        "ACCUWEATHER_BASE_URL": ACCUWEATHER_BASE_URL,
        "WEATHERAPI_API_KEY": WEATHERAPI_API_KEY,
        "WEATHERAPI_BASE_URL": WEATHERAPI_BASE_URL,
        "VISUALCROSSING_API_KEY": VISUALCROSSING_API_KEY,
        "VISUALCROSSING_BASE_URL": VISUALCROSSING_BASE_URL,
    }
    return [name for name, value in required.items() if not value]
