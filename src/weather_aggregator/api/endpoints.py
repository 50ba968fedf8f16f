"""API endpoints for the weather forecast aggregator."""

import datetime
import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from weather_aggregator.api.security import require_api_key
from weather_aggregator.config import MAX_FORECAST_DAYS_AHEAD
from weather_aggregator.forecast.aggregator import ForecastAggregator
from weather_aggregator.forecast.clock import Clock, SystemClock
from weather_aggregator.forecast.models import (
    COUNTRY_CODE_PATTERN, AggregateResponse, ErrorResponse, ForecastRequest
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/weather",
    tags=["weather"],
    dependencies=[Depends(require_api_key)]
)


def get_aggregator(request: Request) -> ForecastAggregator:
    """Dependency returning the aggregator built at startup."""
    return request.app.state.aggregator


def get_clock(request: Request) -> Clock:
    """Dependency returning the application clock."""
    return getattr(request.app.state, "clock", None) or SystemClock()


@router.get(
    "/forecast",
    response_model=AggregateResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}}
)
async def get_weather_forecast(
    city: Optional[str] = Query(None, description="City name"),
    country_code: Optional[str] = Query(
        None,
        alias="countryCode",
        description="Two-letter country code (case-insensitive)"
    ),
    date: Optional[datetime.date] = Query(None, description="Forecast date in YYYY-MM-DD format"),
    aggregator: ForecastAggregator = Depends(get_aggregator),
    clock: Clock = Depends(get_clock)
) -> AggregateResponse:
    """Get the forecast for one day from every configured provider.

    Args:
        city: City name
        country_code: Two-letter country code
        date: Forecast date, between today and five days ahead (UTC)

    Returns:
        AggregateResponse with one entry per provider

    Raises:
        HTTPException: If parameters are invalid
    """
    forecast_request = validate_forecast_parameters(city, country_code, date, clock.now().date())

    response = await aggregator.handle(forecast_request)
    logger.info(
        f"Returning {len(response.forecasts)} forecasts for "
        f"{forecast_request.city}, {forecast_request.country_code} on {forecast_request.date}"
    )
    return response


def validate_forecast_parameters(
    city: Optional[str],
    country_code: Optional[str],
    date: Optional[datetime.date],
    today: datetime.date
) -> ForecastRequest:
    """
    Validate request parameters and build the forecast request.

    Args:
        city: City name
        country_code: Two-letter country code
        date: Requested forecast date
        today: Current UTC date

    Returns:
        ForecastRequest with the country code uppercased

    Raises:
        HTTPException: If validation fails
    """
    if city is None or not city.strip():
        raise HTTPException(status_code=400, detail="City must not be empty.")

    if country_code is None or not re.fullmatch(COUNTRY_CODE_PATTERN, country_code):
        raise HTTPException(status_code=400, detail="Country code must be exactly 2 letters.")

    if date is None:
        raise HTTPException(status_code=400, detail="Date is required.")

    last_day = today + datetime.timedelta(days=MAX_FORECAST_DAYS_AHEAD)
    if date < today or date > last_day:
        raise HTTPException(
            status_code=400,
            detail=f"Date must be between today and {MAX_FORECAST_DAYS_AHEAD} days from now."
        )

    return ForecastRequest(city=city, country_code=country_code, date=date)


@router.get("/info")
async def get_service_info(aggregator: ForecastAggregator = Depends(get_aggregator)) -> dict:
    """Get service information.

    Returns:
        Service information including configured providers
    """
    return {
        "service": "Weather Forecast Aggregator",
        "version": "0.1.0",
        "providers": [provider.source_name for provider in aggregator.providers],
        "max_days_ahead": MAX_FORECAST_DAYS_AHEAD,
        "cache_ttl_seconds": aggregator.cache_expire_seconds
    }
