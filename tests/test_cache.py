"""Tests for the forecast cache, cache key policy and wire format."""

import datetime
import json
import uuid

import pytest
from fastapi_cache.backends.inmemory import InMemoryBackend
from pydantic import ValidationError

from conftest import FIXED_NOW, RecordingBackend, failure, success
from weather_aggregator.forecast.cache import ForecastCache, forecast_cache_key
from weather_aggregator.forecast.models import (
    AggregateResponse, ForecastFailure, ForecastRequest, ForecastSuccess,
    LocationInfo, ResponseMetadata
)


def make_response() -> AggregateResponse:
    return AggregateResponse(
        date=datetime.date(2025, 6, 2),
        location=LocationInfo(name="London", country_code="GB"),
        forecasts=[success("AccuWeather"), failure("VisualCrossing", "No forecast found for the requested date")],
        metadata=ResponseMetadata(generated_at=FIXED_NOW)
    )


class TestForecastCacheKey:
    """Tests for forecast_cache_key."""

    def test_key_format(self):
        request = ForecastRequest(city="London", country_code="GB", date=datetime.date(2025, 6, 2))
        assert forecast_cache_key(request) == "LONDON:GB:2025-06-02"

    def test_city_case_does_not_change_key(self):
        date = datetime.date(2025, 6, 2)
        lower = ForecastRequest(city="london", country_code="GB", date=date)
        upper = ForecastRequest(city="LONDON", country_code="GB", date=date)
        assert forecast_cache_key(lower) == forecast_cache_key(upper) == "LONDON:GB:2025-06-02"

    def test_country_code_is_uppercased_on_construction(self):
        request = ForecastRequest(city="Paris", country_code="fr", date=datetime.date(2025, 6, 2))
        assert request.country_code == "FR"
        assert forecast_cache_key(request) == "PARIS:FR:2025-06-02"

    def test_request_is_immutable(self):
        request = ForecastRequest(city="Paris", country_code="FR", date=datetime.date(2025, 6, 2))
        with pytest.raises(ValidationError):
            request.city = "Lyon"


class TestWireFormat:
    """The cached payload is the HTTP payload."""

    def test_serializes_with_camel_case_names(self):
        payload = json.loads(make_response().model_dump_json(by_alias=True))

        assert payload["date"] == "2025-06-02"
        assert payload["location"] == {"name": "London", "countryCode": "GB"}
        assert payload["metadata"]["generatedAt"].startswith("2025-06-01T12:00:00")
        first, second = payload["forecasts"]
        assert first["source"] == "AccuWeather"
        assert first["status"] == "success"
        assert set(first["forecast"]) == {
            "maxTempC", "minTempC", "avgTempC", "avgFeelsLikeC", "condition",
            "humidityPercent", "windSpeedKmh", "precipitationMm", "precipitationChancePercent",
        }
        assert second == {
            "source": "VisualCrossing",
            "status": "failure",
            "reason": "No forecast found for the requested date",
        }

    def test_round_trip_restores_outcome_variants(self):
        original = make_response()

        restored = AggregateResponse.model_validate_json(original.model_dump_json(by_alias=True))

        assert restored == original
        assert isinstance(restored.forecasts[0], ForecastSuccess)
        assert isinstance(restored.forecasts[1], ForecastFailure)


class TestForecastCache:
    """Tests for ForecastCache."""

    @pytest.mark.asyncio
    async def test_miss_returns_none(self, cache):
        assert await cache.get_response("LONDON:GB:2025-06-02") is None

    @pytest.mark.asyncio
    async def test_set_then_get_response(self, cache, backend):
        response = make_response()

        await cache.set_response("LONDON:GB:2025-06-02", response, 1200)

        assert backend.sets[0][0] == "LONDON:GB:2025-06-02"
        assert backend.sets[0][2] == 1200
        assert await cache.get_response("LONDON:GB:2025-06-02") == response

    @pytest.mark.asyncio
    async def test_prefix_is_prepended(self):
        backend = RecordingBackend()
        cache = ForecastCache(backend, prefix="WeatherForecast")

        await cache.set_text("accu-loc:LONDON:GB", "328328", 60)

        assert "WeatherForecast:accu-loc:LONDON:GB" in backend.store
        assert await cache.get_text("accu-loc:LONDON:GB") == "328328"

    @pytest.mark.asyncio
    async def test_invalid_payload_raises(self, cache, backend):
        backend.store["LONDON:GB:2025-06-02"] = json.dumps({"date": "2025-06-02"}).encode()

        with pytest.raises(ValidationError):
            await cache.get_response("LONDON:GB:2025-06-02")

    @pytest.mark.asyncio
    async def test_works_with_in_memory_backend(self):
        cache = ForecastCache(InMemoryBackend(), prefix=f"test-{uuid.uuid4()}")
        response = make_response()

        await cache.set_response("LONDON:GB:2025-06-02", response, 60)

        assert await cache.get_response("LONDON:GB:2025-06-02") == response
        assert await cache.get_response("PARIS:FR:2025-06-02") is None
