"""Shared fixtures and test doubles."""

import asyncio
import datetime
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi_cache.backends import Backend

from weather_aggregator.forecast.cache import ForecastCache
from weather_aggregator.forecast.models import (
    ForecastFailure, ForecastSuccess, NormalizedForecast, ProviderOutcome
)

FIXED_NOW = datetime.datetime(2025, 6, 1, 12, 0, tzinfo=datetime.timezone.utc)


class FixedClock:
    """Clock that always returns the same instant."""

    def __init__(self, now: datetime.datetime = FIXED_NOW):
        self._now = now

    def now(self) -> datetime.datetime:
        return self._now


class RecordingBackend(Backend):
    """In-memory cache backend that records calls and can be told to fail."""

    def __init__(
        self,
        fail_get: bool = False,
        fail_set: bool = False,
        hang_get: bool = False,
        hang_set: bool = False
    ):
        self.store: Dict[str, bytes] = {}
        self.gets: List[str] = []
        self.sets: List[Tuple[str, bytes, Optional[int]]] = []
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.hang_get = hang_get
        self.hang_set = hang_set

    async def get_with_ttl(self, key: str) -> Tuple[int, Optional[bytes]]:
        return 0, self.store.get(key)

    async def get(self, key: str) -> Optional[bytes]:
        self.gets.append(key)
        if self.fail_get:
            raise ConnectionError("cache unavailable")
        if self.hang_get:
            await asyncio.sleep(3600)
        return self.store.get(key)

    async def set(self, key: str, value: bytes, expire: Optional[int] = None) -> None:
        self.sets.append((key, value, expire))
        if self.fail_set:
            raise ConnectionError("cache unavailable")
        if self.hang_set:
            await asyncio.sleep(3600)
        self.store[key] = value

    async def clear(self, namespace: Optional[str] = None, key: Optional[str] = None) -> int:
        count = len(self.store)
        self.store.clear()
        return count


class StubProvider:
    """Provider returning a canned outcome, or raising a canned error."""

    def __init__(
        self,
        source_name: str,
        outcome: Optional[ProviderOutcome] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0
    ):
        self.source_name = source_name
        self.outcome = outcome
        self.error = error
        self.delay = delay
        self.calls: List[Tuple[str, str, datetime.date]] = []

    async def get_forecast(self, city: str, country_code: str, date: datetime.date):
        self.calls.append((city, country_code, date))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.outcome


def make_forecast(min_temp: float = 10.0, max_temp: float = 20.0, **overrides) -> NormalizedForecast:
    values = dict(
        max_temp_c=max_temp,
        min_temp_c=min_temp,
        avg_temp_c=(min_temp + max_temp) / 2.0,
        avg_feels_like_c=14.0,
        condition="Partly cloudy",
        humidity_percent=65,
        wind_speed_kmh=12.5,
        precipitation_mm=0.4,
        precipitation_chance_percent=30,
    )
    values.update(overrides)
    return NormalizedForecast(**values)


def success(source: str, **forecast_overrides) -> ForecastSuccess:
    return ForecastSuccess(source=source, forecast=make_forecast(**forecast_overrides))


def failure(source: str, reason: str = "timeout") -> ForecastFailure:
    return ForecastFailure(source=source, reason=reason)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def cache(backend: RecordingBackend) -> ForecastCache:
    return ForecastCache(backend)
