"""Tests for configuration helpers and logging setup."""

import logging

from weather_aggregator import config
from weather_aggregator.logging_config import configure_logging


def test_missing_provider_settings_lists_empty_keys(monkeypatch):
    monkeypatch.setattr(config, "ACCUWEATHER_API_KEY", "a")
    monkeypatch.setattr(config, "WEATHERAPI_API_KEY", "")
    monkeypatch.setattr(config, "VISUALCROSSING_API_KEY", "")

    assert config.missing_provider_settings() == ["WEATHERAPI_API_KEY", "VISUALCROSSING_API_KEY"]


def test_missing_provider_settings_empty_when_configured(monkeypatch):
    for name in ("ACCUWEATHER_API_KEY", "WEATHERAPI_API_KEY", "VISUALCROSSING_API_KEY"):
        monkeypatch.setattr(config, name, "key")

    assert config.missing_provider_settings() == []


def test_cache_ttls():
    assert config.FORECAST_CACHE_EXPIRE_SECONDS == 1200
    assert config.LOCATION_CACHE_EXPIRE_SECONDS == 2592000


def test_configure_logging_installs_single_root_handler():
    configure_logging(debug=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    stream_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(stream_handlers) == 1
    assert logging.getLogger("httpx").propagate is False

    configure_logging()
    assert logging.getLogger().level == logging.INFO
