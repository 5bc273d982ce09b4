from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from providers.openweather import OpenWeatherClient, ProviderError, build_default_provider
from settings import ConfigurationError, get_settings

WEATHER_PAYLOAD = {
    "main": {"temp": 305.15, "feels_like": 307.0, "humidity": 62},
    "weather": [{"main": "Clouds"}],
    "wind": {"speed": 4.1},
    "dt": 1717243200,
}

FORECAST_PAYLOAD = {
    "list": [
        {
            "main": {"temp": 300.15, "humidity": 70},
            "weather": [{"main": "Rain"}],
            "wind": {"speed": 2.0},
            "dt": 1717254000,
        },
        {
            "main": {"temp": 298.15, "humidity": 75},
            "weather": [],
            "wind": {"speed": 1.5},
            "dt": 1717264800,
        },
    ]
}


def _client(handler) -> OpenWeatherClient:
    return OpenWeatherClient(
        api_key="secret",
        base_url="https://weather.test/data/2.5",
        transport=httpx.MockTransport(handler),
    )


def test_fetch_current_converts_kelvin_to_celsius() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["q"] = request.url.params["q"]
        seen["appid"] = request.url.params["appid"]
        return httpx.Response(200, json=WEATHER_PAYLOAD)

    observation = _client(handler).fetch_current("Delhi")

    assert seen == {"path": "/data/2.5/weather", "q": "Delhi", "appid": "secret"}
    assert observation.location == "Delhi"
    assert observation.temperature == pytest.approx(32.0)
    assert observation.condition == "Clouds"
    assert observation.humidity == 62
    assert observation.wind_speed == 4.1
    assert observation.observed_at == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_fetch_forecast_parses_entries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/forecast")
        return httpx.Response(200, json=FORECAST_PAYLOAD)

    series = _client(handler).fetch_forecast("Mumbai")

    assert series.location == "Mumbai"
    assert [entry.temperature for entry in series.entries] == [pytest.approx(27.0), pytest.approx(25.0)]
    assert [entry.condition for entry in series.entries] == ["Rain", "Unknown"]


def test_error_status_raises_provider_error() -> None:
    client = _client(lambda request: httpx.Response(401, json={"message": "Invalid API key"}))

    with pytest.raises(ProviderError, match="401"):
        client.fetch_current("Delhi")


def test_timeout_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(ProviderError, match="timed out"):
        _client(handler).fetch_current("Delhi")


def test_malformed_payload_raises_provider_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"weather": []}))

    with pytest.raises(ProviderError, match="Malformed"):
        client.fetch_current("Delhi")


def test_invalid_json_raises_provider_error() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"<html>"))

    with pytest.raises(ProviderError):
        client.fetch_current("Delhi")


def test_default_provider_requires_api_key(monkeypatch) -> None:
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    get_settings.cache_clear()
    build_default_provider.cache_clear()
    try:
        with pytest.raises(ConfigurationError):
            build_default_provider()
    finally:
        build_default_provider.cache_clear()
        get_settings.cache_clear()
