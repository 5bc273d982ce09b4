"""OpenWeather current-conditions and forecast client."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx

from models.records import ForecastEntry, ForecastSeries, Observation
from settings import get_settings, require_api_key

KELVIN_OFFSET = 273.15


class ProviderError(RuntimeError):
    """Raised when a location could not be fetched or the payload is unusable."""


def kelvin_to_celsius(value: float) -> float:
    return float(value) - KELVIN_OFFSET


class OpenWeatherClient:
    """Translates OpenWeather payloads into canonical observations."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch_current(self, location: str) -> Observation:
        payload = self._get_json("/weather", location)
        try:
            main = payload["main"]
            return Observation(
                location=location,
                temperature=kelvin_to_celsius(main["temp"]),
                condition=self._condition(payload),
                humidity=int(main["humidity"]),
                wind_speed=float((payload.get("wind") or {}).get("speed", 0.0)),
                observed_at=self._parse_timestamp(payload.get("dt")),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise ProviderError(f"Malformed weather payload for {location!r}: {exc!r}") from exc

    def fetch_forecast(self, location: str) -> ForecastSeries:
        payload = self._get_json("/forecast", location)
        try:
            entries = tuple(
                ForecastEntry(
                    timestamp=self._parse_timestamp(item.get("dt")),
                    temperature=kelvin_to_celsius(item["main"]["temp"]),
                    condition=self._condition(item),
                    humidity=int(item["main"]["humidity"]),
                    wind_speed=float((item.get("wind") or {}).get("speed", 0.0)),
                )
                for item in payload["list"]
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise ProviderError(f"Malformed forecast payload for {location!r}: {exc!r}") from exc
        return ForecastSeries(location=location, entries=entries)

    def _get_json(self, path: str, location: str) -> Dict[str, Any]:
        try:
            response = self._client.get(path, params={"q": location, "appid": self.api_key})
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderError(f"Request for {location!r} timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Provider returned {exc.response.status_code} for {location!r}."
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Request for {location!r} failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"Provider sent invalid JSON for {location!r}.") from exc
        if not isinstance(payload, dict):
            raise ProviderError(f"Unexpected payload type for {location!r}.")
        return payload

    @staticmethod
    def _condition(item: Dict[str, Any]) -> str:
        weather = item.get("weather") or []
        if not weather:
            return "Unknown"
        return str(weather[0].get("main") or "Unknown")

    @staticmethod
    def _parse_timestamp(value: Any) -> datetime:
        if value is None:
            return datetime.now(timezone.utc)
        return datetime.fromtimestamp(int(value), tz=timezone.utc)


@lru_cache
def build_default_provider() -> OpenWeatherClient:
    """Factory that wires the provider from environment settings."""
    settings = get_settings()
    return OpenWeatherClient(
        api_key=require_api_key(settings),
        base_url=settings.base_url,
        timeout=settings.request_timeout,
    )
