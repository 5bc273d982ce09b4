from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app


class StubClient:
    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self.weather_calls: List[tuple[Optional[str], bool]] = []
        self.summary_days: List[Optional[date]] = []
        self.weather_payload: Dict[str, Any] = {
            "Delhi": {
                "current_weather": {
                    "location": "Delhi",
                    "temperature": 38.25,
                    "condition": "Haze",
                    "humidity": 20,
                    "wind_speed": 3.0,
                    "observed_at": "2024-06-01T09:30:00Z",
                },
                "forecast": {
                    "location": "Delhi",
                    "entries": [
                        {
                            "timestamp": "2024-06-01T12:00:00Z",
                            "temperature": 39.5,
                            "condition": "Clear",
                            "humidity": 15,
                            "wind_speed": 4.0,
                        }
                    ],
                },
                "forecast_error": None,
            },
            "Mumbai": {"current_weather": None, "forecast": None, "forecast_error": "HTTP 503"},
        }
        self.summary_rows: List[Dict[str, Any]] = [
            {
                "location": "Delhi",
                "day": "2024-06-01",
                "avg_temp": 36.0,
                "max_temp": 39.0,
                "min_temp": 31.0,
                "dominant_condition": "Haze",
                "sample_count": 12,
            }
        ]
        self.closed = False

    def get_weather(self, location: Optional[str] = None, include_forecast: bool = True) -> Dict[str, Any]:
        self.weather_calls.append((location, include_forecast))
        return self.weather_payload

    def get_alerts(self) -> List[Dict[str, Any]]:
        return [
            {
                "location": "Delhi",
                "threshold": 35.0,
                "streak": 2,
                "temperature": 38.0,
                "triggered_at": "2024-06-01T09:30:00Z",
            }
        ]

    def create_summaries(self, day: Optional[date] = None) -> List[Dict[str, Any]]:
        self.summary_days.append(day)
        return self.summary_rows

    def list_summaries(self, location: Optional[str] = None, day: Optional[date] = None) -> List[Dict[str, Any]]:
        return [] if location == "Paris" else self.summary_rows

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(base_url="")

    def factory(base_url: str) -> StubClient:
        client.base_url = base_url
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_current_renders_observation_and_missing_data(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["current"])

    assert result.exit_code == 0
    assert "temperature: 38.2°C" in result.stdout or "temperature: 38.3°C" in result.stdout
    assert "No data yet." in result.stdout
    assert "forecast unavailable: HTTP 503" in result.stdout
    assert stub.weather_calls == [(None, True)]
    assert stub.closed is True


def test_current_passes_location_filter(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://monitor:9000/", "current", "-l", "Delhi", "--no-forecast"])

    assert result.exit_code == 0
    assert stub.weather_calls == [("Delhi", False)]
    assert stub.base_url == "http://monitor:9000/"


def test_base_url_falls_back_to_environment(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["current"], env={"API_BASE_URL": "http://monitor.internal:8000"})

    assert result.exit_code == 0
    assert stub.base_url == "http://monitor.internal:8000"


def test_watch_stops_after_count(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["watch", "--count", "2", "--interval", "0.01"])

    assert result.exit_code == 0
    assert len(stub.weather_calls) == 2
    assert all(include is False for _, include in stub.weather_calls)


def test_watch_timeout_read_from_environment(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["watch"], env={"CLI_WATCH_TIMEOUT": "0"})

    assert result.exit_code == 0
    assert len(stub.weather_calls) == 1


def test_alerts_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["alerts"])

    assert result.exit_code == 0
    assert "Delhi" in result.stdout
    assert "for 2 updates" in result.stdout


def test_summarize_command_sends_date(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["summarize", "--date", "2024-06-01"])

    assert result.exit_code == 0
    assert "Stored 1 summaries." in result.stdout
    assert "mostly Haze" in result.stdout
    assert stub.summary_days == [date(2024, 6, 1)]


def test_summaries_command_without_rows(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["summaries", "--location", "Paris"])

    assert result.exit_code == 0
    assert "No summaries stored." in result.stdout
