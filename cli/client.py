from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import httpx
import typer


class ApiClient:
    """Minimal HTTP client for the weather monitor service."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=30.0)

    def close(self) -> None:
        self._client.close()

    def get_weather(
        self, location: Optional[str] = None, include_forecast: bool = True
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"include_forecast": str(include_forecast).lower()}
        if location:
            params["location"] = location
        try:
            response = self._client.get("/weather", params=params)
            if response.status_code == 404:
                raise typer.BadParameter(f"Location {location} is not monitored.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def get_alerts(self) -> List[Dict[str, Any]]:
        try:
            response = self._client.get("/alerts")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def create_summaries(self, day: Optional[date] = None) -> List[Dict[str, Any]]:
        params = {"date": day.isoformat()} if day else {}
        try:
            response = self._client.post("/summaries", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def list_summaries(
        self, location: Optional[str] = None, day: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {}
        if location:
            params["location"] = location
        if day:
            params["date"] = day.isoformat()
        try:
            response = self._client.get("/summaries", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            self._handle_transport_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    @staticmethod
    def _handle_transport_error(exc: httpx.HTTPError) -> None:
        typer.secho(f"Could not reach the service: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
