"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import Alert, CurrentWeather, Forecast, LocationWeather, Summary
from datastore.summary_table import StorageError, SummaryTable, build_default_table
from providers.openweather import ProviderError
from services.monitor import WeatherMonitor, build_default_monitor

logger = logging.getLogger(__name__)

router = APIRouter()


def get_monitor() -> WeatherMonitor:
    return build_default_monitor()


def get_table() -> SummaryTable:
    return build_default_table()


@router.get(
    "/weather",
    response_model=Dict[str, LocationWeather],
    summary="Latest observation and forecast per monitored location.",
)
def get_weather(
    location: Optional[str] = Query(None, description="Restrict the response to one location."),
    city: Optional[str] = Query(None, description="Alias of location."),
    include_forecast: bool = Query(True, description="Fetch a fresh forecast per location."),
    monitor: WeatherMonitor = Depends(get_monitor),
) -> Dict[str, LocationWeather]:
    wanted = location or city
    if wanted is not None and not monitor.is_monitored(wanted):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location {wanted!r} is not monitored.",
        )

    # The snapshot is taken first; forecasts are fetched without the cache lock.
    current = monitor.current(wanted)
    payload: Dict[str, LocationWeather] = {}
    for name, observation in current.items():
        entry = LocationWeather(
            current_weather=CurrentWeather.model_validate(observation) if observation is not None else None
        )
        if include_forecast:
            try:
                entry.forecast = Forecast.model_validate(monitor.forecast(name))
            except ProviderError as exc:
                logger.warning(
                    "Forecast unavailable for %s", name, extra={"location": name, "reason": str(exc)}
                )
                entry.forecast_error = str(exc)
        payload[name] = entry
    return payload


@router.get(
    "/alerts",
    response_model=List[Alert],
    summary="Recently fired temperature alerts, newest first.",
)
def get_alerts(monitor: WeatherMonitor = Depends(get_monitor)) -> List[Alert]:
    return [Alert.model_validate(event) for event in monitor.recent_alerts()]


@router.get(
    "/summaries",
    response_model=List[Summary],
    summary="Stored daily summaries.",
)
def list_summaries(
    location: Optional[str] = Query(None),
    day: Optional[date] = Query(None, alias="date"),
    table: SummaryTable = Depends(get_table),
) -> List[Summary]:
    try:
        rows = table.list_summaries(location=location, day=day)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    return [Summary.model_validate(row) for row in rows]


@router.post(
    "/summaries",
    response_model=List[Summary],
    status_code=status.HTTP_201_CREATED,
    summary="Aggregate collected readings for a day and store them.",
)
def create_summaries(
    day: Optional[date] = Query(None, alias="date", description="UTC day, defaults to today."),
    monitor: WeatherMonitor = Depends(get_monitor),
) -> List[Summary]:
    target = day or datetime.now(timezone.utc).date()
    try:
        written = monitor.run_summaries(target)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    return [Summary.model_validate(summary) for summary in written]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /weather for current conditions."}
