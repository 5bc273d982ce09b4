"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CurrentWeather(BaseModel):
    """Latest cached observation for a location."""

    model_config = ConfigDict(from_attributes=True)

    location: str
    temperature: float = Field(..., description="Degrees Celsius.")
    condition: str
    humidity: int = Field(..., ge=0, le=100)
    wind_speed: float = Field(..., description="Metres per second.")
    observed_at: datetime


class ForecastPoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    temperature: float
    condition: str
    humidity: int
    wind_speed: float


class Forecast(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    location: str
    entries: List[ForecastPoint] = Field(default_factory=list)


class LocationWeather(BaseModel):
    """Snapshot entry merged with a forecast fetched after the snapshot was taken."""

    current_weather: Optional[CurrentWeather] = None
    forecast: Optional[Forecast] = None
    forecast_error: Optional[str] = None


class Alert(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    location: str
    threshold: float
    streak: int
    temperature: float
    triggered_at: datetime


class Summary(BaseModel):
    """One stored row of daily aggregates."""

    model_config = ConfigDict(from_attributes=True)

    location: str
    day: date
    avg_temp: float
    max_temp: float
    min_temp: float
    dominant_condition: str
    sample_count: Optional[int] = None
