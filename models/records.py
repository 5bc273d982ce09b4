"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class Observation:
    """One completed weather reading for a location, in canonical units."""

    location: str
    temperature: float
    condition: str
    humidity: int
    wind_speed: float
    observed_at: datetime


@dataclass(frozen=True, slots=True)
class ForecastEntry:
    """A single forecast step."""

    timestamp: datetime
    temperature: float
    condition: str
    humidity: int
    wind_speed: float


@dataclass(frozen=True, slots=True)
class ForecastSeries:
    location: str
    entries: Tuple[ForecastEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class AlertEvent:
    """Emitted when a location's exceedance streak reaches the configured limit."""

    location: str
    threshold: float
    streak: int
    temperature: float
    triggered_at: datetime


@dataclass(frozen=True, slots=True)
class DailySummary:
    """Aggregated readings for one location over one UTC day."""

    location: str
    day: date
    avg_temp: float
    max_temp: float
    min_temp: float
    dominant_condition: str
    sample_count: Optional[int] = None
