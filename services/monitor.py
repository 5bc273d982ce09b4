"""Wiring of pollers, cache, alerting and daily summaries."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, Deque, Dict, Iterable, List, Optional, Protocol

from datastore.summary_table import StorageError, build_default_table
from models.records import AlertEvent, DailySummary, ForecastSeries, Observation
from providers.openweather import build_default_provider
from services.alerts import AlertEvaluator
from services.cache import ObservationCache
from services.poller import LocationPoller
from services.summaries import ObservationHistory, SummaryJob
from settings import ConfigurationError, get_settings

logger = logging.getLogger(__name__)


class WeatherProvider(Protocol):
    def fetch_current(self, location: str) -> Observation: ...

    def fetch_forecast(self, location: str) -> ForecastSeries: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeatherMonitor:
    """Owns one poller and one evaluator per location plus the shared cache."""

    def __init__(
        self,
        provider: WeatherProvider,
        cache: ObservationCache,
        locations: Iterable[str],
        poll_interval: float,
        threshold: float,
        consecutive_limit: int,
        history: Optional[ObservationHistory] = None,
        summary_job: Optional[SummaryJob] = None,
        alert_log_size: int = 50,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.locations = tuple(dict.fromkeys(locations))
        if not self.locations:
            raise ConfigurationError("At least one location must be monitored.")
        self.poll_interval = poll_interval
        self.threshold = threshold
        self.consecutive_limit = consecutive_limit
        self.history = history
        self.summary_job = summary_job
        self._clock = clock
        self._alerts: Deque[AlertEvent] = deque(maxlen=alert_log_size)
        self._alerts_lock = threading.Lock()
        self._stop = threading.Event()
        self._summary_thread: Optional[threading.Thread] = None

        on_observation = history.record if history is not None else None
        self.evaluators: Dict[str, AlertEvaluator] = {
            location: AlertEvaluator(location, on_alert=self._record_alert)
            for location in self.locations
        }
        self.pollers: Dict[str, LocationPoller] = {
            location: LocationPoller(
                location=location,
                provider=provider,
                cache=cache,
                evaluator=self.evaluators[location],
                interval=poll_interval,
                threshold=threshold,
                consecutive_limit=consecutive_limit,
                on_observation=on_observation,
            )
            for location in self.locations
        }

    def start(self) -> None:
        logger.info("Monitoring weather for locations: %s", ", ".join(self.locations))
        for poller in self.pollers.values():
            poller.start()
        if self.summary_job is not None:
            self._summary_thread = threading.Thread(
                target=self._summary_loop, name="daily-summaries", daemon=True
            )
            self._summary_thread.start()

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Signal every worker to stop and wait for in-flight cycles."""
        self._stop.set()
        for poller in self.pollers.values():
            poller.stop()
        for poller in self.pollers.values():
            poller.join(timeout)
        if self._summary_thread is not None:
            self._summary_thread.join(timeout)

    def is_monitored(self, location: str) -> bool:
        return location in self.pollers

    def current(self, location: Optional[str] = None) -> Dict[str, Optional[Observation]]:
        """Latest observation per monitored location; ``None`` means no data yet."""
        snapshot = self.cache.snapshot()
        locations = self.locations if location is None else (location,)
        return {name: snapshot.get(name) for name in locations}

    def forecast(self, location: str) -> ForecastSeries:
        return self.provider.fetch_forecast(location)

    def recent_alerts(self) -> List[AlertEvent]:
        with self._alerts_lock:
            return list(reversed(self._alerts))

    def run_summaries(self, day: date) -> List[DailySummary]:
        if self.summary_job is None:
            raise StorageError("Daily summaries are not configured.")
        return self.summary_job.run(day)

    def _record_alert(self, event: AlertEvent) -> None:
        with self._alerts_lock:
            self._alerts.append(event)

    def close_pending_days(self, today: date) -> List[date]:
        """Summarise every collected day before ``today``.

        Stored days older than yesterday are discarded from the history.
        Yesterday is kept so late readings still reach its row on the next
        pass. Returns the days that were stored.
        """
        if self.summary_job is None:
            return []
        history = self.summary_job.history
        stored: List[date] = []
        for day in history.pending_days():
            if day >= today:
                continue
            try:
                self.summary_job.run(day)
            except StorageError:
                logger.exception("Daily summary job failed", extra={"date": day.isoformat()})
                continue
            stored.append(day)
            if day < today - timedelta(days=1):
                history.discard(day)
        return stored

    def _summary_loop(self) -> None:
        while not self._stop.is_set():
            now = self._clock()
            next_midnight = datetime.combine(
                now.date() + timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc
            )
            if self._stop.wait((next_midnight - now).total_seconds()):
                break
            try:
                self.close_pending_days(next_midnight.date())
            except Exception:
                logger.exception("Daily summary pass failed")


@lru_cache
def build_default_monitor() -> WeatherMonitor:
    """Factory that wires the monitor from environment settings."""
    settings = get_settings()
    history = ObservationHistory()
    summary_job = SummaryJob(history=history, table=build_default_table())
    return WeatherMonitor(
        provider=build_default_provider(),
        cache=ObservationCache(),
        locations=settings.locations,
        poll_interval=settings.poll_interval,
        threshold=settings.alert_threshold,
        consecutive_limit=settings.alert_consecutive,
        history=history,
        summary_job=summary_job,
    )
