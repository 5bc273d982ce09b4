"""Per-location polling worker."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from models.records import Observation
from providers.openweather import ProviderError
from services.alerts import AlertEvaluator
from services.cache import ObservationCache

logger = logging.getLogger(__name__)


class CurrentWeatherSource(Protocol):
    def fetch_current(self, location: str) -> Observation: ...


class LocationPoller:
    """Fetches one location forever: fetch, cache, evaluate, wait.

    The first cycle runs as soon as the thread starts. A failed fetch leaves
    the cache entry and the alert streak exactly as they were. ``stop`` is
    observed before every fetch and interrupts the wait between cycles.
    """

    def __init__(
        self,
        location: str,
        provider: CurrentWeatherSource,
        cache: ObservationCache,
        evaluator: AlertEvaluator,
        interval: float,
        threshold: float,
        consecutive_limit: int,
        on_observation: Optional[Callable[[Observation], None]] = None,
    ) -> None:
        self.location = location
        self.provider = provider
        self.cache = cache
        self.evaluator = evaluator
        self.interval = interval
        self.threshold = threshold
        self.consecutive_limit = consecutive_limit
        self.on_observation = on_observation
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, name=f"poller-{location}", daemon=True
        )

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread.ident is not None:
            self._thread.join(timeout)

    def run_cycle(self) -> bool:
        """Run one fetch/update/evaluate pass; return whether the fetch succeeded."""
        try:
            observation = self.provider.fetch_current(self.location)
        except ProviderError as exc:
            logger.warning(
                "Skipping poll cycle for %s",
                self.location,
                extra={"location": self.location, "reason": str(exc)},
            )
            return False

        self.cache.write(self.location, observation)
        self.evaluator.evaluate(observation.temperature, self.threshold, self.consecutive_limit)
        if self.on_observation is not None:
            self.on_observation(observation)
        logger.debug(
            "Updated %s",
            self.location,
            extra={
                "location": self.location,
                "temperature": observation.temperature,
                "streak": self.evaluator.streak,
            },
        )
        return True

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_cycle()
            except Exception:  # noqa: BLE001 - keep the location alive
                logger.exception(
                    "Unexpected error while polling %s",
                    self.location,
                    extra={"location": self.location},
                )
            if self._stop.wait(self.interval):
                break
