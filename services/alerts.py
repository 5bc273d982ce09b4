"""Consecutive-exceedance alerting."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from models.records import AlertEvent

logger = logging.getLogger(__name__)

AlertSink = Callable[[AlertEvent], None]


class AlertEvaluator:
    """Tracks the exceedance streak of a single location.

    Each instance belongs to exactly one poller and is never shared, so it
    carries no lock.
    """

    def __init__(self, location: str, on_alert: Optional[AlertSink] = None) -> None:
        self.location = location
        self._on_alert = on_alert
        self._streak = 0

    @property
    def streak(self) -> int:
        return self._streak

    def reset(self) -> None:
        self._streak = 0

    def evaluate(self, temperature: float, threshold: float, consecutive_limit: int) -> bool:
        """Feed one reading and report whether an alert fired."""
        if temperature > threshold:
            self._streak += 1
        else:
            self._streak = 0

        # A limit of zero or below fires on every reading; no special case.
        if self._streak < consecutive_limit:
            return False

        event = AlertEvent(
            location=self.location,
            threshold=threshold,
            streak=self._streak,
            temperature=temperature,
            triggered_at=datetime.now(timezone.utc),
        )
        self._streak = 0
        self._emit(event, consecutive_limit)
        return True

    def _emit(self, event: AlertEvent, consecutive_limit: int) -> None:
        logger.warning(
            "ALERT! Temperature in %s exceeded %s°C for %d consecutive updates.",
            event.location,
            event.threshold,
            consecutive_limit,
            extra={
                "location": event.location,
                "temperature": event.temperature,
                "threshold": event.threshold,
                "streak": event.streak,
            },
        )
        if self._on_alert is not None:
            self._on_alert(event)
