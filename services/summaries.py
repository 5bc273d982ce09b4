"""Collection of daily readings and the job that writes summaries."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timezone
from threading import Lock
from typing import Dict, List, Set, Tuple

from datastore.summary_table import StorageError, SummaryTable
from models.records import DailySummary, Observation
from services.aggregator import SummaryAggregator

logger = logging.getLogger(__name__)


class ObservationHistory:
    """Readings grouped by location and UTC day, fed by the pollers.

    A day's readings stay in the history until the day is discarded, so a
    summary can be recomputed from everything seen so far. Readings that
    arrive for a discarded day are dropped.
    """

    def __init__(self) -> None:
        self._readings: Dict[Tuple[str, date], List[Observation]] = defaultdict(list)
        self._discarded: Set[date] = set()
        self._lock = Lock()

    def record(self, observation: Observation) -> None:
        day = observation.observed_at.astimezone(timezone.utc).date()
        with self._lock:
            closed = day in self._discarded
            if not closed:
                self._readings[(observation.location, day)].append(observation)
        if closed:
            logger.warning(
                "Dropping reading for a closed day",
                extra={"location": observation.location, "date": day.isoformat()},
            )

    def readings(self, day: date) -> Dict[str, List[Observation]]:
        """Copy of every reading taken on ``day``, keyed by location."""

        with self._lock:
            return {
                location: list(observations)
                for (location, bucket_day), observations in self._readings.items()
                if bucket_day == day
            }

    def discard(self, day: date) -> None:
        with self._lock:
            for key in [key for key in self._readings if key[1] == day]:
                del self._readings[key]
            self._discarded.add(day)

    def pending_days(self) -> List[date]:
        with self._lock:
            return sorted({day for _, day in self._readings})


class SummaryJob:
    """Turns one day of readings into rows of the summary table."""

    def __init__(
        self,
        history: ObservationHistory,
        table: SummaryTable,
        aggregator: SummaryAggregator | None = None,
    ) -> None:
        self.history = history
        self.table = table
        self.aggregator = aggregator or SummaryAggregator()
        self._lock = Lock()

    def run(self, day: date) -> List[DailySummary]:
        """Write the summary row of each location for ``day``.

        Every run aggregates all readings collected for the day and replaces
        the stored row, so running a day twice still leaves one row per
        location. The first storage error is re-raised once every location
        has been attempted; the readings stay in the history for a retry.
        """
        with self._lock:
            readings = self.history.readings(day)
            written: List[DailySummary] = []
            first_error: StorageError | None = None

            for location in sorted(readings):
                summary = self.aggregator.aggregate(location, day, readings[location])
                if summary is None:
                    continue
                try:
                    self.table.insert_summary(
                        summary.location,
                        summary.dominant_condition,
                        summary.avg_temp,
                        summary.max_temp,
                        summary.min_temp,
                        summary.day,
                    )
                except StorageError as exc:
                    logger.error(
                        "Failed to store summary for %s",
                        location,
                        extra={"location": location, "date": day.isoformat(), "reason": str(exc)},
                    )
                    if first_error is None:
                        first_error = exc
                    continue
                written.append(summary)

        logger.info(
            "Stored daily summaries",
            extra={"date": day.isoformat(), "row_count": len(written)},
        )
        if first_error is not None:
            raise first_error
        return written
