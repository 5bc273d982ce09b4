"""Aggregation logic for daily weather summaries."""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Iterable, Optional

from models.records import DailySummary, Observation


class SummaryAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self, location: str, day: date, observations: Iterable[Observation]
    ) -> Optional[DailySummary]:
        count = 0
        total = 0.0
        min_temp: float | None = None
        max_temp: float | None = None
        conditions: Counter[str] = Counter()

        for observation in observations:
            count += 1
            value = observation.temperature
            total += value

            if min_temp is None or value < min_temp:
                min_temp = value
            if max_temp is None or value > max_temp:
                max_temp = value

            conditions[observation.condition] += 1

        if not count or min_temp is None or max_temp is None:
            return None

        # most_common keeps insertion order among ties, so the first seen wins
        dominant, _ = conditions.most_common(1)[0]
        return DailySummary(
            location=location,
            day=day,
            avg_temp=total / count,
            max_temp=max_temp,
            min_temp=min_temp,
            dominant_condition=dominant,
            sample_count=count,
        )
