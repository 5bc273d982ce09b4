"""Latest-observation cache shared between pollers and the query path."""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional

from models.records import Observation


class ObservationCache:
    """Maps each location to its most recent observation.

    A single lock guards every read and write. Observations are immutable, so
    handing out references is safe; ``snapshot`` copies the mapping itself.
    Callers must never hold the lock across a network call, which is why the
    cache only accepts already-built observations.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Observation] = {}
        self._lock = Lock()

    def write(self, location: str, observation: Observation) -> None:
        if observation.location != location:
            raise ValueError(
                f"Observation for {observation.location!r} cannot be stored under {location!r}."
            )
        with self._lock:
            self._entries[location] = observation

    def read(self, location: str) -> Optional[Observation]:
        with self._lock:
            return self._entries.get(location)

    def snapshot(self) -> Dict[str, Observation]:
        """Return a point-in-time copy of every entry."""

        with self._lock:
            return dict(self._entries)

    def __contains__(self, location: object) -> bool:
        with self._lock:
            return location in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
