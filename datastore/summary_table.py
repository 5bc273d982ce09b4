from __future__ import annotations

import sqlite3
from datetime import date
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import List, Optional

from models.records import DailySummary
from settings import get_settings

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS weather_summary (
    city TEXT,
    avg_temp REAL,
    max_temp REAL,
    min_temp REAL,
    dominant_condition TEXT,
    date TEXT
)
"""

_DELETE = "DELETE FROM weather_summary WHERE city = ? AND date = ?"

_INSERT = """
INSERT INTO weather_summary (city, avg_temp, max_temp, min_temp, dominant_condition, date)
VALUES (?, ?, ?, ?, ?, ?)
"""


class StorageError(RuntimeError):
    """Raised when the summary table cannot be read or written."""


class SummaryTable:
    """SQLite table holding one summary row per city and day.

    Without a ``path`` the table lives in memory for the lifetime of the
    instance.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._lock = Lock()
        try:
            if path is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                str(path) if path is not None else ":memory:",
                check_same_thread=False,
            )
            with self._connection:
                self._connection.execute(_CREATE_TABLE)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Could not open summary table at {path}: {exc}") from exc

    def insert_summary(
        self,
        location: str,
        dominant_condition: str,
        avg_temp: float,
        max_temp: float,
        min_temp: float,
        day: date,
    ) -> None:
        """Store the summary of ``location`` for ``day``, replacing any earlier row."""
        with self._lock:
            try:
                with self._connection:
                    self._connection.execute(_DELETE, (location, day.isoformat()))
                    self._connection.execute(
                        _INSERT,
                        (location, avg_temp, max_temp, min_temp, dominant_condition, day.isoformat()),
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"Could not store summary for {location!r}: {exc}") from exc

    def list_summaries(
        self, location: Optional[str] = None, day: Optional[date] = None
    ) -> List[DailySummary]:
        query = (
            "SELECT city, avg_temp, max_temp, min_temp, dominant_condition, date "
            "FROM weather_summary"
        )
        clauses: list[str] = []
        params: list[str] = []
        if location is not None:
            clauses.append("city = ?")
            params.append(location)
        if day is not None:
            clauses.append("date = ?")
            params.append(day.isoformat())
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date, city"

        with self._lock:
            try:
                rows = self._connection.execute(query, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Could not read summaries: {exc}") from exc

        return [
            DailySummary(
                location=city,
                day=date.fromisoformat(day_text),
                avg_temp=avg_temp,
                max_temp=max_temp,
                min_temp=min_temp,
                dominant_condition=condition,
            )
            for city, avg_temp, max_temp, min_temp, condition, day_text in rows
        ]

    def close(self) -> None:
        with self._lock:
            self._connection.close()


@lru_cache
def build_default_table(path: Optional[str] = None) -> SummaryTable:
    settings = get_settings()
    table_path = settings.summary_db_path if path is None else path
    return SummaryTable(path=Path(table_path) if table_path else None)
